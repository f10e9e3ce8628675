"""
setup.py for the jsonlp Python package
"""
from pathlib import Path
from setuptools import setup


# Read README for long description
readme_path = Path(__file__).parent / 'README.md'
long_description = readme_path.read_text(encoding='utf-8') if readme_path.exists() else ''

setup(
    name='jsonlp',
    version='0.1.0',
    author='jsonlp Contributors',
    description='Build LP/MIP models from JSON problem documents and solve them with HiGHS',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=['jsonlp'],
    package_dir={'jsonlp': 'jsonlp'},
    install_requires=[
        'numpy>=1.20.0',
        'scipy>=1.7.0',
        'highspy>=1.7.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'jsonlp-solve=jsonlp.cli:main',
        ],
    },
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Mathematics',
    ],
    zip_safe=False,
)
