"""
Scalar parsing for bound values found in problem documents
"""
import logging
import math
import re
from typing import Any

from .exceptions import FormatError

logger = logging.getLogger(__name__)

POSITIVE_INFINITY_SENTINELS = frozenset(("inf", "infinity"))
NEGATIVE_INFINITY_SENTINELS = frozenset(("-inf", "-infinity", "ninf"))

# Leading numeric literal, the way strtod consumes it: decimal, hexadecimal,
# inf/infinity or nan, each with an optional sign (letters case-insensitive)
_NUMERIC_PREFIX = re.compile(r"""
    \s*(?P<sign>[+-]?)
    (?:
        (?P<hex>0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?)
      | (?P<inf>(?i:inf(?:inity)?))
      | (?P<nan>(?i:nan)(?:\([0-9A-Za-z_]*\))?)
      | (?P<dec>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    )
""", re.VERBOSE)


def parse_numeric_value(node: Any, strict: bool = False) -> float:
    """
    Convert a single JSON scalar into a float.

    Parameters
    ----------
    node : Any
        Decoded JSON value (number, string, or anything else)
    strict : bool, optional
        Raise FormatError for strings that are neither a sentinel nor a
        complete numeric literal instead of parsing them best-effort.

    Returns
    -------
    float
        The numeric value. Infinity sentinels map to ``math.inf`` /
        ``-math.inf``; other strings are read like C's ``strtod`` (decimal, hexadecimal,
        ``inf``/``infinity`` and ``nan`` in any case, optionally signed);
        strings without a leading numeric literal and non-scalar nodes map
        to ``0.0``.

    Examples
    --------
    >>> parse_numeric_value(2.5)
    2.5
    >>> parse_numeric_value("-infinity")
    -inf
    >>> parse_numeric_value("abc")
    0.0
    """
    # bool is an int subclass but JSON true/false is not a number
    if isinstance(node, bool):
        return 0.0
    if isinstance(node, (int, float)):
        return float(node)
    if isinstance(node, str):
        return _parse_string(node, strict)
    return 0.0


def _parse_string(text: str, strict: bool) -> float:
    if text in POSITIVE_INFINITY_SENTINELS:
        return math.inf
    if text in NEGATIVE_INFINITY_SENTINELS:
        return -math.inf

    match = _NUMERIC_PREFIX.match(text)
    if strict and (match is None or match.end() != len(text)):
        raise FormatError(f"Invalid numeric value: {text!r}")
    if match is None:
        logger.warning("Non-numeric value %r parsed as 0.0", text)
        return 0.0
    if match.end() != len(text):
        logger.warning("Trailing characters ignored in numeric value %r", text)

    if match.group('hex'):
        value = float.fromhex(match.group('hex'))
    elif match.group('inf'):
        value = math.inf
    elif match.group('nan'):
        return math.nan
    else:
        value = float(match.group('dec'))
    return -value if match.group('sign') == '-' else value
