"""
Parameters class for jsonlp
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional


# Engine setting keys understood by every Engine implementation
ABSOLUTE_PRIMAL_TOLERANCE = 'absolute_primal_tolerance'
TIME_LIMIT = 'time_limit'
USER_PROBLEM_FILE = 'user_problem_file'


@dataclass(frozen=True)
class Parameters:
    """
    Configuration for building and solving a problem.

    Instances are immutable; use ``replace`` to derive a modified copy.

    Attributes
    ----------
    absolute_primal_tolerance : float
        Absolute primal feasibility tolerance (default: 1e-6)
    time_limit : float
        Maximum engine wall-clock time in seconds (default: 300.0)
    user_problem_file : str, optional
        When set, the engine also writes the problem to this path in MPS
        format (default: None)
    timing : bool
        Log the duration of every build and solve phase (default: False)
    strict_parsing : bool
        Reject malformed numeric strings and unknown constraint types with
        FormatError instead of tolerating them (default: False)
    verbose : bool
        Let the engine write its own log to the console (default: False)

    Examples
    --------
    >>> param = Parameters(time_limit=60.0)
    >>> param = param.replace(user_problem_file="model.mps")
    """
    absolute_primal_tolerance: float = 1e-6
    time_limit: float = 300.0
    user_problem_file: Optional[str] = None
    timing: bool = False
    strict_parsing: bool = False
    verbose: bool = False

    def __repr__(self):
        return (f"Parameters(absolute_primal_tolerance={self.absolute_primal_tolerance}, "
                f"time_limit={self.time_limit}, "
                f"user_problem_file={self.user_problem_file!r}, "
                f"timing={self.timing})")

    def replace(self, **changes) -> 'Parameters':
        """Return a copy with the given fields changed"""
        return replace(self, **changes)

    def engine_settings(self) -> Dict[str, Any]:
        """
        Tunables to apply to a freshly created settings handle, in order.

        The side-output file is only included when configured.
        """
        settings = {
            ABSOLUTE_PRIMAL_TOLERANCE: float(self.absolute_primal_tolerance),
            TIME_LIMIT: float(self.time_limit),
        }
        if self.user_problem_file:
            settings[USER_PROBLEM_FILE] = str(self.user_problem_file)
        return settings

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Parameters':
        """Create Parameters from dictionary, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in d.items() if key in known})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {f.name: getattr(self, f.name) for f in fields(self)}
