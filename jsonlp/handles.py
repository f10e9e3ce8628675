"""
Scoped ownership of engine tokens
"""
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class EngineHandle:
    """
    Owns one opaque engine token and releases it exactly once.

    The token is released by ``free()``, by leaving a ``with`` block, or when
    the handle is garbage collected, whichever comes first. A handle that
    never received a token (``token is None``) frees as a no-op, and freeing
    twice does nothing the second time.

    Parameters
    ----------
    kind : str
        What the token is (``problem``, ``settings``, ``solution``)
    release : callable
        Engine primitive that destroys the token

    Examples
    --------
    >>> handle = EngineHandle('problem', engine.destroy_problem)
    >>> handle.acquire(engine.create_ranged_problem(model))
    >>> with handle:
    ...     engine.is_mip(handle.token)
    """

    def __init__(self, kind: str, release: Callable[[Any], None]):
        self.kind = kind
        self._release = release
        self._token: Optional[Any] = None
        self._freed = False

    @property
    def token(self) -> Any:
        """The engine token"""
        if self._freed:
            raise RuntimeError(f"{self.kind} handle has been freed")
        if self._token is None:
            raise RuntimeError(f"{self.kind} handle was never created")
        return self._token

    @property
    def created(self) -> bool:
        return self._token is not None

    @property
    def freed(self) -> bool:
        return self._freed

    def acquire(self, token: Any) -> Any:
        """Take ownership of a token returned by the engine"""
        if self._freed:
            raise RuntimeError(f"{self.kind} handle has been freed")
        if self._token is not None:
            raise RuntimeError(f"{self.kind} handle already holds a token")
        self._token = token
        return token

    def free(self):
        """
        Release the token.

        After calling this method, the handle cannot be used anymore.
        """
        if self._freed:
            return
        self._freed = True
        token, self._token = self._token, None
        if token is not None:
            logger.debug("Destroying %s", self.kind)
            self._release(token)

    def __del__(self):
        """Destructor - release the token when the handle is garbage collected"""
        if not getattr(self, '_freed', True):
            self.free()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - release the token"""
        self.free()
        return False

    def __repr__(self):
        if self._freed:
            return f"<jsonlp.EngineHandle {self.kind} (freed)>"
        if self._token is None:
            return f"<jsonlp.EngineHandle {self.kind} (empty)>"
        return f"<jsonlp.EngineHandle {self.kind}>"
