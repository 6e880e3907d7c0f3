from __future__ import annotations
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Optional

# Tree inputs can be deeply nested documents; keep call records to one line
_short_repr = reprlib.Repr()
_short_repr.maxlevel = 2
_short_repr.maxdict = 6
_short_repr.maxlist = 6
_short_repr.maxstring = 60
_short_repr.maxother = 60


def log_calls(
    logger_name: str | None = None,
    summarize: Optional[Callable[[Any], str]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to log calls at DEBUG level; failures are logged and re-raised.

    Arguments are logged with a depth- and size-limited repr. ``summarize``
    renders the return value (a built tree, say) instead of its full repr.
    Nothing is rendered unless DEBUG is enabled for the logger.
    """

    def _decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = logger_name or func.__module__
        logger = logging.getLogger(name)
        render_result = summarize or _short_repr.repr

        @wraps(func)
        def _wrapper(*args: Any, **kwargs: Any) -> Any:
            debug = logger.isEnabledFor(logging.DEBUG)
            if debug:
                logger.debug(
                    "Calling %s args=%s kwargs=%s",
                    func.__qualname__,
                    _short_repr.repr(args),
                    _short_repr.repr(kwargs),
                )
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.exception("Error in %s: %s", func.__qualname__, e)
                raise
            if debug:
                logger.debug("%s returned %s", func.__qualname__, render_result(result))
            return result

        return _wrapper

    return _decorator
