from __future__ import annotations

import threading
import time
from typing import Optional, List, NamedTuple, Any, Type, Dict, Callable


class ImageToolsError(Exception):
    """Base class for all exceptions"""

    def __init__(self, message: Optional[str] = None):
        Exception.__init__(self, message)
        self.message = message

    def __str__(self) -> str:
        msg = f"<{self.__class__.__name__}>"
        if self.message is not None:
            msg += f" {self.message}"
        return msg


class _Meta(type):
    """Metaclass for defining exceptions."""

    def __call__(cls, *args: Any, **kwargs: Any) -> ImageToolsError:
        """Called when you call MyNewClass()"""
        exception: ImageToolsError = type.__call__(cls, *args, **kwargs)
        return handle_exception(exception)


#######################################


class InputError(ImageToolsError, metaclass=_Meta):
    """Malformed geometry, undecodable bytes, missing parameter or invalid enum value."""

    pass


class ProcessingError(ImageToolsError, metaclass=_Meta):
    """An operation could not be performed with the given parameters."""

    pass


class EncodingError(ImageToolsError, metaclass=_Meta):
    """Serializing a result into the requested output format failed."""

    pass


#######################################


class SevereError(ImageToolsError):
    """Severe exception that is raised after multiple raised other exceptions."""

    def __init__(self, exception: ImageToolsError):
        ImageToolsError.__init__(self, "A severe error has occurred.")
        # never encapsulate a SevereError
        self.exception = exception.exception if isinstance(exception, SevereError) else exception


class LoggedException(NamedTuple):
    time: float
    exception: ImageToolsError


class ExceptionHandler(NamedTuple):
    exc_type: Type[ImageToolsError]
    limit: int
    timespan: Optional[float] = None
    callback: Optional[Callable[[ImageToolsError], None]] = None
    throw: bool = False


#######################################


_local_exceptions: Dict[Type[ImageToolsError], List[LoggedException]] = {}
_handlers: List[ExceptionHandler] = []

# errors are created on worker threads as well
_lock = threading.RLock()


def clear() -> None:
    with _lock:
        _local_exceptions.clear()
        _handlers.clear()


def register_exception(
    exc_type: Type[ImageToolsError],
    limit: int,
    timespan: Optional[float] = None,
    callback: Optional[Callable[[ImageToolsError], None]] = None,
    throw: bool = False,
) -> None:
    """Register a handler that triggers once an exception type has been raised often enough.

    Args:
        exc_type: Exception class to watch.
        limit: Number of exceptions that triggers the handler.
        timespan: If given, only exceptions within the last timespan seconds are counted.
        callback: Called with the exception that triggered the handler.
        throw: If True, the triggering exception is escalated to a SevereError.
    """
    with _lock:
        _handlers.append(ExceptionHandler(exc_type, limit, timespan, callback, throw))


def handle_exception(exception: ImageToolsError) -> ImageToolsError:
    with _lock:
        # store exception itself
        _store_exception(exception)

        # now check, whether something is severe
        triggered_handlers = _check_severity()

    # filter triggered handlers by those that actually handle the exception
    handlers = list(filter(lambda h: isinstance(exception, h.exc_type), triggered_handlers))

    # check all handlers
    for h in handlers:
        if h.callback is not None:
            h.callback(exception)

    # if we got any handlers triggered and throw is set on any, escalate to a SevereError
    if len(handlers) > 0 and any([h.throw for h in handlers]):
        return SevereError(exception=exception)

    # else just return exception itself
    return exception


def _store_exception(exception: ImageToolsError) -> None:
    # get all classes from mro
    for e in type(exception).__mro__:
        # only our own exceptions
        if not issubclass(e, ImageToolsError):
            continue

        # is it handled by any handler?
        if not any([e == h.exc_type for h in _handlers]):
            continue

        # log it
        le = LoggedException(time=time.time(), exception=exception)
        if e not in _local_exceptions:
            _local_exceptions[e] = []
        _local_exceptions[e].append(le)


def _check_severity() -> List[ExceptionHandler]:
    """Checks all handlers against all raised exceptions and returns a list of triggered exception handlers.

    Returns:
        List of triggered handlers.
    """

    # loop all _handlers
    triggered: List[ExceptionHandler] = []
    for h in _handlers:
        exceptions = _local_exceptions.get(h.exc_type, [])

        # got a timespan?
        if h.timespan is None:
            # count all
            count = len(exceptions)

        else:
            # count all within timespan
            earliest = time.time() - h.timespan
            count = len(list(filter(lambda le: le.time >= earliest, exceptions)))

        # more than limit?
        if count >= h.limit:
            triggered.append(h)

    # return full list
    return triggered


__all__ = [
    "ImageToolsError",
    "InputError",
    "ProcessingError",
    "EncodingError",
    "SevereError",
    "register_exception",
    "handle_exception",
    "clear",
]
