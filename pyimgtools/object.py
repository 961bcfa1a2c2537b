"""
:class:`~pyimgtools.object.Object` is the base for all configurable classes in *pyimgtools*, most notably the
image processors.

There are a few convenience functions:

    - :func:`~pyimgtools.object.create_object` creates objects from dictionaries.
    - :func:`~pyimgtools.object.get_object` is a wrapper around :func:`~pyimgtools.object.create_object` that can do
      further checks.
"""

from __future__ import annotations

import copy
import inspect
import logging
from abc import ABCMeta
from typing import Any, TypeVar, overload

log = logging.getLogger(__name__)


"""Class of an Object."""
ObjectClass = TypeVar("ObjectClass")


@overload
def get_object(
    config_or_object: dict[str, Any] | ObjectClass | type[ObjectClass],
    object_class: type[ObjectClass] | ABCMeta,
    **kwargs: Any,
) -> ObjectClass: ...


@overload
def get_object(
    config_or_object: dict[str, Any] | ObjectClass | type[ObjectClass], object_class: None = None, **kwargs: Any
) -> ObjectClass | Any | None: ...


def get_object(
    config_or_object: dict[str, Any] | ObjectClass | type[ObjectClass],
    object_class: type[ObjectClass] | ABCMeta | None = None,
    **kwargs: Any,
) -> ObjectClass | Any | None:
    """Creates object from config or returns object directly, both optionally after check of type.

    Args:
        config_or_object: A configuration dict or an object itself to create/check. If a dict with a class key
            is given, a new object is created.
        object_class: Class to check object against.

    Returns:
        (New) object (created from config) that optionally passed class check.

    Raises:
        TypeError: If the object does not match the given class.
    """

    if config_or_object is None:
        raise TypeError("No config or object given.")

    elif isinstance(config_or_object, dict):
        # a dict is given, so create object, given kwargs take precedence
        obj = create_object({**config_or_object, **kwargs})

    elif inspect.isclass(config_or_object):
        # config_or_object is a type, so create it using its constructor
        obj = config_or_object(**kwargs)

    else:
        # just use given object
        obj = config_or_object

    # do we need a type check and does the given object pass?
    if object_class is not None and not isinstance(obj, object_class):
        raise TypeError("Provided object is not of requested type %s." % object_class.__name__)
    return obj


def get_class_from_string(class_name: str) -> Any:
    """Get class from a given string.

    Args:
        class_name: Name of class as string, e.g. "pyimgtools.images.processors.transform.Resize".

    Returns:
        Actual class.
    """

    parts = class_name.split(".")
    module_name = ".".join(parts[:-1])
    cls = __import__(module_name)
    for comp in parts[1:]:
        cls = getattr(cls, comp)
    return cls


def create_object(config: dict[str, Any], *args: Any, **kwargs: Any) -> Any:
    """Create object from dict config.

    Args:
        config: Config to create object from
        *args: Parameters to be passed to object.
        **kwargs: Parameters to be passed to object.

    Returns:
        Created object.
    """

    # get class name
    if "class" not in config:
        raise TypeError("No class given in config.")
    class_name = config["class"]

    # create class
    klass = get_class_from_string(class_name)

    # remove class from kwargs
    cfg = copy.copy(config)
    del cfg["class"]

    # create object
    log.debug("Creating object of class %s.", class_name)
    return klass(*args, **cfg, **kwargs)


class Object:
    """Base class for all objects in *pyimgtools*."""

    def __init__(self, **kwargs: Any):
        """
        .. note::

            Objects that hold resources should be opened and closed using :meth:`~pyimgtools.object.Object.open` and
            :meth:`~pyimgtools.object.Object.close`, respectively.

        Using :meth:`~pyimgtools.object.Object.add_child_object`, other objects can be (created and) attached to this
        object, which then automatically handles calls to :meth:`~pyimgtools.object.Object.open` and
        :meth:`~pyimgtools.object.Object.close` on those objects.
        """
        if kwargs:
            log.warning("Unused parameters for %s: %s", self.__class__.__name__, ", ".join(kwargs.keys()))

        # child objects
        self._child_objects: list[Any] = []

        # opened?
        self._opened = False

    def add_child_object(
        self,
        config_or_object: dict[str, Any] | ObjectClass | type[ObjectClass],
        object_class: Any = None,
        **kwargs: Any,
    ) -> Any:
        """Create a new sub-module, which will automatically be opened and closed.

        Args:
            config_or_object: Module definition
            object_class: Class to check object against.

        Returns:
            The created module.
        """
        obj = get_object(config_or_object, object_class, **kwargs)
        self._child_objects.append(obj)
        return obj

    async def open(self) -> None:
        """Open object."""

        # open child objects
        for obj in self._child_objects:
            if hasattr(obj, "open"):
                if inspect.iscoroutinefunction(obj.open):
                    await obj.open()
                else:
                    obj.open()

        # success
        self._opened = True

    @property
    def opened(self) -> bool:
        """Whether object has been opened."""
        return self._opened

    async def close(self) -> None:
        """Close object."""

        # close child objects
        for obj in self._child_objects:
            if hasattr(obj, "close"):
                if inspect.iscoroutinefunction(obj.close):
                    await obj.close()
                else:
                    obj.close()
        self._opened = False


__all__ = ["get_object", "get_class_from_string", "create_object", "Object"]
