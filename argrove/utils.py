"""
Argrove internal helpers.

- Unset: the "argument not given" sentinel, told apart from None because
  None is a meaningful value for several grammar fields.
- coalesce(): swap Unset for a default.
- rename(): give generated functions a readable __name__/__qualname__.
- mirror(): read-only property over a private "_name" field, returning an
  immutable view so grammar objects stay frozen once built.

    >>> coalesce(Unset, 21)
    21
    >>> coalesce(0, 21)
    0
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset singleton.

    Falsey, distinct from None, pickles by reference and refuses subclasses.
    Supports `str | Unset` so isinstance() checks read like the annotations.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError(f"cannot subclass {UnsetType.__name__!r}")

    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __reduce__(self):
        return "Unset"

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    'default' when 'object' is Unset, otherwise 'object' (even when falsey).
    """
    if object is Unset:
        return default
    return object


def rename(*parameters):
    """
    rename(function, name) sets both names in place and returns 'function';
    rename(name) returns a decorator doing the same.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError(f"rename() expected a name, got {type(name).__name__!r}")
        return functools.partial(_rename, name=name)
    if len(parameters) == 2:
        return _rename(*parameters)
    raise TypeError(f"rename() takes 1 or 2 arguments ({len(parameters)} given)")


def _rename(function, name):
    if not callable(function):
        raise TypeError(f"rename() expected a callable, got {type(function).__name__!r}")
    if not isinstance(name, str):
        raise TypeError(f"rename() expected a name, got {type(name).__name__!r}")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"cannot rename {function!r}") from None
    return function


def _freeze(object):
    match object:
        case str() | bytes():
            return object
        case Mapping():
            return MappingProxyType({key: _freeze(value) for key, value in object.items()})
        case Set():
            return frozenset(_freeze(item) for item in object)
        case Sequence():
            return tuple(_freeze(item) for item in object)
    return object


def mirror(name, /):
    """
    Property returning a frozen view of self._<name>: sequences become tuples,
    mappings read-only proxies, sets frozensets.
    """
    if not isinstance(name, str):
        raise TypeError(f"mirror() expected an attribute name, got {type(name).__name__!r}")
    attribute = "_" + name

    def getter(self):
        return _freeze(getattr(self, attribute))

    return property(rename(getter, name))


__all__ = (
    "Unset",
    "UnsetType",
    "coalesce",
    "rename",
    "mirror",
)
