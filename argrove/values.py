"""
Argrove value coercion.

Overview
- ValueType: the capability that turns one raw argument into a typed value.
  Raw capabilities (path, bytes, os-string) copy the argument verbatim and
  never fail; text capabilities decode the argument first and delegate to a
  parse-from-text callable.
- resolve(type): map a type tag, a Python type or a callable onto a ValueType.
  Runs once, when a Switch/Positional is declared, so the matcher never looks
  anything up while parsing.
- coerce(value_type, raw, *, input): apply a capability on behalf of a named
  switch/positional and translate failures into TypeConversionError.

Built-in tags
    str        text, verbatim
    int        int(text)
    float      float(text)
    bool       true/false, yes/no, on/off, 1/0 (case-insensitive)
    path       pathlib.Path, built from the raw argument (never fails)
    bytes      os.fsencode(raw) (never fails)
    os-string  the raw argument itself, str or bytes (never fails)

Raw arguments are either str (possibly carrying surrogate escapes, which is
how Python presents undecodable process arguments) or bytes that are not valid
UTF-8. Only text capabilities can reject them.
"""
import os
import pathlib
from types import MappingProxyType

from .faults import GrammarError, TypeConversionError, quote


class ValueType:
    """
    One entry of the type table: a tag name, a parse callable and whether the
    callable consumes the raw argument (raw=True) or decoded text.
    """
    __slots__ = ("_name", "_parse", "_raw")

    def __init__(self, name, parse, /, *, raw=False):
        if not isinstance(name, str) or not name:
            raise TypeError("value type name must be a non-empty string")
        if not callable(parse):
            raise TypeError("value type parser must be callable")
        self._name = name
        self._parse = parse
        self._raw = bool(raw)

    @property
    def name(self):
        return self._name

    @property
    def raw(self):
        return self._raw

    def __call__(self, raw, /):
        if self._raw:
            return self._parse(raw)
        return self._parse(_text(raw))

    def __eq__(self, other):
        if not isinstance(other, ValueType):
            return NotImplemented
        return (self._name, self._parse, self._raw) == (other._name, other._parse, other._raw)

    def __hash__(self):
        return hash((self._name, self._raw))

    def __repr__(self):
        return f"value-type({self._name!r}{', raw=True' * self._raw})"


def _text(raw):
    """
    Decode a raw argument into text or raise ValueError('invalid utf-8 ...').
    """
    try:
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        raw.encode("utf-8")
    except UnicodeError:
        raise ValueError("invalid utf-8: %s" % quote(raw)) from None
    return raw


def _boolean(text):
    match text.strip().lower():
        case "true" | "yes" | "on" | "1":
            return True
        case "false" | "no" | "off" | "0":
            return False
    raise ValueError("expected one of true/false, yes/no, on/off, 1/0, got %r" % text)


def _path(raw):
    return pathlib.Path(os.fsdecode(raw))


def _verbatim(raw):
    return raw


_registry = MappingProxyType({
    "str": ValueType("str", str),
    "int": ValueType("int", int),
    "float": ValueType("float", float),
    "bool": ValueType("bool", _boolean),
    "path": ValueType("path", _path, raw=True),
    "bytes": ValueType("bytes", os.fsencode, raw=True),
    "os-string": ValueType("os-string", _verbatim, raw=True),
})

# Python types accepted in place of their tag.
_aliases = MappingProxyType({
    str: "str",
    int: "int",
    float: "float",
    bool: "bool",
    pathlib.Path: "path",
    pathlib.PurePath: "path",
    bytes: "bytes",
})


def resolve(type, /):
    """
    Resolve a declared value type into its ValueType capability.

    Accepted forms
    - a tag from the built-in table ("int", "path", ...)
    - a Python type with a built-in tag (int, pathlib.Path, ...)
    - a ValueType instance (returned unchanged)
    - any other callable: a custom parse-from-text capability named after it

    Raises
    - GrammarError for an unknown tag string.
    - TypeError for anything that is neither a string nor callable.
    """
    if isinstance(type, ValueType):
        return type
    if isinstance(type, str):
        try:
            return _registry[type]
        except KeyError:
            raise GrammarError(f"unknown value type {type!r} (known: {', '.join(_registry)})") from None
    try:
        return _registry[_aliases[type]]
    except (KeyError, TypeError):
        pass
    if not callable(type):
        raise TypeError("value type must be a tag string or a callable")
    return ValueType(getattr(type, "__name__", "value"), type)


def coerce(value_type, raw, /, *, input):
    """
    Convert one raw argument for the switch/positional called 'input'.

    Returns the typed value, or raises TypeConversionError naming 'input', the
    raw argument and the type tag; the underlying failure message becomes the
    reason part of the message (“can't parse `--jobs`, invalid literal ...”).
    """
    try:
        return value_type(raw)
    except Exception as exception:
        reason = str(exception) or type(exception).__name__
        raise TypeConversionError(
            "can't parse `%s`, %s" % (input, reason),
            input=input,
            raw=raw,
            type=value_type.name,
            exception=exception,
            hint="expected a value of type %s, got %s" % (value_type.name, quote(raw)),
        ) from None


__all__ = (
    "ValueType",
    "resolve",
    "coerce",
)
