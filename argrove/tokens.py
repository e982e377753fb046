"""
Argrove tokenizer: classifies raw arguments, lazily, one parse at a time.

Token kinds
- LongSwitch(name, value): "--name" (value None) or "--name=value".
- ShortSwitch(name): "-x". Anything longer ("-xyz") keeps its full name and is
  left to the matcher to reject; grouped short switches are not supported.
- Separator(): the literal "--"; every later argument is Bare.
- Bare(raw): everything else, including "-" alone and negative numbers
  ("-5", "-1.5", "-2e3").

Raw arguments
- str: kept as is; text carrying surrogate escapes (undecodable sys.argv
  entries) is always Bare, like the bytes it stands for.
- bytes: decoded when valid UTF-8, otherwise kept as bytes and always Bare.
- os.PathLike: converted with os.fspath first.
"""
import os
import re
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LongSwitch:
    name: str
    value: str | None = None

    @property
    def spelling(self):
        return "--" + self.name


@dataclass(frozen=True, slots=True)
class ShortSwitch:
    name: str

    @property
    def spelling(self):
        return "-" + self.name


@dataclass(frozen=True, slots=True)
class Separator:
    pass


@dataclass(frozen=True, slots=True)
class Bare:
    raw: str | bytes


def _normalize(argument):
    if isinstance(argument, os.PathLike):
        argument = os.fspath(argument)
    if isinstance(argument, bytes):
        try:
            return argument.decode("utf-8")
        except UnicodeDecodeError:
            return argument
    if not isinstance(argument, str):
        raise TypeError(f"argument must be str, bytes or os.PathLike, not {type(argument).__name__}")
    return argument


def _encodable(text):
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _classify(argument):
    """
    Classify one normalized argument outside of the separator's reach.
    """
    if isinstance(argument, bytes) or not _encodable(argument):
        return Bare(argument)
    if argument == "--":
        return Separator()
    if match := re.fullmatch(r"--(?P<name>[^=]*)(=(?P<value>.*))?", argument, re.DOTALL):
        return LongSwitch(match["name"], match["value"])
    if len(argument) < 2 or not argument.startswith("-"):
        return Bare(argument)
    if re.fullmatch(r"-(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?", argument):
        return Bare(argument)
    return ShortSwitch(argument[1:])


class Tokenizer:
    """
    Iterator over the tokens of one argument list.

    The list is materialized once (arguments are normalized eagerly so a bad
    argument type fails before matching starts); classification happens on
    demand. value() lets a value-taking switch claim the next argument.
    """

    def __init__(self, args):
        if isinstance(args, str | bytes):
            raise TypeError("arguments must be a sequence of arguments, not a single string")
        self._args = tuple(map(_normalize, args))
        self._cursor = 0
        self._escaped = False

    def __iter__(self):
        return self

    def __next__(self):
        if (token := self.peek()) is None:
            raise StopIteration
        self._cursor += 1
        if isinstance(token, Separator):
            self._escaped = True
        return token

    def peek(self):
        """
        The next token without consuming it, or None at the end of input.
        """
        if self._cursor >= len(self._args):
            return None
        if self._escaped:
            return Bare(self._args[self._cursor])
        return _classify(self._args[self._cursor])

    def value(self):
        """
        Consume and return the next raw argument if it is a Bare token;
        otherwise leave it in place and return None.
        """
        if isinstance(token := self.peek(), Bare):
            self._cursor += 1
            return token.raw
        return None

    @property
    def remaining(self):
        return len(self._args) - self._cursor


__all__ = (
    "LongSwitch",
    "ShortSwitch",
    "Separator",
    "Bare",
    "Tokenizer",
)
