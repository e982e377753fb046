"""
Argrove faults (parse errors, help requests) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
- ParseError: base exception carrying a message + context options; knows how to
  render itself through rich and how to terminate the process (exit()).
- One subclass per runtime failure kind the matcher can raise, plus
  HelpRequested, which travels through the same channel but is not a failure.
- trigger(): central entry point to attach context to a fault and raise it.

UX goals
- Messages keep the short, backtick-quoted wording developers know from
  minimal flag parsers (“unexpected flag: `--frobnicate`”).
- A single hint line (closest spelling, where to look for help) when one exists.

Integration
- The core raises; it never prints. Callers decide what to do with the fault,
  or use exit() for the conventional 0 (help) / 2 (failure) behavior.
- Grammar construction defects are not faults: GrammarError is raised at
  definition time and is not a ParseError.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - help (10xxx)
      • HELP_REQUESTED
    - switches (111xx)
      • UNKNOWN_SWITCH, DUPLICATE_SWITCH, MISSING_VALUE
    - positionals and routing (112xx)
      • UNEXPECTED_ARGUMENT, MISSING_REQUIRED
    - conversion (113xx)
      • TYPE_CONVERSION
    - caller validation (119xx)
      • CUSTOM

    normalize() lets the host remap codes to its own labels through a
    __codes__ mapping in __main__.
    """
    # --- help (10xxx) ---
    HELP_REQUESTED      = 10001

    # --- switch errors (111xx) ---
    UNKNOWN_SWITCH      = 11112
    DUPLICATE_SWITCH    = 11115
    MISSING_VALUE       = 11117

    # --- positional/routing errors (112xx) ---
    UNEXPECTED_ARGUMENT = 11121
    MISSING_REQUIRED    = 11125

    # --- conversion errors (113xx) ---
    TYPE_CONVERSION     = 11131

    # --- caller validation (119xx) ---
    CUSTOM              = 11901

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def quote(raw, /):
    """
    Render a raw argument the way messages show it: double-quoted text, or the
    bytes literal when the argument is not valid text.
    """
    if isinstance(raw, bytes):
        return repr(raw)
    return '"%s"' % raw.encode("utf-8", "backslashreplace").decode("utf-8").replace('"', '\\"')


class ParseError(Exception):
    """
    Base type of every runtime fault raised by the matcher.

    Instances may also be created directly by callers to report their own
    post-parse validation problems with the same display and exit semantics:

        if outcome.quiet and outcome.verbose:
            raise ParseError("`-q` and `-v` can't be specified at the same time")

    Options
    - context captured at the raise site (input, raw, argument, type, hint,
      suggestions, grammar, command). All optional; renderers tolerate absence.
    """
    code = FaultCode.CUSTOM
    title = "invalid arguments"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def help(self):
        """
        True when this value represents a help request rather than a failure.
        """
        return False

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return self.message

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self):
        return hash((type(self), self.message))

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        palette = defaultdict(str, {
            "fault-program": "bold #FF4D94",
            "fault-code": "bold #FFD600",
            "fault-title": "bold #F87171",
            "fault-message": "#D4D4D8",
            "fault-hint": "italic #22C55E",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style):
            if isinstance(fragment, Text) and colorful:
                return fragment
            return Text(str(fragment), palette[style] if colorful else "")

        if (grammar := self.options.get("grammar")) is not None:
            name = grammar.root.name
        else:
            name = os.path.basename(sys.argv[0]) or "argrove"

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", name), "fault-program"),
            " — ",
            text(self.code.normalize(), "fault-code"),
            " | ",
            text(self.title.title(), "fault-title"),
            " ]",
        )
        body = [text(self.message, "fault-message")]
        if self.hint:
            body.append(text(" → %s" % self.hint, "fault-hint"))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})

    def exit(self):
        """
        Print this fault and terminate the process.

        - help requests go to stdout with exit status 0;
        - genuine failures go to stderr with exit status 2.
        """
        if self.help:
            Console().print(self)
            sys.exit(0)
        console.print(self)
        sys.exit(2)


class UnknownSwitchError(ParseError):
    code = FaultCode.UNKNOWN_SWITCH
    title = "unknown switch"


class UnexpectedArgumentError(ParseError):
    code = FaultCode.UNEXPECTED_ARGUMENT
    title = "unexpected argument"


class MissingValueError(ParseError):
    code = FaultCode.MISSING_VALUE
    title = "missing value"


class DuplicateSwitchError(ParseError):
    code = FaultCode.DUPLICATE_SWITCH
    title = "duplicated switch"


class MissingRequiredError(ParseError):
    code = FaultCode.MISSING_REQUIRED
    title = "missing required argument"


class TypeConversionError(ParseError):
    code = FaultCode.TYPE_CONVERSION
    title = "conversion error"


class HelpRequested(ParseError):
    """
    Not a failure: carries the rendered help of the command that was active
    when the help switch was seen. str() is the plain help text, rich renders
    the styled version.
    """
    code = FaultCode.HELP_REQUESTED
    title = "help"

    @property
    def help(self):
        return True

    def __rich__(self):
        return self.options.get("text") or Text(self.message)


class GrammarError(ValueError):
    """
    A structural defect in a grammar definition (duplicate names, misplaced
    positionals, two default children, ...). Raised once, at construction;
    it reflects a programming error and never goes through exit().
    """


def trigger(fault, /, **options):
    """
    raise a fault with the given runtime options merged in.

    contract
    - fault must be a ParseError; options are merged via copy.replace() so the
      raised value carries the full context (grammar, command, colorful, ...).
    """
    if not isinstance(fault, ParseError):
        raise TypeError("trigger() argument must be a parse error")
    raise copy.replace(fault, **options) from None


__all__ = (
    "FaultCode",
    "ParseError",
    "UnknownSwitchError",
    "UnexpectedArgumentError",
    "MissingValueError",
    "DuplicateSwitchError",
    "MissingRequiredError",
    "TypeConversionError",
    "HelpRequested",
    "GrammarError",
    "trigger",
)
