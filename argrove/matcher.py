"""
Argrove matcher: the state machine that consumes tokens against a grammar.

State (one Matcher per parse, discarded afterwards)
- current command: starts at the root, only ever moves down the tree.
- switch occurrences: keyed by Switch, shared by the whole resolved path since
  switches are inherited and settable at any depth.
- positional values: keyed by command, then by Positional (never inherited).
- open positional slots: per command, a queue in declaration order; a
  repeated slot is never closed.
- selected child: per command, the child the matcher descended into.

Per token
1. LongSwitch/ShortSwitch visible at the current command: duplicate check,
   value from the inline part or the next Bare token, coercion, record.
2. Unknown switch: implicit help (-h/--help), else the default child when a
   switch of that spelling is declared down the default chain (the token is
   retried there), else UnknownSwitchError with the closest spellings as
   suggestions.
3. Bare: open positional slot first, then exact name/alias of a non-default
   subcommand, then the default child (retrying the token there once), else
   UnexpectedArgumentError. A default subcommand is never selected by name.
4. End of input: follow default children, then check required positionals,
   required switches along the path and the subcommand requirement.

Every fault goes through Matcher.trigger(), which attaches the grammar and the
current command so renderers and callers get the full context.
"""
import difflib
import logging
from collections import defaultdict, deque

from .faults import *
from .faults import quote
from .grammar import Arity
from .helper import render
from .outcome import ParseOutcome
from .tokens import Bare, LongSwitch, Separator, ShortSwitch, Tokenizer
from .values import coerce

logger = logging.getLogger(__name__)


class Matcher:
    """
    One parse pass over one argument list.
    """

    def __init__(self, grammar):
        self._grammar = grammar
        self._command = grammar.root
        self._tokens = None
        self._switches = defaultdict(list)
        self._positionals = defaultdict(lambda: defaultdict(list))
        self._slots = {}
        self._selected = {}

    @property
    def command(self):
        return self._command

    @property
    def route(self):
        return self._command.route

    def trigger(self, fault, /, **options):
        """
        Raise a fault with the parse context attached.
        """
        logger.debug("%s at %r: %s", type(fault).__name__, self.route, fault.message)
        trigger(
            fault,
            grammar=self._grammar,
            command=self._command,
            colorful=self._grammar.colorful,
            fancy=self._grammar.fancy,
            **options,
        )

    def match(self, args):
        """
        Consume every token of 'args' and return the root ParseOutcome.
        """
        self._tokens = Tokenizer(args)
        logger.debug("matching %d argument(s) against %r", self._tokens.remaining, self.route)

        for token in self._tokens:
            match token:
                case LongSwitch() | ShortSwitch():
                    self._switch(token)
                case Bare(raw=raw):
                    self._bare(raw)
                case Separator():
                    pass

        self._finish()
        return self._outcome(self._grammar.root)

    def _switch(self, token):
        spelling = token.spelling
        inline = token.value if isinstance(token, LongSwitch) else None

        if (switch := self._grammar.switch(self._command, spelling)) is None:
            if inline is None and self._grammar.helps(self._command, spelling):
                text = render(self._command, colorful=self._grammar.colorful)
                self.trigger(HelpRequested(text.plain, text=text))
            if inline is not None and self._grammar.helps(self._command, spelling):
                self._reject_inline(spelling, inline)
            if self._defaults_declare(spelling):
                child = self._command.default_child
                logger.debug("substituting default subcommand %r for %s", child.name, spelling)
                self._descend(child)
                self._switch(token)
                return
            suggestions = difflib.get_close_matches(spelling, self._grammar.spellings(self._command), 5)
            try:
                hint = "did you mean `%s`? run '%s --help' to see all options" % (suggestions[0], self.route)
            except IndexError:
                hint = "run '%s --help' to see all options" % self.route
            self.trigger(UnknownSwitchError(
                "unexpected flag: `%s`" % spelling,
                input=spelling,
                suggestions=suggestions,
                hint=hint,
            ))

        if switch.arity is not Arity.REPEATED and self._switches[switch]:
            self.trigger(DuplicateSwitchError(
                "flag specified more than once: `%s`" % switch.spelling,
                input=spelling,
                argument=switch,
                hint="`%s` accepts a single occurrence" % switch.spelling,
            ))

        if not switch.valued:
            if inline is not None:
                self._reject_inline(spelling, inline)
            self._switches[switch].append(True)
            return

        if inline is None and (inline := self._tokens.value()) is None:
            self.trigger(MissingValueError(
                "expected a value for `%s`" % switch.spelling,
                input=spelling,
                argument=switch,
                hint="pass it as `%s <%s>` or `--%s=<%s>`" % (spelling, switch.metavar, switch.long, switch.metavar),
            ))
        self._switches[switch].append(self._coerce(switch.type, inline, input=switch.spelling, argument=switch))

    def _defaults_declare(self, spelling):
        """
        True when a switch spelled 'spelling' is visible somewhere down the
        default-child chain of the current command.
        """
        child = self._command.default_child
        while child is not None:
            if self._grammar.switch(child, spelling) is not None:
                return True
            child = child.default_child
        return False

    def _reject_inline(self, spelling, value):
        self.trigger(UnexpectedArgumentError(
            "unexpected argument: %s" % quote(value),
            input=spelling,
            raw=value,
            hint="`%s` is a flag and does not take a value" % spelling,
        ))

    def _coerce(self, value_type, raw, /, *, input, argument):
        try:
            return coerce(value_type, raw, input=input)
        except TypeConversionError as fault:
            self.trigger(fault, argument=argument)

    def _bare(self, raw, retried=False):
        command = self._command
        slots = self._slots.setdefault(command, deque(command.positionals))

        if slots:
            positional = slots[0]
            if positional.arity is not Arity.REPEATED:
                slots.popleft()
            value = self._coerce(positional.type, raw, input=positional.name, argument=positional)
            self._positionals[command][positional].append(value)
            return

        if command.children:
            if isinstance(raw, str) and (child := command.resolve(raw)) is not None and not child.is_default:
                self._descend(child)
                return
            if not retried and (child := command.default_child) is not None:
                logger.debug("substituting default subcommand %r for %s", child.name, quote(raw))
                self._descend(child)
                self._bare(raw, retried=True)
                return

        names = [name for child in command.children if not child.is_default for name in (child.name, *child.aliases)]
        suggestions = difflib.get_close_matches(raw, names, 5) if isinstance(raw, str) else []
        if suggestions:
            hint = "did you mean `%s`? run '%s --help' to see the expected usage" % (suggestions[0], self.route)
        else:
            hint = "remove this extra value or run '%s --help' to see the expected usage" % self.route
        self.trigger(UnexpectedArgumentError(
            "unexpected argument: %s" % quote(raw),
            input=raw,
            raw=raw,
            suggestions=suggestions,
            hint=hint,
        ))

    def _descend(self, child):
        self._check_positionals()
        logger.debug("descending from %r into %r", self._command.name, child.name)
        self._selected[self._command] = child
        self._command = child

    def _check_positionals(self):
        collected = self._positionals[self._command]
        for positional in self._command.positionals:
            if positional.arity is Arity.REQUIRED and not collected[positional]:
                self.trigger(MissingRequiredError(
                    "argument is required: `%s`" % positional.name,
                    argument=positional,
                    hint="usage: %s" % render(self._command).plain.splitlines()[0].removeprefix("Usage: "),
                ))

    def _finish(self):
        while self._command.children:
            if (child := self._command.default_child) is None:
                names = ", ".join(child.name for child in self._command.children)
                self.trigger(MissingRequiredError(
                    "subcommand is required",
                    hint="choose one of: %s" % names,
                ))
            logger.debug("end of input, selecting default subcommand %r", child.name)
            self._descend(child)

        self._check_positionals()
        for switch in self._command.visible:
            if switch.arity is Arity.REQUIRED and not self._switches[switch]:
                self.trigger(MissingRequiredError(
                    "flag is required: `%s`" % switch.spelling,
                    argument=switch,
                    hint="pass `%s%s`" % (switch.spelling, " <%s>" % switch.metavar if switch.valued else ""),
                ))

    def _outcome(self, command):
        child = self._selected.get(command)
        return ParseOutcome(
            command,
            self._switches,
            self._positionals[command],
            None if child is None else self._outcome(child),
        )


__all__ = (
    "Matcher",
)
