"""
Argrove parse outcome: the finished, read-only result of one successful parse.

One ParseOutcome per command of the resolved path; each holds the values of
the switches declared at that command and of its positionals, plus the nested
outcome of the selected subcommand (if the command has children).

Value shapes (by arity)
    optional  boolean switch → bool        valued/positional → value or None
    required  boolean switch → True        valued/positional → value
    repeated  boolean switch → int count   valued/positional → list of values

Lookup
    outcome["jobs"], outcome.jobs, outcome.dry_run (underscores match dashes)
    outcome.occurrences("jobs") → every collected value, in input order

Values whose names collide with the outcome's own attributes (command,
subcommand, values, leaf, route, occurrences, as_dict) are only reachable by
item lookup.
"""
from types import MappingProxyType

from .grammar import Arity


def _shape(spec, collected):
    if not getattr(spec, "valued", True):
        match spec.arity:
            case Arity.REPEATED:
                return len(collected)
            case _:
                return bool(collected)
    match spec.arity:
        case Arity.REPEATED:
            return list(collected)
        case _:
            return collected[0] if collected else None


class ParseOutcome:
    """
    Result of matching an argument list against one command.

    Built by the matcher once the whole input has been consumed; never mutated
    afterwards. Two outcomes are equal when they describe the same command with
    the same values and equal nested outcomes, regardless of the order the
    arguments were given in.
    """

    __slots__ = ("_command", "_values", "_occurrences", "_subcommand")

    def __init__(self, command, switches, positionals, subcommand=None):
        values = {}
        occurrences = {}
        for spec in command.switches:
            occurrences[spec.long] = tuple(switches.get(spec, ()))
            values[spec.long] = _shape(spec, occurrences[spec.long])
        for spec in command.positionals:
            occurrences[spec.name] = tuple(positionals.get(spec, ()))
            values[spec.name] = _shape(spec, occurrences[spec.name])
        self._command = command
        self._values = MappingProxyType(values)
        self._occurrences = MappingProxyType(occurrences)
        self._subcommand = subcommand

    @property
    def command(self):
        return self._command

    @property
    def subcommand(self):
        """
        The outcome of the selected child command, or None.
        """
        return self._subcommand

    @property
    def values(self):
        return self._values

    @property
    def leaf(self):
        """
        The outcome of the last command of the resolved path.
        """
        outcome = self
        while outcome._subcommand is not None:
            outcome = outcome._subcommand
        return outcome

    @property
    def route(self):
        """
        The names of the commands on the resolved path.
        """
        outcome, route = self, []
        while outcome is not None:
            route.append(outcome._command.name)
            outcome = outcome._subcommand
        return tuple(route)

    def _key(self, name):
        if name in self._values:
            return name
        if (dashed := name.replace("_", "-")) in self._values:
            return dashed
        raise KeyError(name)

    def occurrences(self, name, /):
        return self._occurrences[self._key(name)]

    def __getitem__(self, name):
        return self._values[self._key(name)]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"{self._command.name!r} outcome has no value named {name!r}") from None

    def __contains__(self, name):
        try:
            self._key(name)
        except KeyError:
            return False
        return True

    def __iter__(self):
        return iter(self._values)

    def __eq__(self, other):
        if not isinstance(other, ParseOutcome):
            return NotImplemented
        return (
            self._command is other._command
            and dict(self._values) == dict(other._values)
            and self._subcommand == other._subcommand
        )

    __hash__ = None

    def as_dict(self):
        """
        Plain nested dict of the outcome ({"command", "values", "subcommand"}).
        """
        return {
            "command": self._command.name,
            "values": dict(self._values),
            "subcommand": self._subcommand.as_dict() if self._subcommand is not None else None,
        }

    def __rich_repr__(self):
        yield "command", self._command.name
        yield from self._values.items()
        if self._subcommand is not None:
            yield "subcommand", self._subcommand

    def __repr__(self):
        return f"parse-outcome({", ".join(f"{name}={value!r}" for name, value in self.__rich_repr__())})"


__all__ = (
    "ParseOutcome",
)
