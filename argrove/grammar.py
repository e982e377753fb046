r"""
Argrove grammar model: the immutable tree a command line is matched against.

Overview
- Specs
  • Switch: named argument (`--long`, optionally `-s`), boolean or value-taking,
    with optional/required/repeated arity. Declared on a command and inherited
    by every descendant command.
  • Positional: unnamed-on-the-command-line argument, consumed by declaration
    order, with required/optional/repeated arity. Never inherited.
  • Command: a named node with aliases, positionals, switches, children and
    at most one default child.
- Grammar: wraps a root Command, precomputes the per-command switch lookup
  tables, and is the entry point for parsing and help rendering.

Validation (eager, at construction)
- Switch names must match r"--[^\W\d_](-?[^\W_]+)*" (long) and r"-[^\W\d_]"
  (short); exactly one long name, at most one short name.
- Positional ordering: required ones first, then optional ones, then at most
  one repeated positional, which must be last.
- Within the set visible at any command (own + inherited switches, own
  positionals) long names, short names and positional names are unique.
- Children names and aliases are unique among siblings; at most one child is
  the default; a command has at most one parent.
Defects raise GrammarError (or TypeError for wrong argument types): they are
programming errors, not user-input errors.

Quick example:
    >>> from argrove import Command, Grammar, Positional, Switch
    >>> grammar = Grammar(Command(
    ...     "app",
    ...     switches=[Switch("-v", "--verbose", arity="repeated")],
    ...     children=[
    ...         Command("build", [Positional("target", arity="optional")], default=True),
    ...         Command("clean"),
    ...     ],
    ... ))
    >>> grammar.parse(["-v", "docs"]).subcommand.target
    'docs'
"""
import copy
import functools
import operator
import re
import sys
from enum import StrEnum
from types import MappingProxyType

from rich.text import Text

from .faults import GrammarError, ParseError
from .utils import *
from .values import resolve


class Arity(StrEnum):
    """
    Cardinality of a switch or positional.

    - OPTIONAL: zero or one occurrence.
    - REQUIRED: exactly one occurrence.
    - REPEATED: any number of occurrences (positional: all remaining values).
    """
    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"


class GrammarType(type):
    """
    Metaclass that turns grammar specs into introspectable, read-only records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the private "_name" attribute (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_doc(cls, metadata, /):
    """
    Internal: normalize the optional 'doc' field (str | Text | Unset).

    Strings are trimmed and must not be empty; Unset becomes None.
    """
    if not isinstance(doc := metadata["doc"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'doc' must be a string")
    elif isinstance(doc, str) and not (doc := doc.strip()):
        raise GrammarError(f"{cls.__typename__} 'doc' cannot be empty")
    metadata["doc"] = coalesce(doc)


def _sanitize_arity(cls, metadata, /):
    try:
        metadata["arity"] = Arity(metadata["arity"])
    except ValueError:
        raise GrammarError(
            f"{cls.__typename__} 'arity' must be one of {', '.join(map(str, Arity))}"
        ) from None


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: split switch spellings into exactly one long and at most one short.

    Accepted forms
    - long: "--name", "--long-name" (unicode letters allowed, no underscores)
    - short: "-x" (a single letter)
    """
    long = short = Unset
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least a long name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise GrammarError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"--[^\W\d_](-?[^\W_]+)*", name):
            if long:
                raise GrammarError(f"{cls.__typename__} cannot have more than one long name ({long!r}, {name!r})")
            long = name[2:]
        elif re.fullmatch(r"-[^\W\d_]", name):
            if short:
                raise GrammarError(f"{cls.__typename__} cannot have more than one short name ({short!r}, {name!r})")
            short = name[1:]
        else:
            raise GrammarError(f"{cls.__typename__} name {name!r} must look like '--long-name' or '-s'")

    if not long:
        raise GrammarError(f"{cls.__typename__} must specify a long name (short names are only aliases)")

    del metadata["names"]
    metadata["long"] = long
    metadata["short"] = coalesce(short)


def _sanitize_value(cls, metadata, /):
    """
    Internal: normalize the optional value descriptor of a switch.

    - neither metavar nor type: boolean switch (metavar/type become None).
    - type only: the metavar defaults to the long name.
    - metavar only: the type defaults to "str".
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise GrammarError(f"{cls.__typename__} 'metavar' cannot be empty")

    if metavar is Unset and metadata["type"] is Unset:
        metadata["metavar"] = metadata["type"] = None
        return

    metadata["metavar"] = coalesce(metavar, metadata["long"])
    metadata["type"] = resolve(coalesce(metadata["type"], "str"))


class Switch(metaclass=GrammarType):
    """
    Named switch declaration.

    Highlights
    - Spelled `--long` with an optional single-letter `-s` alias.
    - Boolean unless a value descriptor (metavar and/or type) is given.
    - Arity: optional (default), required, or repeated.
    - Inherited: visible at the declaring command and all of its descendants.

    Outcome shape
    - boolean: optional → bool, required → True, repeated → occurrence count.
    - valued: optional → value or None, required → value, repeated → list.
    """

    __introspectable__ = (
        "long",
        "short",
        "arity",
        "metavar",
        "type",
        "doc",
    )

    def __init__(self, *names, arity=Arity.OPTIONAL, metavar=Unset, type=Unset, doc=Unset):
        metadata = {
            "names": names,
            "arity": arity,
            "metavar": metavar,
            "type": type,
            "doc": doc,
        }
        _sanitize_names(type_of(self), metadata)
        _sanitize_arity(type_of(self), metadata)
        _sanitize_value(type_of(self), metadata)
        _sanitize_doc(type_of(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def valued(self):
        """
        True when the switch takes a value.
        """
        return self._type is not None

    @property
    def spelling(self):
        return "--" + self._long

    @property
    def spellings(self):
        """
        All accepted spellings, short alias first.
        """
        if self._short:
            return "-" + self._short, "--" + self._long
        return "--" + self._long,


class Positional(metaclass=GrammarType):
    """
    Positional argument declaration: filled by bare arguments in
    declaration order. Required by default; a repeated positional takes every
    remaining bare argument.
    """

    __introspectable__ = (
        "name",
        "arity",
        "type",
        "doc",
    )

    def __init__(self, name, /, *, arity=Arity.REQUIRED, type="str", doc=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type_of(self).__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[^\W\d]\w*(-\w+)*", name := name.strip()):
            raise GrammarError(f"{type_of(self).__typename__} name {name!r} is not a valid identifier")

        metadata = {
            "name": name,
            "arity": arity,
            "type": resolve(type),
            "doc": doc,
        }
        _sanitize_arity(type_of(self), metadata)
        _sanitize_doc(type_of(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)


def _process_positionals(cls, metadata):
    """
    Validate positional ordering: required, then optional, then one repeated.
    """
    rank = 0
    ranks = {Arity.REQUIRED: 0, Arity.OPTIONAL: 1, Arity.REPEATED: 2}
    names = set()
    for positional in metadata["positionals"]:
        if not isinstance(positional, Positional):
            raise TypeError(f"{cls.__typename__} 'positionals' must contain positionals")
        if positional.name in names:
            raise GrammarError(f"{cls.__typename__} positional name {positional.name!r} is already in use")
        names.add(positional.name)
        if rank == 2:
            raise GrammarError(f"{cls.__typename__} repeated positional must be the last positional")
        if ranks[positional.arity] < rank:
            raise GrammarError(
                f"{cls.__typename__} {positional.arity} positional {positional.name!r} cannot follow an optional one"
            )
        rank = ranks[positional.arity]
    metadata["positionals"] = tuple(metadata["positionals"])


def _process_switches(cls, metadata):
    """
    Validate own switches: unique long names, short names, and no clash with
    the command's positional names (they share the outcome namespace).
    """
    longs = {positional.name: "positional" for positional in metadata["positionals"]}
    shorts = set()
    for switch in metadata["switches"]:
        if not isinstance(switch, Switch):
            raise TypeError(f"{cls.__typename__} 'switches' must contain switches")
        if switch.long in longs:
            raise GrammarError(f"{cls.__typename__} name {switch.long!r} is already in use by a {longs[switch.long]}")
        longs[switch.long] = "switch"
        if switch.short:
            if switch.short in shorts:
                raise GrammarError(f"{cls.__typename__} short name '-{switch.short}' is already in use")
            shorts.add(switch.short)
    metadata["switches"] = tuple(metadata["switches"])


def _process_children(cls, metadata):
    """
    Validate children: unique names/aliases among siblings and at most one
    default child. Builds the exact-match route table.
    """
    routes = metadata["routes"] = {}
    default = Unset
    for child in metadata["children"]:
        if not isinstance(child, Command):
            raise TypeError(f"{cls.__typename__} 'children' must contain commands")
        for name in (child.name, *child.aliases):
            if name in routes:
                raise GrammarError(f"{cls.__typename__} subcommand name {name!r} is already in use")
            routes[name] = child
        if child.is_default:
            if default:
                raise GrammarError(
                    f"{cls.__typename__} cannot have more than one default subcommand ({default.name!r}, {child.name!r})"
                )
            default = child
    metadata["children"] = tuple(metadata["children"])
    metadata["default_child"] = coalesce(default)


def _process_inheritance(self):
    """
    Check this command's switches against everything visible in its subtree:
    inherited switches may not be redeclared (no shadowing) and may not clash
    with a descendant's positional names.
    """
    longs = {switch.long: switch for switch in self._switches}
    shorts = {switch.short: switch for switch in self._switches if switch.short}
    for command in self.walk():
        if command is self:
            continue
        for switch in command._switches:
            if switch.long in longs:
                raise GrammarError(
                    f"command {command.route!r} switch '--{switch.long}' shadows a switch inherited from {self.name!r}"
                )
            if switch.short and switch.short in shorts:
                raise GrammarError(
                    f"command {command.route!r} switch '-{switch.short}' shadows a switch inherited from {self.name!r}"
                )
        for positional in command._positionals:
            if positional.name in longs:
                raise GrammarError(
                    f"command {command.route!r} positional {positional.name!r} clashes with a switch inherited from {self.name!r}"
                )


def _attach_to_parent(self, child):
    """
    Register self as the parent of child; a command belongs to one tree only.
    """
    if child._parent is not None:
        raise GrammarError(
            f"command {child.name!r} is already a subcommand of {child._parent.name!r}"
        )
    child._parent = self


class Command(metaclass=GrammarType):
    """
    A node of the grammar tree.

    Responsibilities
    - Owns its positionals and switches, and its children in declaration order.
    - Exposes read-only traversal: parent, path/route, visible switches,
      exact-match child resolution, default child.

    Lifecycle
    - Children are built first and attached when their parent is constructed;
      every structural rule that involves the subtree is checked then, so
      an invalid tree can never be assembled.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "doc",
        "positionals",
        "switches",
        "children",
        "is_default",
    )

    def __init__(self, name, /, positionals=(), switches=(), children=(), *, aliases=(), doc=Unset, default=False):
        cls = type_of(self)
        for label, object in (("name", name), *(("aliases", alias) for alias in aliases)):
            if not isinstance(object, str):
                raise TypeError(f"{cls.__typename__} {label!r} must be a string")
            if not re.fullmatch(r"[^\W_](-?[^\W_]+)*", object):
                raise GrammarError(f"{cls.__typename__} name {object!r} is not a valid command name")
        if name in aliases or len(set(aliases)) != len(tuple(aliases)):
            raise GrammarError(f"{cls.__typename__} {name!r} aliases cannot contain duplicates")

        metadata = {
            "name": name,
            "aliases": tuple(aliases),
            "doc": doc,
            "positionals": list(positionals),
            "switches": list(switches),
            "children": list(children),
            "is_default": bool(default),
        }
        _sanitize_doc(cls, metadata)
        _process_positionals(cls, metadata)
        _process_switches(cls, metadata)
        _process_children(cls, metadata)

        self._parent = None
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        for child in self._children:
            _attach_to_parent(self, child)

        _process_inheritance(self)

    @property
    def parent(self):
        return self._parent

    @property
    def default_child(self):
        """
        The child selected when no subcommand name is given, or None.
        """
        return self._default_child

    @property
    def root(self):
        command = self
        while command._parent is not None:
            command = command._parent
        return command

    @property
    def path(self):
        """
        The ancestry from the root to this command, both included.
        """
        path = [command := self]
        while command._parent is not None:
            path.append(command := command._parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        The command names from the root, space separated ("app remote add").
        """
        return " ".join(command._name for command in self.path)

    @property
    def visible(self):
        """
        Switches settable at this command: inherited ones first (root to
        parent), then this command's own, each in declaration order.
        """
        return tuple(switch for command in self.path for switch in command._switches)

    def resolve(self, name, /):
        """
        Exact match of a subcommand name or alias; None when nothing matches.
        """
        return self._routes.get(name)

    def walk(self):
        """
        Yield this command and every descendant, depth first, in declaration order.
        """
        yield self
        for child in self._children:
            yield from child.walk()


# The 'type' keyword argument of Switch and Positional shadows the builtin.
type_of = type


class Grammar:
    """
    The validated, reusable entry point for parsing and help.

    Construction precomputes, for every command of the tree, the table of
    visible switch spellings and whether the implicit -h/--help switch is
    available there (it is unless a visible switch claims `--help` or `-h`).
    After that the grammar is never mutated; any number of parses may share it.

    Parameters
    - root: Command without a parent.
    - colorful: style help/fault rendering (rich) when printed.
    - fancy: wrap printed faults in a rich panel.
    - source: where generated code for this grammar lives (grammar text `src`).
    """

    def __init__(self, root, /, *, colorful=False, fancy=False, source=None):
        if not isinstance(root, Command):
            raise TypeError("grammar root must be a command")
        if root.parent is not None:
            raise GrammarError(f"grammar root {root.name!r} must be a top-level command")
        self._root = root
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._source = source
        self._tables = {}
        for command in root.walk():
            table = {}
            for switch in command.visible:
                table.update(dict.fromkeys(switch.spellings, switch))
            self._tables[command] = MappingProxyType(table)

    @property
    def root(self):
        return self._root

    @property
    def colorful(self):
        return self._colorful

    @property
    def fancy(self):
        return self._fancy

    @property
    def source(self):
        return self._source

    def switch(self, command, spelling, /):
        """
        The switch visible at 'command' spelled exactly 'spelling' ("--jobs",
        "-j"), or None.
        """
        return self._tables[command].get(spelling)

    def spellings(self, command, /):
        """
        All switch spellings visible at 'command' (used for suggestions).
        """
        return tuple(self._tables[command])

    def helps(self, command, spelling, /):
        """
        True when 'spelling' is the implicit help switch at 'command'.
        """
        return spelling in ("-h", "--help") and spelling not in self._tables[command]

    def find(self, *route):
        """
        Walk from the root through child names/aliases; GrammarError when the
        route does not exist.
        """
        command = self._root
        for name in route:
            if (child := command.resolve(name)) is None:
                raise GrammarError(f"command {command.route!r} has no subcommand {name!r}")
            command = child
        return command

    def parse(self, args=Unset, /):
        """
        Match an argument list (default: sys.argv[1:]) and return its
        ParseOutcome. Raises a ParseError subclass (HelpRequested included).
        """
        from .matcher import Matcher

        return Matcher(self).match(sys.argv[1:] if args is Unset else args)

    def render(self, *route, colorful=Unset):
        """
        Help of the command at 'route' as rich Text.
        """
        from .helper import render

        return render(self.find(*route), colorful=coalesce(colorful, self._colorful))

    def help(self, *route):
        """
        Help of the command at 'route' as plain text.
        """
        return self.render(*route, colorful=False).plain

    def exit_on_error(self, args=Unset, /):
        """
        parse() for programs: on a fault, print it (help on stdout, failures on
        stderr) and exit with status 0 or 2.
        """
        try:
            return self.parse(args)
        except ParseError as fault:
            copy.replace(fault, grammar=self, colorful=self._colorful, fancy=self._fancy).exit()

    def __repr__(self):
        return f"grammar(root={self._root!r})"


__all__ = (
    "Arity",
    "Switch",
    "Positional",
    "Command",
    "Grammar",
)
