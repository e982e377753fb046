"""
Argrove help renderer.

render(command, colorful=False) is a pure function of the grammar: the command
and its ancestors (for the inherited switches). It never looks at parse state,
so the same command always renders the same text.

Layout
    Usage: app sub <input> [output] [files]... [-f <val>] --pass <val> [-v]... [-h]

    Short description.

    Arguments:
      <input>              doc text

    Options:
      -f, --flag <val>     doc text
      -h, --help           Prints help

    Commands:
      child (c)            doc text (default)

Sections only appear when they have entries. Names are padded into one column
of at least 21 characters; a longer name widens the column for its section.
"""
from collections import defaultdict

from rich.text import Text

from .grammar import Arity

_COLUMN = 21


def _palette():
    return defaultdict(str, {
        "usage-label": "bold #00E6FF",  # cyan headline
        "program-name": "bold #FF4D94",  # magenta-pink command route
        "description-section": "italic #A3A3A3",  # neutral gray

        "group-label": "bold #FFFFFF",  # section headers
        "argument-description": "#9CA3AF",  # muted gray docs

        "option-name": "bold #00E6FF",  # valued switches
        "flag-name": "bold #22C55E",  # boolean switches
        "metavar": "bold #FFD600",  # amber placeholders
        "children": "bold #36C5F0",  # sky-blue subcommands
        "default-marker": "italic #737373",
    } | getattr(__import__("__main__"), "__styles__", {}))


def _help_spellings(command):
    """
    Spellings of the implicit help switch still free at 'command'.
    """
    taken = {spelling for switch in command.visible for spelling in switch.spellings}
    return tuple(spelling for spelling in ("-h", "--help") if spelling not in taken)


def render(command, *, colorful=False):
    """
    Render the help of 'command' into a rich Text.

    Palette keys
    - usage-label, program-name, description-section
    - group-label, argument-description
    - option-name, flag-name, metavar, children, default-marker

    Define a mapping named __styles__ in __main__ to override any entry; with
    colorful=False no style is applied and Text.plain is the exact layout.
    """
    styles = _palette()

    def text(fragment, style=""):
        return Text(str(fragment), styles[style] if colorful else "")

    def placeholder(positional):
        name = text(positional.name, "metavar")
        match positional.arity:
            case Arity.REQUIRED:
                return Text.assemble("<", name, ">")
            case Arity.OPTIONAL:
                return Text.assemble("[", name, "]")
            case _:
                return Text.assemble("[", name, "]...")

    def spelled(switch, *spellings):
        style = "option-name" if switch.valued else "flag-name"
        names = Text(", ").join(text(spelling, style) for spelling in spellings)
        if switch.valued:
            names.append_text(Text.assemble(" <", text(switch.metavar, "metavar"), ">"))
        return names

    def usage(switch):
        names = spelled(switch, switch.spellings[0])
        match switch.arity:
            case Arity.REQUIRED:
                return names
            case Arity.OPTIONAL:
                return Text.assemble("[", names, "]")
            case _:
                return Text.assemble("[", names, "]...")

    def section(label, rows):
        width = max(_COLUMN, *(len(name.plain) + 2 for name, _ in rows))
        lines = [text(label + ":", "group-label")]
        for name, doc in rows:
            line = Text("  ").append_text(name)
            if doc:
                line.append(" " * (width - len(name.plain)))
                line.append_text(doc)
            lines.append(line)
        return Text("\n").join(lines)

    helps = _help_spellings(command)

    line = Text.assemble(text("Usage:", "usage-label"), " ", text(command.route, "program-name"))
    for fragment in (
        *map(placeholder, command.positionals),
        *map(usage, command.visible),
        *([Text.assemble("[", text(helps[0], "flag-name"), "]")] if helps else []),
    ):
        line.append(" ").append_text(fragment)
    blocks = [line]

    if command.doc:
        blocks.append(text(command.doc, "description-section"))

    if command.positionals:
        blocks.append(section("Arguments", [
            (placeholder(positional), text(positional.doc or "", "argument-description"))
            for positional in command.positionals
        ]))

    options = []
    for switch in command.visible:
        name = spelled(switch, *switch.spellings)
        if not switch.short:
            name = Text("    ").append_text(name)
        options.append((name, text(switch.doc or "", "argument-description")))
    if helps:
        name = Text(", ").join(text(spelling, "flag-name") for spelling in helps)
        if helps == ("--help",):
            name = Text("    ").append_text(name)
        options.append((name, text("Prints help", "argument-description")))
    if options:
        blocks.append(section("Options", options))

    if command.children:
        rows = []
        for child in command.children:
            name = text(child.name, "children")
            if child.aliases:
                name.append_text(Text.assemble(" (", text(", ".join(child.aliases), "children"), ")"))
            doc = text(child.doc or "", "argument-description")
            if child.is_default:
                doc = Text(" ").join(part for part in (doc, text("(default)", "default-marker")) if part.plain)
            rows.append((name, doc))
        blocks.append(section("Commands", rows))

    return Text("\n\n").join(blocks)


__all__ = (
    "render",
)
