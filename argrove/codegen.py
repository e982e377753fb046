"""
Argrove code generation: typed Python views over parse outcomes.

generate(grammar) emits one frozen dataclass per command, children first so
every annotation refers to an already defined class:

    # generated start
    # The following code is generated by argrove.
    # Run `python -m argrove codegen <grammar> --write` to regenerate.
    import dataclasses
    import pathlib


    @dataclasses.dataclass(frozen=True)
    class Run:
        switch: bool

        @classmethod
        def from_outcome(cls, outcome):
            return cls(
                switch=outcome["switch"],
            )
    ...
    # generated end

Field shapes follow the outcome (bool / int count for boolean switches,
value / value | None / list for valued switches and positionals); a command
with children gets a `subcommand` field typed as the union of their classes.
The root class also gets parse(grammar, args=None). A switch or positional
whose field would collide with one of these generated members is a
GrammarError.

regenerate(path, grammar, write=False) splices the block into a file between
the markers (appending it when the file has none) and only touches the disk
when write=True.
"""
import keyword
import logging
import re

from .faults import GrammarError
from .grammar import Arity

logger = logging.getLogger(__name__)

START = "# generated start"
END = "# generated end"

_ANNOTATIONS = {
    "str": "str",
    "int": "int",
    "float": "float",
    "bool": "bool",
    "path": "pathlib.Path",
    "bytes": "bytes",
    "os-string": "str | bytes",
}


def _identifier(name):
    identifier = re.sub(r"\W", "_", name.replace("-", "_"))
    if keyword.iskeyword(identifier) or identifier[:1].isdigit():
        identifier += "_"
    return identifier


def _classname(name):
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_\W]+", name) if part)


def _annotation(spec):
    if not getattr(spec, "valued", True):
        return "int" if spec.arity is Arity.REPEATED else "bool"
    value = _ANNOTATIONS.get(spec.type.name, "object")
    match spec.arity:
        case Arity.REPEATED:
            return "list[%s]" % value
        case Arity.OPTIONAL:
            return value if value == "object" else "%s | None" % value
        case _:
            return value


def _classnames(root):
    """
    Map every command to a unique class name; a clash is resolved by
    prefixing the parent's class name.
    """
    names, taken = {}, set()
    for command in root.walk():
        name = _classname(command.name)
        if name in taken and command.parent is not None:
            name = names[command.parent] + name
        while name in taken:
            name += "_"
        taken.add(name)
        names[command] = name
    return names


def _emit(command, names, lines):
    for child in command.children:
        _emit(child, names, lines)

    fields = [(_identifier(switch.long), switch.long, _annotation(switch)) for switch in command.switches]
    fields += [(_identifier(positional.name), positional.name, _annotation(positional)) for positional in command.positionals]

    reserved = {"from_outcome"}
    if command.children:
        reserved.add("subcommand")
    if command.parent is None:
        reserved.add("parse")
    for identifier, name, _ in fields:
        if identifier in reserved:
            raise GrammarError(
                f"command {command.route!r}: {name!r} clashes with the generated {identifier!r} member"
            )

    lines += ["", "", "@dataclasses.dataclass(frozen=True)", "class %s:" % names[command]]
    if command.doc:
        lines.append('    """%s"""' % str(command.doc).replace("\\", "\\\\").replace('"""', '\\"\\"\\"'))
    for identifier, _, annotation in fields:
        lines.append("    %s: %s" % (identifier, annotation))
    if command.children:
        lines.append("    subcommand: %s" % " | ".join(names[child] for child in command.children))
    if fields or command.children or command.doc:
        lines.append("")

    lines += ["    @classmethod", "    def from_outcome(cls, outcome):", "        return cls("]
    for identifier, name, _ in fields:
        lines.append("            %s=outcome[%r]," % (identifier, name))
    if command.children:
        lines.append("            subcommand={%s}[outcome.subcommand.command.name].from_outcome(outcome.subcommand)," % ", ".join(
            "%r: %s" % (child.name, names[child]) for child in command.children
        ))
    lines.append("        )")

    if command.parent is None:
        lines += [
            "",
            "    @classmethod",
            "    def parse(cls, grammar, args=None):",
            "        return cls.from_outcome(grammar.parse() if args is None else grammar.parse(args))",
        ]


def generate(grammar, /):
    """
    Python source of the dataclass block for 'grammar', markers included.
    """
    lines = [
        START,
        "# The following code is generated by argrove.",
        "# Run `python -m argrove codegen <grammar> --write` to regenerate.",
        "import dataclasses",
        "import pathlib",
    ]
    _emit(grammar.root, _classnames(grammar.root), lines)
    lines.append(END)
    return "\n".join(lines) + "\n"


def splice(text, block, /):
    """
    Replace the marked block of 'text' with 'block' (re-indented to the start
    marker), or append it when 'text' has no markers.
    """
    match = re.search(
        r"^(?P<indent>[ \t]*)%s\n.*?^[ \t]*%s[^\n]*(\n|\Z)" % (re.escape(START), re.escape(END)),
        text,
        re.MULTILINE | re.DOTALL,
    )
    if match is None:
        return text + ("\n" if text and not text.endswith("\n") else "") + ("\n" if text else "") + block
    indent = match["indent"]
    block = "".join(indent + line if line.strip() else line for line in block.splitlines(keepends=True))
    return text[:match.start()] + block + text[match.end():]


def regenerate(path, grammar, /, *, write=False):
    """
    Splice the generated block for 'grammar' into the file at 'path'.

    Returns True when the file content differs from the generated result. The
    file is only written when write=True; a missing file counts as empty.
    """
    try:
        with open(path, encoding="utf-8") as stream:
            text = stream.read()
    except FileNotFoundError:
        text = ""

    updated = splice(text, generate(grammar))
    if updated == text:
        logger.debug("%s is up to date", path)
        return False
    if write:
        logger.info("regenerating %s", path)
        with open(path, "w", encoding="utf-8") as stream:
            stream.write(updated)
    return True


__all__ = (
    "generate",
    "splice",
    "regenerate",
)
