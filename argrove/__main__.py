"""
python -m argrove: grammar tooling front-end.

    python -m argrove codegen GRAMMAR [-o FILE] [--write]
    python -m argrove help GRAMMAR [COMMAND]...

codegen prints the generated dataclasses, or checks/updates the block inside
FILE (default: the grammar's `src` path). Without --write an out-of-date file
is reported and the exit status is 1; nothing is ever rewritten implicitly.
help renders the help of any command of the grammar.
"""
import sys

from rich.console import Console

from .codegen import generate, regenerate
from .dsl import load
from .faults import GrammarError
from .grammar import Command, Grammar, Positional, Switch

grammar = Grammar(
    Command(
        "argrove",
        doc="Grammar tooling for argrove command-line parsers.",
        children=[
            Command(
                "codegen",
                [Positional("grammar", type="path", doc="Grammar text file.")],
                [
                    Switch("-o", "--output", metavar="file", type="path",
                           doc="File holding the generated block (default: the grammar's src)."),
                    Switch("--write", doc="Rewrite the file instead of only checking it."),
                ],
                doc="Generate dataclasses for a grammar.",
            ),
            Command(
                "help",
                [
                    Positional("grammar", type="path", doc="Grammar text file."),
                    Positional("names", arity="repeated", doc="Subcommand names leading to the command."),
                ],
                doc="Render the help of a grammar command.",
            ),
        ],
    ),
    colorful=True,
)


def codegen(outcome):
    spec = load(outcome.grammar)
    if (target := outcome.output or spec.source) is None:
        Console().out(generate(spec), end="", highlight=False)
        return 0

    changed = regenerate(target, spec, write=outcome.write)
    console = Console(stderr=True)
    if not changed:
        console.print(f"{target} is up to date", markup=False, highlight=False)
    elif outcome.write:
        console.print(f"updated {target}", markup=False, highlight=False)
    else:
        console.print(f"{target} is out of date, rerun with --write", markup=False, highlight=False)
        return 1
    return 0


def help(outcome):
    spec = load(outcome.grammar, colorful=True)
    Console().print(spec.render(*outcome.names))
    return 0


def main(args=None):
    outcome = grammar.exit_on_error(sys.argv[1:] if args is None else args)
    command = outcome.subcommand
    try:
        return {"codegen": codegen, "help": help}[command.command.name](command)
    except (GrammarError, OSError) as error:
        Console(stderr=True).print(f"error: {error}", markup=False, highlight=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
