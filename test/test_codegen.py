"""
Code generation tests (emitted classes, splicing, regeneration, CLI).

Scope
- generate(): markers, class per command, field annotations, executable output.
- splice(): replacement between markers and appending to unmarked text.
- regenerate(): check-only by default, writes only when asked.
- python -m argrove front-end for codegen and help.

Conventions
- Test method names follow CamelCase per project convention.
- Generated code is executed in a scratch namespace.
"""

from __future__ import annotations

import pathlib
import tempfile
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argrove import Command, Grammar, GrammarError, Positional, Switch, generate, loads, regenerate, splice
from argrove import __main__ as cli
from argrove.codegen import END, START

GRAMMAR = """
src "flags.py"

/// Run basic system diagnostics.
cmd healthck
    optional config: PathBuf
{
    repeated -v, --verbose
    optional -j, --jobs n: u32
    required --pass-me

    default cmd run { optional -s, --switch }
    cmd stop
        repeated services: String
    {}
}
"""


def execute(code):
    namespace = {}
    exec(code, namespace)
    return namespace


class TestGenerate(TestCase):
    """Emitted dataclass block."""

    def setUp(self):
        self.grammar = loads(GRAMMAR)
        self.code = generate(self.grammar)

    def testMarkers(self):
        lines = self.code.splitlines()
        self.assertEqual(lines[0], START)
        self.assertEqual(lines[-1], END)

    def testChildrenComeFirst(self):
        self.assertLess(self.code.index("class Run:"), self.code.index("class Healthck:"))
        self.assertLess(self.code.index("class Stop:"), self.code.index("class Healthck:"))

    def testAnnotations(self):
        for line in (
                "    verbose: int",
                "    jobs: int | None",
                "    pass_me: bool",
                "    config: pathlib.Path | None",
                "    subcommand: Run | Stop",
                "    services: list[str]",
                "    switch: bool",
        ):
            with self.subTest(line=line):
                self.assertIn(line + "\n", self.code)

    def testDocBecomesDocstring(self):
        self.assertIn('    """Run basic system diagnostics."""\n', self.code)

    def testParseThroughGeneratedClasses(self):
        namespace = execute(self.code)
        view = namespace["Healthck"].parse(
            self.grammar, ["-v", "-v", "--pass-me", "-j", "4", "app.toml", "stop", "db", "cache"]
        )
        self.assertEqual(view.verbose, 2)
        self.assertEqual(view.jobs, 4)
        self.assertTrue(view.pass_me)
        self.assertEqual(view.config, pathlib.Path("app.toml"))
        self.assertIsInstance(view.subcommand, namespace["Stop"])
        self.assertEqual(view.subcommand.services, ["db", "cache"])

    def testDefaultChildIsSelected(self):
        namespace = execute(self.code)
        view = namespace["Healthck"].from_outcome(self.grammar.parse(["--pass-me", "-s"]))
        self.assertIsInstance(view.subcommand, namespace["Run"])
        self.assertTrue(view.subcommand.switch)
        self.assertIsNone(view.jobs)

    def testGeneratedClassesAreFrozen(self):
        namespace = execute(self.code)
        view = namespace["Healthck"].parse(self.grammar, ["--pass-me"])
        with self.assertRaises(AttributeError):
            view.jobs = 1

    def testClassNameClashesArePrefixed(self):
        grammar = Grammar(Command("app", children=[Command("run", children=[Command("app")])]))
        code = generate(grammar)
        self.assertIn("class RunApp:", code)
        self.assertIn("class App:", code)
        execute(code)

    def testKeywordNamesAreEscaped(self):
        grammar = Grammar(Command("app", [Positional("class")], [Switch("--import", type="int")]))
        code = generate(grammar)
        self.assertIn("    class_: str\n", code)
        self.assertIn("    import_: int | None\n", code)
        view = execute(code)["App"].parse(grammar, ["--import", "2", "x"])
        self.assertEqual((view.class_, view.import_), ("x", 2))

    def testGeneratedMemberClashesRejected(self):
        for grammar in (
                Grammar(Command("app", [Positional("subcommand")], children=[Command("run")])),
                Grammar(Command("app", switches=[Switch("--subcommand", type="str")], children=[Command("run")])),
                Grammar(Command("app", switches=[Switch("--parse")])),
                Grammar(Command("app", switches=[Switch("--from-outcome")])),
        ):
            with self.subTest(grammar=grammar):
                with self.assertRaises(GrammarError):
                    generate(grammar)

    def testMemberNamesAllowedWhereNothingIsGenerated(self):
        grammar = Grammar(Command("app", children=[
            Command("run", [Positional("subcommand")], [Switch("--parse")], default=True),
        ]))
        namespace = execute(generate(grammar))
        view = namespace["App"].parse(grammar, ["--parse", "x"])
        self.assertEqual((view.subcommand.parse, view.subcommand.subcommand), (True, "x"))

    def testDeterministic(self):
        self.assertEqual(self.code, generate(loads(GRAMMAR)))


class TestSplice(TestCase):
    """Inserting the block into existing files."""

    block = "%s\nx = 1\n%s\n" % (START, END)

    def testReplacesBetweenMarkers(self):
        text = "import os\n\n%s\nold = True\n%s\n\nprint(os)\n" % (START, END)
        self.assertEqual(splice(text, self.block), "import os\n\n%s\nx = 1\n%s\n\nprint(os)\n" % (START, END))

    def testKeepsMarkerIndentation(self):
        text = "class Outer:\n    %s\n    old = True\n    %s\n" % (START, END)
        self.assertEqual(splice(text, self.block), "class Outer:\n    %s\n    x = 1\n    %s\n" % (START, END))

    def testAppendsWithoutMarkers(self):
        self.assertEqual(splice("import os", self.block), "import os\n\n" + self.block)
        self.assertEqual(splice("", self.block), self.block)

    def testIdempotent(self):
        once = splice("import os\n", self.block)
        self.assertEqual(splice(once, self.block), once)


class TestRegenerate(TestCase):
    """Check-only and write modes."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.path = pathlib.Path(self.directory.name, "flags.py")
        self.grammar = loads(GRAMMAR)

    def testCheckOnlyLeavesFileAlone(self):
        self.path.write_text("import sys\n", encoding="utf-8")
        self.assertTrue(regenerate(self.path, self.grammar))
        self.assertEqual(self.path.read_text(encoding="utf-8"), "import sys\n")

    def testWriteUpdatesFile(self):
        self.path.write_text("import sys\n", encoding="utf-8")
        self.assertTrue(regenerate(self.path, self.grammar, write=True))
        self.assertIn(generate(self.grammar), self.path.read_text(encoding="utf-8"))
        self.assertFalse(regenerate(self.path, self.grammar))

    def testMissingFileCountsAsEmpty(self):
        self.assertTrue(regenerate(self.path, self.grammar))
        self.assertFalse(self.path.exists())
        regenerate(self.path, self.grammar, write=True)
        self.assertEqual(self.path.read_text(encoding="utf-8"), generate(self.grammar))


class TestCommandLine(TestCase):
    """python -m argrove."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.grammar = pathlib.Path(self.directory.name, "cli.grammar")
        self.grammar.write_text(GRAMMAR.replace('src "flags.py"', ""), encoding="utf-8")
        self.output = pathlib.Path(self.directory.name, "flags.py")
        self.console = Console(width=120, color_system=None)

    def invoke(self, *args):
        with mock.patch.object(cli, "Console", return_value=self.console), self.console.capture() as capture:
            status = cli.main(list(args))
        self.output_text = capture.get()
        return status

    def testCodegenPrintsBlock(self):
        self.assertEqual(self.invoke("codegen", str(self.grammar)), 0)
        self.assertEqual(self.output_text, generate(loads(self.grammar.read_text(encoding="utf-8"))))

    def testCodegenChecksThenWrites(self):
        self.assertEqual(self.invoke("codegen", str(self.grammar), "-o", str(self.output)), 1)
        self.assertIn("out of date", self.output_text)
        self.assertFalse(self.output.exists())
        self.assertEqual(self.invoke("codegen", str(self.grammar), "-o", str(self.output), "--write"), 0)
        self.assertTrue(self.output.exists())
        self.assertEqual(self.invoke("codegen", str(self.grammar), "-o", str(self.output)), 0)
        self.assertIn("up to date", self.output_text)

    def testHelpOfSubcommand(self):
        self.assertEqual(self.invoke("help", str(self.grammar), "stop"), 0)
        self.assertTrue(self.output_text.startswith("Usage: healthck stop [services]..."))

    def testUnknownRouteFails(self):
        self.assertEqual(self.invoke("help", str(self.grammar), "nope"), 1)
        self.assertIn("error:", self.output_text)

    def testMissingGrammarFileFails(self):
        self.assertEqual(self.invoke("codegen", str(self.grammar.with_name("missing.grammar"))), 1)


if __name__ == "__main__":
    unittest.main()
