"""
Grammar text loader tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import os
import pathlib
import tempfile
import unittest
from unittest import TestCase

from argrove import Arity, GrammarError, load, loads

HEALTHCK = """
src "cli/flags.py"

/// Run basic system diagnostics.
cmd healthck
    /// Optional configuration file.
    optional config: PathBuf
{
    // switches are inherited by every subcommand
    /// Verbosity level, can be repeated multiple times.
    repeated -v, --verbose
    optional -j, --jobs n: u32
    optional --home: PathBuf
    required --pass-me

    default cmd run, r {
        optional -s, --switch
    }
    /// Stop everything.
    cmd stop
        repeated services: OsString
    {}
}
"""


class TestLoads(TestCase):
    """Parsing grammar text into a Grammar."""

    def setUp(self):
        self.grammar = loads(HEALTHCK)
        self.root = self.grammar.root

    def testSourceHeader(self):
        self.assertEqual(self.grammar.source, "cli/flags.py")

    def testRootCommand(self):
        self.assertEqual(self.root.name, "healthck")
        self.assertEqual(self.root.doc, "Run basic system diagnostics.")

    def testPositionals(self):
        config, = self.root.positionals
        self.assertEqual(config.name, "config")
        self.assertIs(config.arity, Arity.OPTIONAL)
        self.assertEqual(config.type.name, "path")
        self.assertEqual(config.doc, "Optional configuration file.")

    def testSwitches(self):
        verbose, jobs, home, pass_me = self.root.switches
        self.assertEqual((verbose.short, verbose.long, verbose.arity), ("v", "verbose", Arity.REPEATED))
        self.assertEqual(verbose.doc, "Verbosity level, can be repeated multiple times.")
        self.assertFalse(verbose.valued)
        self.assertEqual((jobs.metavar, jobs.type.name), ("n", "int"))
        self.assertEqual((home.metavar, home.type.name), ("home", "path"))
        self.assertIs(pass_me.arity, Arity.REQUIRED)

    def testChildren(self):
        run, stop = self.root.children
        self.assertTrue(run.is_default)
        self.assertEqual(run.aliases, ("r",))
        self.assertEqual(run.switches[0].long, "switch")
        self.assertEqual(stop.doc, "Stop everything.")
        self.assertEqual(stop.positionals[0].type.name, "os-string")

    def testLoadedGrammarParses(self):
        outcome = self.grammar.parse(["--pass-me", "-j", "3", "app.toml", "stop", "db", "cache"])
        self.assertEqual(outcome.jobs, 3)
        self.assertEqual(outcome.config, pathlib.Path("app.toml"))
        self.assertEqual(outcome.subcommand.services, ["db", "cache"])
        self.assertEqual(self.grammar.parse(["--pass-me"]).subcommand.command.name, "run")

    def testGrammarOptionsPassThrough(self):
        self.assertTrue(loads("cmd app {}", colorful=True).colorful)

    def testMinimalGrammar(self):
        grammar = loads("cmd app {}")
        self.assertIsNone(grammar.source)
        self.assertEqual(grammar.root.switches, ())

    def testTagNamesAccepted(self):
        grammar = loads("cmd app { optional --ratio r: float optional --raw: os-string }")
        self.assertEqual([switch.type.name for switch in grammar.root.switches], ["float", "os-string"])


class TestErrors(TestCase):
    """Syntax and structural errors."""

    def assertGrammarError(self, text, fragment):
        with self.assertRaises(GrammarError) as context:
            loads(text)
        self.assertIn(fragment, str(context.exception))

    def testUnknownType(self):
        self.assertGrammarError("cmd app {\n    optional --jobs n: Integer\n}", "line 2, column 24")

    def testUnexpectedCharacter(self):
        self.assertGrammarError("cmd app { optional --x ; }", "unexpected character ';'")

    def testMissingBrace(self):
        self.assertGrammarError("cmd app { optional --x", "end of input")

    def testTrailingInput(self):
        self.assertGrammarError("cmd app {} cmd other {}", "expected end of input")

    def testUnknownItem(self):
        self.assertGrammarError("cmd app { sometimes --x }", "line 1, column 11")

    def testStructuralErrorsSurface(self):
        self.assertGrammarError("cmd app { default cmd a {} default cmd b {} }", "default")

    def testTextRequired(self):
        with self.assertRaises(TypeError):
            loads(b"cmd app {}")


class TestLoad(TestCase):
    """Reading grammar files."""

    def testLoadFromPath(self):
        with tempfile.TemporaryDirectory() as directory:
            path = pathlib.Path(directory, "cli.grammar")
            path.write_text(HEALTHCK, encoding="utf-8")
            self.assertEqual(load(path).root.name, "healthck")
            self.assertEqual(load(os.fspath(path)).source, "cli/flags.py")


if __name__ == "__main__":
    unittest.main()
