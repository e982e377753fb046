r"""
Argrove grammar text loader.

Reads the compact grammar notation popularized by minimal flag parsers and
builds a Grammar from it:

    src "cli/flags.py"

    /// Run basic system diagnostics.
    cmd healthck
        /// Optional configuration file.
        optional config: PathBuf
    {
        /// Verbosity level, can be repeated multiple times.
        repeated -v, --verbose
        optional -j, --jobs n: u32
        default cmd run, r { optional -s, --switch }
        cmd stop {}
    }

Rules
- `cmd name[, alias...]` opens a command; positionals come before `{`,
  switches and subcommands inside the braces. `default cmd` marks the default
  child.
- positional: `optional|required|repeated name: Type`.
- switch: `optional|required|repeated [-s,] --long [metavar][: Type]`. A type
  without a metavar uses the long name as metavar; no type means boolean.
- `///` lines document the next item, `//` lines are comments.
- `src "path"` (optional, first) records where generated code should live.

Type names: PathBuf → path, OsString → os-string, String → str, integer names
(u8 … u128, i8 … i128, usize, isize) → int, f32/f64 → float, bool → bool; the
tag names themselves (str, int, float, bool, path, bytes, os-string) work too.

Syntax errors raise GrammarError with "line L, column C: ..." messages.
"""
import re

from .faults import GrammarError
from .grammar import Command, Grammar, Positional, Switch

_LEXEME = re.compile(r"""
    (?P<doc>///[^\n]*)
  | (?P<comment>//[^\n]*)
  | (?P<string>"(?:[^"\\\n]|\\.)*")
  | (?P<punct>[{},:])
  | (?P<switch>--?[^\W\d_](?:-?[^\W_]+)*)
  | (?P<word>[^\W\d_][\w]*(?:-[\w]+)*)
  | (?P<space>\s+)
  | (?P<error>.)
""", re.VERBOSE)

_TYPES = {
    "PathBuf": "path",
    "OsString": "os-string",
    "String": "str",
    "f32": "float",
    "f64": "float",
} | {
    name: "int" for name in (
        "u8", "u16", "u32", "u64", "u128", "usize",
        "i8", "i16", "i32", "i64", "i128", "isize",
    )
} | {
    name: name for name in ("str", "int", "float", "bool", "path", "bytes", "os-string")
}

_ARITIES = ("optional", "required", "repeated")


def _lex(text):
    line, start = 1, 0
    for match in _LEXEME.finditer(text):
        kind, value = match.lastgroup, match[0]
        column = match.start() - start + 1
        if kind == "error":
            raise GrammarError(f"line {line}, column {column}: unexpected character {value!r}")
        if kind not in ("space", "comment"):
            yield kind, value, line, column
        if newlines := value.count("\n"):
            line += newlines
            start = match.start() + value.rindex("\n") + 1


class _Reader:
    """
    Recursive descent over the lexemes of one grammar text.
    """

    def __init__(self, text):
        self._lexemes = list(_lex(text))
        self._index = 0
        self.source = None

    def peek(self, offset=0):
        try:
            return self._lexemes[self._index + offset]
        except IndexError:
            return None

    def fail(self, message, lexeme=Ellipsis):
        if lexeme is Ellipsis:
            lexeme = self.peek()
        if lexeme is None:
            raise GrammarError(f"end of input: {message}")
        _, value, line, column = lexeme
        raise GrammarError(f"line {line}, column {column}: {message}, found {value!r}")

    def take(self, kind, value=None):
        lexeme = self.peek()
        if lexeme is None or lexeme[0] != kind or (value is not None and lexeme[1] != value):
            self.fail(f"expected {value!r}" if value else f"expected a {kind}")
        self._index += 1
        return lexeme[1]

    def accept(self, kind, value=None):
        lexeme = self.peek()
        if lexeme is not None and lexeme[0] == kind and (value is None or lexeme[1] == value):
            self._index += 1
            return lexeme[1]
        return None

    def docs(self):
        lines = []
        while (doc := self.accept("doc")) is not None:
            lines.append(doc[3:].strip())
        return "\n".join(lines) or None

    def type(self):
        lexeme = self.peek()
        name = self.take("word")
        try:
            return _TYPES[name]
        except KeyError:
            self.fail("unknown value type", lexeme)

    def grammar(self):
        if self.accept("word", "src"):
            self.source = re.sub(r"\\(.)", r"\1", self.take("string")[1:-1])
        root = self.command()
        if self.peek() is not None:
            self.fail("expected end of input after the top-level command")
        return root

    def command(self, doc=None):
        doc = self.docs() or doc
        default = bool(self.accept("word", "default"))
        self.take("word", "cmd")
        names = [self.take("word")]
        while self.accept("punct", ","):
            names.append(self.take("word"))

        positionals = []
        while self.accept("punct", "{") is None:
            item = self.docs()
            arity = self.arity()
            name = self.take("word")
            self.take("punct", ":")
            options = {"arity": arity, "type": self.type()}
            if item:
                options["doc"] = item
            positionals.append(Positional(name, **options))

        switches, children = [], []
        while self.accept("punct", "}") is None:
            item = self.docs()
            lexeme = self.peek()
            if lexeme is not None and lexeme[:2] in (("word", "cmd"), ("word", "default")):
                children.append(self.command(item))
            else:
                switches.append(self.switch(item))

        kwargs = {"aliases": names[1:], "default": default}
        if doc:
            kwargs["doc"] = doc
        return Command(names[0], positionals, switches, children, **kwargs)

    def arity(self):
        lexeme = self.peek()
        if lexeme is None or lexeme[0] != "word" or lexeme[1] not in _ARITIES:
            self.fail("expected one of optional, required, repeated, cmd or '}'")
        self._index += 1
        return lexeme[1]

    def switch(self, doc):
        arity = self.arity()
        names = [self.take("switch")]
        if self.accept("punct", ","):
            names.append(self.take("switch"))
        options = {"arity": arity}
        if (lexeme := self.peek()) is not None and lexeme[0] == "word" and (self.peek(1) or ())[:2] == ("punct", ":"):
            options["metavar"] = self.take("word")
            self.take("punct", ":")
            options["type"] = self.type()
        elif self.accept("punct", ":"):
            options["type"] = self.type()
        if doc:
            options["doc"] = doc
        return Switch(*names, **options)


def loads(text, /, **options):
    """
    Build a Grammar from grammar text. Extra keyword arguments go to Grammar()
    (colorful, fancy); a `src "path"` header becomes Grammar.source.
    """
    if not isinstance(text, str):
        raise TypeError("loads() argument must be a string")
    reader = _Reader(text)
    root = reader.grammar()
    return Grammar(root, source=reader.source, **options)


def load(path, /, **options):
    """
    Read a grammar file (UTF-8) and build its Grammar.
    """
    with open(path, encoding="utf-8") as stream:
        return loads(stream.read(), **options)


__all__ = (
    "loads",
    "load",
)
