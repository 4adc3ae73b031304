from typing import Callable, Iterable

from .Combinators import ANY, Ignore, Repeat, RepeatSpec, many
from .Parser import Parser, ParseResult, EndOfInput, SyntaxFailure
from .State import ParseState

# Above this many members a CharClass looks characters up in a frozenset
HASHED_SET_THRESHOLD = 20

WHITESPACE = " \t\n\r"


class Literal(Parser[str]):
    """
    Matches an exact string and returns it.

    Input is only consumed on a full match; a mismatch or a premature end of
    input gives everything back.
    """
    def __init__(self, text: str):
        super().__init__()
        self.text = text

    def parse(self, state: ParseState) -> ParseResult[str]:
        hold = state.hold()
        for expected in self.text:
            c = state.next()
            if c is None:
                state.reset(hold)
                return ParseResult.failure(EndOfInput())
            if c != expected:
                pos = state.index() - 1
                state.reset(hold)
                return ParseResult.failure(SyntaxFailure(f"expected {self.text!r}", pos))
        state.release(hold)
        return ParseResult.success(self.text)

    def __repr__(self) -> str:
        return f"Literal({self.text!r})"


def string(s: str) -> Parser[str]:
    """Parses the exact string s and returns it."""
    return Literal(s)


class CharClass(Parser[str]):
    """
    Matches one character that is (or, with negate=True, is not) in a fixed set.

    The membership test depends on the size of the set: a single comparison,
    a scan of a short string, or a frozenset lookup. All three behave the same.
    """
    def __init__(self, chars: Iterable[str], negate: bool = False):
        super().__init__()
        members = []
        for c in chars:
            if len(c) != 1:
                raise ValueError(f"character class members must be single characters, got {c!r}")
            if c not in members:
                members.append(c)
        self.chars = "".join(members)
        self.negate = negate

        if len(self.chars) == 1:
            self.representation = "single"
            only = self.chars
            self._contains: Callable[[str], bool] = lambda c: c == only
        elif len(self.chars) <= HASHED_SET_THRESHOLD:
            self.representation = "linear"
            self._contains = self.chars.__contains__
        else:
            self.representation = "hashed"
            self._contains = frozenset(self.chars).__contains__

    def matches(self, c: str) -> bool:
        return self._contains(c) != self.negate

    def parse(self, state: ParseState) -> ParseResult[str]:
        c = state.next()
        if c is None:
            return ParseResult.failure(EndOfInput())
        if self._contains(c) != self.negate:
            return ParseResult.success(c)
        state.undo_next()
        kind = "none of" if self.negate else "one of"
        return ParseResult.failure(SyntaxFailure(f"expected {kind} {self.chars!r}", state.index()))

    def __repr__(self) -> str:
        return f"CharClass({self.chars!r}, negate={self.negate})"


def one_of(cs: Iterable[str]) -> Parser[str]:
    """Succeeds if the current character is in cs. Returns the parsed character."""
    return CharClass(cs)


def none_of(cs: Iterable[str]) -> Parser[str]:
    """Succeeds if the current character is not in cs. Returns the parsed character."""
    return CharClass(cs, negate=True)


def whitespace() -> Parser[None]:
    """Skips zero or more spaces, tabs, newlines and carriage returns."""
    return Ignore(Repeat(CharClass(WHITESPACE), ANY))


def string_of(cs: Iterable[str], spec: RepeatSpec = ANY) -> Parser[str]:
    """Parses a run of characters from cs, returned as one string."""
    return Repeat(CharClass(cs), spec).map("".join)


def string_none_of(cs: Iterable[str], spec: RepeatSpec = ANY) -> Parser[str]:
    """Parses a run of characters not in cs, returned as one string."""
    return Repeat(CharClass(cs, negate=True), spec).map("".join)


# Core function: Succeeds if the character satisfies a predicate
def satisfy(f: Callable[[str], bool], label: str = "character") -> Parser[str]:
    """Succeeds for any character where f returns True. Returns the parsed character."""
    def parse(state: ParseState) -> ParseResult[str]:
        c = state.next()
        if c is None:
            return ParseResult.failure(EndOfInput())
        if f(c):
            return ParseResult.success(c)
        state.undo_next()
        return ParseResult.failure(SyntaxFailure(f"expected {label}", state.index()))
    return Parser(parse)


def char(c: str) -> Parser[str]:
    """Parses a single character c and returns it."""
    return CharClass(c)


def any_char() -> Parser[str]:
    """Parses any character and returns it."""
    return satisfy(lambda _: True)


def space() -> Parser[str]:
    return satisfy(str.isspace, "space")


def spaces() -> Parser[None]:
    """Skips zero or more unicode whitespace characters."""
    return Ignore(many(space()))


def newline() -> Parser[str]:
    return satisfy(lambda c: c == '\n', "lf new-line")


def crlf() -> Parser[str]:
    """Parses '\\r\\n' and returns '\\n'."""
    return Literal("\r\n").map(lambda _: "\n")


def end_of_line() -> Parser[str]:
    """Parses a CRLF or LF end-of-line and returns '\\n'."""
    return newline() | crlf()


def tab() -> Parser[str]:
    return satisfy(lambda c: c == '\t', "tab")


def upper() -> Parser[str]:
    return satisfy(str.isupper, "uppercase letter")


def lower() -> Parser[str]:
    return satisfy(str.islower, "lowercase letter")


def alpha_num() -> Parser[str]:
    return satisfy(str.isalnum, "letter or digit")


def letter() -> Parser[str]:
    return satisfy(str.isalpha, "letter")


def digit() -> Parser[str]:
    """Parses a decimal digit and returns it."""
    return satisfy(str.isdigit, "digit")


def hex_digit() -> Parser[str]:
    return CharClass("0123456789abcdefABCDEF")


def oct_digit() -> Parser[str]:
    return CharClass("01234567")
