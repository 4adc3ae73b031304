import itertools
from typing import Any, Iterable, Optional, Tuple, Union

from .Parser import Parser, ParseResult, ParseError, SyntaxFailure, T
from .State import ParseState, PREFILL_DEFAULT

Source = Union[str, bytes, bytearray, ParseState, Iterable[str], Iterable[bytes], Any]


def pure(value: T) -> Parser[T]:
    """Return a parser that succeeds with a value without consuming input."""
    def parse(state: ParseState) -> ParseResult[T]:
        return ParseResult.success(value)
    return Parser(parse)


def fail(msg: str) -> Parser[Any]:
    """A parser that always fails with a message."""
    def parse(state: ParseState) -> ParseResult[Any]:
        return ParseResult.failure(SyntaxFailure(msg, state.index()))
    return Parser(parse)


def look_ahead(parser: Parser[T]) -> Parser[T]:
    """Parse without consuming input."""
    def parse(state: ParseState) -> ParseResult[T]:
        hold = state.hold()
        res = parser.parse(state)
        state.reset(hold)
        return res
    return Parser(parse)


def eof() -> Parser[None]:
    """Succeeds only if no input remains."""
    def parse(state: ParseState) -> ParseResult[None]:
        if state.finished():
            return ParseResult.success(None)
        return ParseResult.failure(SyntaxFailure("expected end of input", state.index()))
    return Parser(parse)


def make_state(source: Source, prefill: int = PREFILL_DEFAULT) -> ParseState:
    """
    Build a ParseState for `source`.

    Strings and iterables of text chunks are read as characters. Bytes, binary
    file objects (anything with read()) and iterables of bytes chunks are
    decoded as UTF-8. An existing ParseState is returned unchanged.
    """
    if isinstance(source, ParseState):
        return source
    if isinstance(source, str):
        return ParseState(source, prefill=prefill)
    if isinstance(source, (bytes, bytearray)):
        return ParseState.from_reader([bytes(source)], prefill=prefill)
    if hasattr(source, "read"):
        return ParseState.from_reader(source, prefill=prefill)
    # the first chunk tells text from bytes
    chunks = iter(source)
    first = next(chunks, None)
    if first is None:
        return ParseState("", prefill=prefill)
    chunks = itertools.chain([first], chunks)
    if isinstance(first, (bytes, bytearray)):
        return ParseState.from_reader(chunks, prefill=prefill)
    return ParseState(chunks, prefill=prefill)


def run_parser(parser: Parser[T],
               source: Source,
               prefill: int = PREFILL_DEFAULT) -> Tuple[Optional[T], Optional[ParseError]]:
    """
    Run `parser` once over `source` and return (value, error).

    Raises UnresolvedHoldError if the parser left holds unresolved.
    """
    state = make_state(source, prefill)
    res = parser.parse(state)
    state.close()
    return res.value, res.error
