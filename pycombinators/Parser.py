from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Tuple, TypeVar, Union

from .State import ParseState

T = TypeVar('T')  # Generic type for parser results
U = TypeVar('U')


@dataclass(frozen=True)
class ParseError:
    """Base class of every parse failure."""


@dataclass(frozen=True)
class EndOfInput(ParseError):
    """Input is over where more was required."""

    def __str__(self) -> str:
        return "EOF"


@dataclass(frozen=True)
class SyntaxFailure(ParseError):
    """Input didn't match expectations; the next option may be tried."""
    label: str
    pos: int

    def __str__(self) -> str:
        return f"Parse fail: {self.label} at {self.pos}"


@dataclass(frozen=True)
class TransformFailure(ParseError):
    """The input matched but the value could not be converted."""
    label: str
    pos: int
    cause: ParseError

    def __str__(self) -> str:
        return f"Transform fail: {self.label} at {self.pos} due to {self.cause}"


@dataclass(frozen=True)
class ExecutionFailure(ParseError):
    """An error raised by user code, e.g. inside a transform function."""
    message: str

    def __str__(self) -> str:
        return f"Logic error: {self.message}"


class ParseException(Exception):
    """Raise from a transform function to fail with a specific ParseError."""

    def __init__(self, error: ParseError):
        super().__init__(str(error))
        self.error = error


def exec_error(message: str) -> ParseException:
    """Build the exception a transform function raises to report a logic error."""
    return ParseException(ExecutionFailure(message))


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of one parse attempt: a value, or an error."""
    value: Optional[T]
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def success(value: T) -> 'ParseResult[T]':
        return ParseResult(value, None)

    @staticmethod
    def failure(error: ParseError) -> 'ParseResult[Any]':
        return ParseResult(None, error)


class Parser(Generic[T]):
    """
    Anything that turns a prefix of a ParseState into a value.

    On success the state is left right after the consumed input. On failure
    the state is left exactly where the attempt started.

    A Parser can wrap a plain function, or a subclass can override parse().
    """
    def __init__(self, parse_fn: Optional[Callable[[ParseState], ParseResult[T]]] = None):
        self.parse_fn = parse_fn

    def parse(self, state: ParseState) -> ParseResult[T]:
        if self.parse_fn is None:
            raise NotImplementedError(f"{type(self).__name__} does not implement parse()")
        return self.parse_fn(state)

    def __call__(self, state: ParseState) -> ParseResult[T]:
        return self.parse(state)

    # Transform: the function may raise to fail the parse
    def apply(self, f: Callable[[T], U], label: str = "transform failed") -> 'Parser[U]':
        from .Combinators import Transform
        return Transform(self, f, label)

    def map(self, f: Callable[[T], U]) -> 'Parser[U]':
        return self.apply(f)

    def then(self, other: 'Parser[U]') -> 'Parser[U]':
        from .Combinators import Then
        return Then(self, other)

    def ignore(self) -> 'Parser[None]':
        from .Combinators import Ignore
        return Ignore(self)

    # Monadic bind (>>=)
    def bind(self, f: Callable[[T], 'Parser[U]']) -> 'Parser[U]':
        def parse(state: ParseState) -> ParseResult[U]:
            hold = state.hold()
            res = self.parse(state)
            if res.error is not None:
                state.reset(hold)
                return res  # type: ignore[return-value]
            next_res = f(res.value).parse(state)  # type: ignore[arg-type]
            if next_res.error is not None:
                state.reset(hold)
            else:
                state.release(hold)
            return next_res
        return Parser(parse)

    # Label (<?>)
    def label(self, msg: str) -> 'Parser[T]':
        """Replace syntax and end-of-input failures with `expected <msg>`."""
        def parse(state: ParseState) -> ParseResult[T]:
            start = state.index()
            res = self.parse(state)
            if isinstance(res.error, (SyntaxFailure, EndOfInput)):
                return ParseResult.failure(SyntaxFailure(f"expected {msg}", start))
            return res
        return Parser(parse)

    # Alternative (<|>)
    def __or__(self, other: 'Parser[T]') -> 'Parser[T]':
        from .Combinators import Alternative
        left = self.options if isinstance(self, Alternative) else (self,)
        return Alternative(*left, other)

    # Sequence, pairs only
    def __and__(self, other: 'Parser[U]') -> 'Parser[Tuple[T, U]]':
        from .Combinators import Sequence
        return Sequence(self, other)

    # Sequence (*>) with a parser, bind (>>=) with a function
    def __rshift__(self, other: Union['Parser[U]', Callable[[T], 'Parser[U]']]) -> 'Parser[U]':
        if isinstance(other, Parser):
            return self.then(other)
        return self.bind(other)

    # Sequence (<*)
    def __lt__(self, other: 'Parser[Any]') -> 'Parser[T]':
        return (self & other).apply(lambda pair: pair[0])
