import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .Parser import (
    Parser, ParseResult, ParseError, ParseException, SyntaxFailure,
    TransformFailure, ExecutionFailure, T, U,
)
from .Prim import pure, fail
from .State import ParseState, StreamError

logger = logging.getLogger(__name__)


# --- Core combinators ---

class Transform(Parser[U]):
    """
    Applies a function (which may fail) to the result of a parser.

    The function fails by raising. A ParseException contributes its own error
    as the cause; any other exception becomes an ExecutionFailure. Either way
    the input consumed by the inner parser is given back.
    """
    def __init__(self, p: Parser[T], f: Callable[[T], U], label: str = "transform failed"):
        super().__init__()
        self.p = p
        self.f = f
        self.label_text = label

    def parse(self, state: ParseState) -> ParseResult[U]:
        start = state.index()
        hold = state.hold()
        res = self.p.parse(state)
        if res.error is not None:
            state.reset(hold)
            return res  # type: ignore[return-value]
        try:
            value = self.f(res.value)  # type: ignore[arg-type]
        except StreamError:
            state.reset(hold)
            raise
        except ParseException as e:
            cause: ParseError = e.error
        except Exception as e:
            cause = ExecutionFailure(f"{type(e).__name__}: {e}")
        else:
            state.release(hold)
            return ParseResult.success(value)
        state.reset(hold)
        return ParseResult.failure(TransformFailure(self.label_text, start, cause))


class Alternative(Parser[T]):
    """
    Ordered choice: tries each parser in turn and returns the first success.

    Later options are never tried once one matches, even if they would consume
    more input. If every option fails the result is a generic failure at the
    starting position.
    """
    def __init__(self, *options: Parser[T]):
        super().__init__()
        self.options: Tuple[Parser[T], ...] = options

    def parse(self, state: ParseState) -> ParseResult[T]:
        for p in self.options:
            hold = state.hold()
            res = p.parse(state)
            if res.error is None:
                state.release(hold)
                return res
            state.reset(hold)
        return ParseResult.failure(SyntaxFailure("no alternative matched", state.index()))


class Sequence(Parser[Tuple[Any, ...]]):
    """Runs every parser in order; succeeds with a tuple only if all of them do."""
    def __init__(self, *parsers: Parser[Any]):
        super().__init__()
        self.parsers: Tuple[Parser[Any], ...] = parsers

    def parse(self, state: ParseState) -> ParseResult[Tuple[Any, ...]]:
        hold = state.hold()
        results = []
        for p in self.parsers:
            res = p.parse(state)
            if res.error is not None:
                state.reset(hold)
                return ParseResult.failure(res.error)
            results.append(res.value)
        state.release(hold)
        return ParseResult.success(tuple(results))


class PartialSequence(Parser[Tuple[Optional[Any], ...]]):
    """
    Like Sequence, but parses as far as possible instead of failing.

    The result has one slot per parser; the slot of the first failing parser
    and every slot after it are None.
    """
    def __init__(self, *parsers: Parser[Any]):
        super().__init__()
        self.parsers: Tuple[Parser[Any], ...] = parsers

    def parse(self, state: ParseState) -> ParseResult[Tuple[Optional[Any], ...]]:
        hold = state.hold()
        results: List[Optional[Any]] = [None] * len(self.parsers)
        for i, p in enumerate(self.parsers):
            res = p.parse(state)
            if res.error is not None:
                break
            results[i] = res.value
        state.release(hold)
        return ParseResult.success(tuple(results))


@dataclass(frozen=True)
class RepeatSpec:
    """How often a Repeat parser may match. max=None means unbounded."""
    min: int = 0
    max: Optional[int] = None

    def __post_init__(self):
        if self.min < 0:
            raise ValueError(f"minimum repetition must be >= 0, got {self.min}")
        if self.max is not None and self.max < self.min:
            raise ValueError(f"maximum repetition {self.max} is below minimum {self.min}")

    @classmethod
    def any(cls) -> 'RepeatSpec':
        return cls()

    @classmethod
    def at_least(cls, n: int) -> 'RepeatSpec':
        return cls(min=n)

    @classmethod
    def at_most(cls, n: int) -> 'RepeatSpec':
        return cls(max=n)

    @classmethod
    def between(cls, lo: int, hi: int) -> 'RepeatSpec':
        return cls(min=lo, max=hi)


ANY = RepeatSpec()


class Repeat(Parser[List[T]]):
    """
    Applies a parser repeatedly and collects the results in a list.

    Stops when the parser fails or `spec.max` results were collected. Fails,
    giving back all input, if fewer than `spec.min` results were collected.

    Repeating a parser that can succeed without consuming input (e.g. Maybe)
    with no maximum never terminates.
    """
    def __init__(self, p: Parser[T], spec: RepeatSpec = ANY):
        super().__init__()
        self.p = p
        self.spec = spec

    def parse(self, state: ParseState) -> ParseResult[List[T]]:
        lo, hi = self.spec.min, self.spec.max
        results: List[T] = []
        hold = state.hold()
        while hi is None or len(results) < hi:
            res = self.p.parse(state)
            if res.error is not None:
                if len(results) < lo:
                    state.reset(hold)
                    return ParseResult.failure(res.error)
                break
            results.append(res.value)  # type: ignore[arg-type]
        state.release(hold)
        return ParseResult.success(results)


class Maybe(Parser[Optional[T]]):
    """Returns the parser's value, or None if it did not match. Never fails."""
    def __init__(self, p: Parser[T]):
        super().__init__()
        self.p = p

    def parse(self, state: ParseState) -> ParseResult[Optional[T]]:
        hold = state.hold()
        res = self.p.parse(state)
        if res.error is not None:
            state.reset(hold)
            return ParseResult.success(None)
        state.release(hold)
        return res  # type: ignore[return-value]


class Ignore(Parser[None]):
    """Succeeds when the inner parser does, discarding its value."""
    def __init__(self, p: Parser[Any]):
        super().__init__()
        self.p = p

    def parse(self, state: ParseState) -> ParseResult[None]:
        res = self.p.parse(state)
        if res.error is not None:
            return ParseResult.failure(res.error)
        return ParseResult.success(None)


class Then(Parser[U]):
    """
    Runs `a`, discards its result, then returns the result of `b`.

    Useful to skip fixed syntax without growing result tuples.
    """
    def __init__(self, a: Parser[Any], b: Parser[U]):
        super().__init__()
        self.a = a
        self.b = b

    def parse(self, state: ParseState) -> ParseResult[U]:
        hold = state.hold()
        res_a = self.a.parse(state)
        if res_a.error is not None:
            state.reset(hold)
            return ParseResult.failure(res_a.error)
        res_b = self.b.parse(state)
        if res_b.error is not None:
            state.reset(hold)
        else:
            state.release(hold)
        return res_b


class Lazy(Parser[T]):
    """
    Builds the wrapped parser on first use and keeps it.

    Allows recursive grammars, and avoids constructing expensive parsers that
    are never reached, e.g. the last options of an Alternative. The
    constructor is called at most once.
    """
    def __init__(self, constructor: Callable[[], Parser[T]]):
        super().__init__()
        self.constructor = constructor
        self._parser: Optional[Parser[T]] = None

    @property
    def built(self) -> bool:
        return self._parser is not None

    def parse(self, state: ParseState) -> ParseResult[T]:
        if self._parser is None:
            self._parser = self.constructor()
            logger.debug("built deferred parser %r", self._parser)
        return self._parser.parse(state)


def lazy(constructor: Callable[[], Parser[T]]) -> Parser[T]:
    return Lazy(constructor)


# --- Derived combinators ---

# 1. choice: Tries parsers in order until one succeeds
def choice(parsers: List[Parser[T]]) -> Parser[T]:
    """Applies a list of parsers in order, returning the first success."""
    if not parsers:
        return fail("no alternatives")
    return Alternative(*parsers)


# 2. many / many1 / skip_many / skip_many1
def many(p: Parser[T]) -> Parser[List[T]]:
    """Parse zero or more occurrences of `p`."""
    return Repeat(p, RepeatSpec.any())


def many1(p: Parser[T]) -> Parser[List[T]]:
    """Parse one or more occurrences of `p`."""
    return Repeat(p, RepeatSpec.at_least(1))


def skip_many(p: Parser[Any]) -> Parser[None]:
    """Skips zero or more occurrences of `p`."""
    return Ignore(many(p))


def skip_many1(p: Parser[Any]) -> Parser[None]:
    """Skips one or more occurrences of `p`."""
    return Ignore(many1(p))


# 3. count: Parses exactly n occurrences
def count(n: int, p: Parser[T]) -> Parser[List[T]]:
    return Repeat(p, RepeatSpec.between(n, n))


# 4. between: Parses open, p, close and returns p's value
def between(open: Parser[Any], close: Parser[Any], p: Parser[T]) -> Parser[T]:
    return Sequence(open, p, close).apply(lambda r: r[1])


# 5. option family
def option(x: T, p: Parser[T]) -> Parser[T]:
    """Tries `p`; returns `x` if it fails."""
    return Alternative(p, pure(x))


def option_maybe(p: Parser[T]) -> Parser[Optional[T]]:
    return Maybe(p)


def optional(p: Parser[Any]) -> Parser[None]:
    """Tries `p` and discards the result; never fails."""
    return Ignore(Maybe(p))


# 6. Separated lists
def sep_by1(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """One or more `p` separated by `sep`."""
    return Sequence(p, many(Then(sep, p))).apply(lambda r: [r[0]] + r[1])


def sep_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """Zero or more `p` separated by `sep`."""
    return Maybe(sep_by1(p, sep)).apply(lambda xs: [] if xs is None else xs)


def end_by1(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """One or more `p`, each followed by `sep`."""
    return many1(p < sep)


def end_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """Zero or more `p`, each followed by `sep`."""
    return many(p < sep)


def sep_end_by1(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """One or more `p` separated and optionally ended by `sep`."""
    return sep_by1(p, sep) < optional(sep)


def sep_end_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """Zero or more `p` separated and optionally ended by `sep`."""
    return sep_by(p, sep) < optional(sep)


# 7. Operator chains
def chainl1(p: Parser[T], op: Parser[Callable[[T, T], T]]) -> Parser[T]:
    """
    One or more `p` separated by `op`, folded left-associatively.

    An operator without a right operand is left unconsumed. An exception from
    the operator function fails the whole chain with a TransformFailure.
    """
    rest = Sequence(op, p)

    def parse(state: ParseState) -> ParseResult[T]:
        start = state.index()
        hold = state.hold()
        first = p.parse(state)
        if first.error is not None:
            state.reset(hold)
            return first
        acc = first.value
        while True:
            step = rest.parse(state)
            if step.error is not None:
                break
            f, operand = step.value  # type: ignore[misc]
            try:
                acc = f(acc, operand)
            except Exception as e:
                state.reset(hold)
                cause = e.error if isinstance(e, ParseException) else ExecutionFailure(f"{type(e).__name__}: {e}")
                return ParseResult.failure(TransformFailure("operator application failed", start, cause))
        state.release(hold)
        return ParseResult.success(acc)
    return Parser(parse)


def chainl(p: Parser[T], op: Parser[Callable[[T, T], T]], x: T) -> Parser[T]:
    """Like chainl1, but returns `x` when not even one `p` matches."""
    return option(x, chainl1(p, op))


def chainr1(p: Parser[T], op: Parser[Callable[[T, T], T]]) -> Parser[T]:
    """One or more `p` separated by `op`, folded right-associatively."""
    def fold_right(scan: Tuple[T, List[Tuple[Callable[[T, T], T], T]]]) -> T:
        first, pairs = scan
        if not pairs:
            return first
        # [t0, (op1, t1), (op2, t2)] -> op1(t0, op2(t1, t2))
        terms = [first] + [t for _, t in pairs]
        ops = [f for f, _ in pairs]
        acc = terms[-1]
        for f, term in zip(reversed(ops), reversed(terms[:-1])):
            acc = f(term, acc)
        return acc

    return Sequence(p, many(Sequence(op, p))).apply(fold_right, "operator application failed")


def chainr(p: Parser[T], op: Parser[Callable[[T, T], T]], x: T) -> Parser[T]:
    """Like chainr1, but returns `x` when not even one `p` matches."""
    return option(x, chainr1(p, op))


# 8. Negative lookahead
def not_followed_by(p: Parser[Any]) -> Parser[None]:
    """Succeeds, consuming nothing, only if `p` fails here."""
    def parse(state: ParseState) -> ParseResult[None]:
        start = state.index()
        hold = state.hold()
        res = p.parse(state)
        state.reset(hold)
        if res.error is not None:
            return ParseResult.success(None)
        return ParseResult.failure(SyntaxFailure(f"unexpected {res.value!r}", start))
    return Parser(parse)


# 9. manyTill: p repeated until end matches
def many_till(p: Parser[T], end: Parser[Any]) -> Parser[List[T]]:
    """Applies `p` zero or more times until `end` succeeds; `end` is consumed."""
    def parse(state: ParseState) -> ParseResult[List[T]]:
        hold = state.hold()
        results: List[T] = []
        while True:
            if end.parse(state).error is None:
                state.release(hold)
                return ParseResult.success(results)
            res = p.parse(state)
            if res.error is not None:
                state.reset(hold)
                return ParseResult.failure(res.error)
            results.append(res.value)  # type: ignore[arg-type]
    return Parser(parse)


# 10. Tracing
def _preview(state: ParseState, n: int = 30) -> str:
    hold = state.hold()
    chars = []
    for _ in range(n):
        c = state.next()
        if c is None:
            break
        chars.append(c)
    more = state.peek() is not None
    state.reset(hold)
    return "".join(chars) + ("..." if more else "")


def parser_trace(label_str: str) -> Parser[None]:
    """Logs the upcoming input at DEBUG level; consumes nothing."""
    def parse(state: ParseState) -> ParseResult[None]:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s: %r at %d", label_str, _preview(state), state.index())
        return ParseResult.success(None)
    return Parser(parse)


def parser_traced(label_str: str, p: Parser[T]) -> Parser[T]:
    """Logs entry into `p`, and logs again if `p` fails and the input is given back."""
    def parse(state: ParseState) -> ParseResult[T]:
        parser_trace(label_str).parse(state)
        res = p.parse(state)
        if res.error is not None:
            logger.debug("%s backtracked: %s", label_str, res.error)
        return res
    return Parser(parse)
