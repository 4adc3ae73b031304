from typing import List

from .Parser import (
    Parser, ParseResult, EndOfInput, SyntaxFailure, TransformFailure, ExecutionFailure,
)
from .State import ParseState

DIGITS = "0123456789"


def _read_digits(state: ParseState, out: List[str]) -> int:
    """Consume a run of ASCII digits into `out`; return how many were read."""
    n = 0
    while True:
        c = state.next()
        if c is None:
            return n
        if c not in DIGITS:
            state.undo_next()
            return n
        out.append(c)
        n += 1


class Integer(Parser[int]):
    """
    Parses a decimal integer that must fit in a fixed number of bits.

    Signed integers accept a leading '-' or '+'. A value outside the range of
    the target width fails with a TransformFailure and consumes nothing.
    """
    def __init__(self, bits: int = 64, signed: bool = True):
        super().__init__()
        if bits <= 0:
            raise ValueError(f"integer width must be positive, got {bits}")
        self.bits = bits
        self.signed = signed
        if signed:
            self.min_value = -(1 << (bits - 1))
            self.max_value = (1 << (bits - 1)) - 1
        else:
            self.min_value = 0
            self.max_value = (1 << bits) - 1

    def parse(self, state: ParseState) -> ParseResult[int]:
        start = state.index()
        hold = state.hold()
        text: List[str] = []
        if self.signed:
            c = state.peek()
            if c == '-' or c == '+':
                text.append(state.next())  # type: ignore[arg-type]
        if _read_digits(state, text) == 0:
            at_end = state.peek() is None
            state.reset(hold)
            if at_end:
                return ParseResult.failure(EndOfInput())
            return ParseResult.failure(SyntaxFailure("expected digits", start))
        value = int("".join(text))
        if not self.min_value <= value <= self.max_value:
            state.reset(hold)
            kind = "int" if self.signed else "uint"
            cause = ExecutionFailure(f"{value} does not fit in {kind}{self.bits}")
            return ParseResult.failure(TransformFailure("integer out of range", start, cause))
        state.release(hold)
        return ParseResult.success(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Int8(Integer):
    def __init__(self):
        super().__init__(8, signed=True)


class Int16(Integer):
    def __init__(self):
        super().__init__(16, signed=True)


class Int32(Integer):
    def __init__(self):
        super().__init__(32, signed=True)


class Int64(Integer):
    def __init__(self):
        super().__init__(64, signed=True)


class Uint8(Integer):
    def __init__(self):
        super().__init__(8, signed=False)


class Uint16(Integer):
    def __init__(self):
        super().__init__(16, signed=False)


class Uint32(Integer):
    def __init__(self):
        super().__init__(32, signed=False)


class Uint64(Integer):
    def __init__(self):
        super().__init__(64, signed=False)


class Float(Parser[float]):
    """
    Parses a floating point number: [-] digits ['.' [digits]] [e|E signed-digits].

    A '.' without digits after it means a zero fraction. An exponent marker
    that isn't followed by digits is not consumed.
    """
    def parse(self, state: ParseState) -> ParseResult[float]:
        start = state.index()
        hold = state.hold()
        text: List[str] = []
        if state.peek() == '-':
            text.append(state.next())  # type: ignore[arg-type]
        if _read_digits(state, text) == 0:
            at_end = state.peek() is None
            state.reset(hold)
            if at_end:
                return ParseResult.failure(EndOfInput())
            return ParseResult.failure(SyntaxFailure("expected digits", start))

        if state.peek() == '.':
            text.append(state.next())  # type: ignore[arg-type]
            _read_digits(state, text)

        if state.peek() in ('e', 'E'):
            exp_hold = state.hold()
            exponent = [state.next()]
            if state.peek() in ('-', '+'):
                exponent.append(state.next())
            if _read_digits(state, exponent) > 0:
                state.release(exp_hold)
                text.extend(exponent)  # type: ignore[arg-type]
            else:
                state.reset(exp_hold)

        state.release(hold)
        return ParseResult.success(float("".join(text)))

    def __repr__(self) -> str:
        return "Float()"
