# Stream
from .State import (
    ParseState, Hold, StreamError, HoldError, UnresolvedHoldError, UnresolvedHoldWarning,
)

# Core
from .Parser import (
    Parser, ParseResult, ParseError, EndOfInput, SyntaxFailure, TransformFailure,
    ExecutionFailure, ParseException, exec_error,
)
from .Prim import run_parser, make_state, pure, fail, look_ahead, eof

# Combinators
from .Combinators import (
    Transform, Alternative, Sequence, PartialSequence, RepeatSpec, Repeat,
    Maybe, Ignore, Then, Lazy, lazy,
    choice, many, many1, skip_many, skip_many1, count, between,
    option, option_maybe, optional, sep_by, sep_by1, end_by, end_by1,
    sep_end_by, sep_end_by1, chainl, chainl1, chainr, chainr1,
    not_followed_by, many_till, parser_trace, parser_traced,
)

# Characters
from .Char import (
    Literal, CharClass, string, one_of, none_of, whitespace, string_of, string_none_of,
    satisfy, char, any_char, digit, hex_digit, oct_digit,
    letter, alpha_num, upper, lower,
    space, spaces, newline, crlf, tab, end_of_line,
)

# Numbers
from .Numeric import Integer, Int8, Int16, Int32, Int64, Uint8, Uint16, Uint32, Uint64, Float

# Expression Parsing
from .Expr import build_expression_parser, Operator, Infix, Prefix, Postfix, Assoc
