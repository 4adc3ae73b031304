from pycombinators.Char import char, digit
from pycombinators.Combinators import many1
from pycombinators.Expr import Assoc, Infix, Postfix, Prefix, build_expression_parser
from pycombinators.Parser import TransformFailure
from pycombinators.Prim import run_parser


def test_arithmetic_precedence():
    # 1. Define atomic terms
    integer = many1(digit()).map(lambda d: int("".join(d)))

    # 2. Define Operations
    def add(x, y): return x + y
    def sub(x, y): return x - y
    def mul(x, y): return x * y
    def div(x, y): return x // y
    def neg(x): return -x

    # 3. Build Table
    # Level 1: Prefix '-' (Negation)
    # Level 2: *, / (Left Assoc) - Higher precedence
    # Level 3: +, - (Left Assoc) - Lower precedence
    table = [
        [Prefix(char('-').map(lambda _: neg))],
        [Infix(char('*').map(lambda _: mul), Assoc.LEFT),
         Infix(char('/').map(lambda _: div), Assoc.LEFT)],
        [Infix(char('+').map(lambda _: add), Assoc.LEFT),
         Infix(char('-').map(lambda _: sub), Assoc.LEFT)]
    ]

    expr_parser = build_expression_parser(table, integer)

    def run(s):
        res, _ = run_parser(expr_parser, s)
        return res

    assert run("1+2") == 3
    assert run("2*3") == 6

    # Precedence: 2 + 3 * 4 -> 14 (Not 20)
    assert run("2+3*4") == 14
    assert run("2*3+4") == 10

    # Associativity: 10 - 5 - 2 -> 3 (Not 7)
    assert run("10-5-2") == 3

    assert run("-3*2") == -6
    assert run("-2+3") == 1


def test_right_associativity():
    integer = many1(digit()).map(lambda d: int("".join(d)))

    def power(x, y): return x ** y

    table = [
        [Infix(char('^').map(lambda _: power), Assoc.RIGHT)]
    ]

    expr = build_expression_parser(table, integer)

    assert run_parser(expr, "2^3^2")[0] == 512


def test_postfix_and_non_assoc():
    integer = many1(digit()).map(lambda d: int("".join(d)))

    def factorial(n):
        out = 1
        for i in range(2, n + 1):
            out *= i
        return out

    table = [
        [Postfix(char('!').map(lambda _: factorial))],
        [Infix(char('=').map(lambda _: lambda x, y: x == y), Assoc.NONE)],
    ]
    expr = build_expression_parser(table, integer)

    assert run_parser(expr, "3!")[0] == 6
    assert run_parser(expr, "3!=6")[0] is True
    assert run_parser(expr, "4")[0] == 4


def test_arithmetic_example():
    from simple_arithmetic_solver import parser

    assert run_parser(parser, " (2 + 3) * 4")[0] == 20.0
    assert run_parser(parser, "-2 + 3")[0] == 1.0
    assert run_parser(parser, "10 / 2 + 3")[0] == 8.0
    _, err = run_parser(parser, "10 / (2 - 2)")
    assert isinstance(err, TransformFailure)
    assert "Division by zero" in str(err)
