from pycombinators import (
    Assoc, Infix, Literal, Prefix, Uint64,
    between, build_expression_parser, lazy, run_parser, whitespace,
)

# 1. Token helpers: every token skips the whitespace after it
def lexeme(p):
    return p < whitespace()


def symbol(name):
    return lexeme(Literal(name))


integer = lexeme(Uint64()).map(float)


# 2. Helper Functions for Calculation
def add(x, y): return x + y
def sub(x, y): return x - y
def mul(x, y): return x * y
def div(x, y):
    if y == 0: raise ValueError("Division by zero")
    return x / y
def neg(x): return -x


# 3. Operator Table (Precedence and Associativity)
# Ordered from Highest Precedence to Lowest
table = [
    [Prefix(symbol("-").map(lambda _: neg))],
    [Infix(symbol("*").map(lambda _: mul), Assoc.LEFT),
     Infix(symbol("/").map(lambda _: div), Assoc.LEFT)],
    [Infix(symbol("+").map(lambda _: add), Assoc.LEFT),
     Infix(symbol("-").map(lambda _: sub), Assoc.LEFT)]
]


# 4. The Expression Parser
def expression():
    # A term is either a parenthesized expression or an integer.
    # 'lazy' lets expression refer to itself.
    term = between(symbol("("), symbol(")"), lazy(expression)) | integer
    return build_expression_parser(table, term)


parser = whitespace() >> expression()

if __name__ == "__main__":
    test_cases = [
        "2 + 3",            # 5.0
        "2 * 3",            # 6.0
        "2 + 3 * 4",        # 14.0 (Precedence check)
        "(2 + 3) * 4",      # 20.0 (Parens check)
        "-2 + 3",           # 1.0 (Prefix check)
        "10 / 2 + 3",       # 8.0
        "10 / (2 - 2)"      # Error check
    ]

    print(f"{'Expression':<20} | {'Result':<10}")
    print("-" * 35)

    for expr_str in test_cases:
        result, err = run_parser(parser, expr_str)
        if err:
            print(f"{expr_str:<20} | Error: {err}")
        else:
            print(f"{expr_str:<20} | {result}")
