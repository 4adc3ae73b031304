import sys

from pycombinators import (
    Alternative, Float, Lazy, Literal, Maybe, Repeat, Sequence, ParseState,
    run_parser, string_none_of, whitespace,
)

# 1. Scalars
# Numbers follow the Float grammar: [-] digits ['.' [digits]] [e signed-int]
def number():
    return Float()


def string():
    quote = Literal('"')
    return Sequence(quote, string_none_of('"'), quote).map(lambda r: r[1])


def null():
    return Literal("null").map(lambda _: None)


# 2. Recursive JSON Parser
# Trailing commas are accepted in lists and objects.
def value():
    return Alternative(Lazy(json_object), Lazy(json_array), string(), number(), null())


def json_array():
    element = Sequence(whitespace(), Lazy(value), whitespace(), Maybe(Literal(",")))
    elements = Repeat(element.map(lambda r: r[1]))
    return Sequence(Literal("["), elements, Literal("]")).map(lambda r: r[1])


def json_object():
    entry = Sequence(
        whitespace(), string(), whitespace(), Literal(":"),
        whitespace(), Lazy(value), whitespace(), Maybe(Literal(",")),
    ).map(lambda r: (r[1], r[5]))
    return Sequence(Literal("{"), Repeat(entry), Literal("}")).map(lambda r: dict(r[1]))


parser = value()

if __name__ == "__main__":
    if len(sys.argv) > 1:
        with open(sys.argv[1], "rb") as f:
            result, err = run_parser(parser, ParseState.from_reader(f))
    else:
        result, err = run_parser(parser, '{"hello": ["world", []], "x": 4}')

    if err:
        print("Parsing Failed:", err)
    else:
        print("Successfully Parsed:")
        print(result)
