from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, List, TypeVar

from .Combinators import Maybe, Sequence, chainl1, chainr1, choice
from .Parser import Parser

T = TypeVar('T')


class Assoc(Enum):
    NONE = auto()
    LEFT = auto()
    RIGHT = auto()


@dataclass
class Operator:
    pass


@dataclass
class Infix(Operator):
    parser: Parser[Callable[[Any, Any], Any]]
    assoc: Assoc


@dataclass
class Prefix(Operator):
    parser: Parser[Callable[[Any], Any]]


@dataclass
class Postfix(Operator):
    parser: Parser[Callable[[Any], Any]]


def build_expression_parser(table: List[List[Operator]], simple_term: Parser[T]) -> Parser[T]:
    """
    Build an expression parser from an operator table.

    The table is ordered from highest to lowest precedence; each row holds
    the operators sharing one precedence level.
    """
    term = simple_term
    for ops in table:
        term = _make_level_parser(ops, term)
    return term


def _make_level_parser(ops: List[Operator], term: Parser[T]) -> Parser[T]:
    infix_r = []
    infix_l = []
    infix_n = []
    prefix = []
    postfix = []

    for op in ops:
        if isinstance(op, Infix):
            if op.assoc == Assoc.RIGHT:
                infix_r.append(op.parser)
            elif op.assoc == Assoc.LEFT:
                infix_l.append(op.parser)
            else:
                infix_n.append(op.parser)
        elif isinstance(op, Prefix):
            prefix.append(op.parser)
        elif isinstance(op, Postfix):
            postfix.append(op.parser)

    # P = pre? term post?
    def apply_affixes(r):
        pre, x, post = r
        if pre is not None:
            x = pre(x)
        if post is not None:
            x = post(x)
        return x

    result_parser: Parser[Any] = Sequence(
        Maybe(choice(prefix)), term, Maybe(choice(postfix)),
    ).apply(apply_affixes, "operator application failed")

    if infix_l:
        result_parser = chainl1(result_parser, choice(infix_l))

    if infix_r:
        result_parser = chainr1(result_parser, choice(infix_r))

    if infix_n:
        # at most one non-associative operator per level
        def non_assoc(r):
            x, rest = r
            if rest is None:
                return x
            f, y = rest
            return f(x, y)
        operand = result_parser
        result_parser = Sequence(operand, Maybe(Sequence(choice(infix_n), operand))).apply(
            non_assoc, "operator application failed")

    return result_parser
