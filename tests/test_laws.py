from hypothesis import given, strategies as st

from pycombinators.Char import char
from pycombinators.Combinators import Alternative, Repeat, RepeatSpec, Sequence
from pycombinators.Prim import pure
from pycombinators.State import ParseState

# Strategy to generate arbitrary values
vals = st.integers() | st.text()


def run_p(p, input_str=""):
    return p.parse(ParseState(input_str))


# 1. Left Identity: return a >>= f  === f a
@given(vals)
def test_monad_left_identity(v):
    f = lambda x: pure(x)
    assert run_p(pure(v).bind(f)).value == run_p(f(v)).value


# 2. Right Identity: m >>= return === m
@given(vals)
def test_monad_right_identity(v):
    m = pure(v)
    assert run_p(m.bind(pure)).value == run_p(m).value


# 3. Associativity: (m >>= f) >>= g === m >>= (\x -> f x >>= g)
@given(st.integers())
def test_monad_associativity(v):
    m = pure(v)
    f = lambda x: pure(x + 1)
    g = lambda y: pure(y * 2)

    lhs = m.bind(f).bind(g)
    rhs = m.bind(lambda x: f(x).bind(g))
    assert run_p(lhs).value == run_p(rhs).value


# 4. Failure never consumes
@given(st.text(alphabet="abc", max_size=12))
def test_failed_parse_consumes_nothing(text):
    parsers = [
        Sequence(char("a"), char("b"), char("c")),
        Alternative(Sequence(char("a"), char("a")), Sequence(char("b"), char("b"))),
        Repeat(char("a"), RepeatSpec.at_least(2)),
        char("a") >> char("c"),
    ]
    for p in parsers:
        state = ParseState(text)
        res = p.parse(state)
        if res.error is not None:
            assert state.index() == 0
        assert state.outstanding_holds == 0


# 5. Alternative is associative
@given(st.text(alphabet="abc", max_size=6))
def test_alternative_associative(text):
    a, b, c = char("a"), Sequence(char("b"), char("b")), char("c")
    left = Alternative(Alternative(a, b), c)
    right = Alternative(a, Alternative(b, c))
    s1, s2 = ParseState(text), ParseState(text)
    r1, r2 = left.parse(s1), right.parse(s2)
    assert r1.value == r2.value
    assert s1.index() == s2.index()
