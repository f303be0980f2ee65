import re

import pytest

from FsmEngine import (
    EPSILON, build_deterministic_recognizer, build_nfa_epsilon_recognizer,
    convert_nfa_epsilon_to_dfa, enumerate_words,
)
from FsmRegex import RegexSyntaxError, regex_to_nfa, regex_to_postfix, tokenize


def postfix_str(expr):
    return " ".join(t.value if t.kind == "LIT" else t.kind for t in regex_to_postfix(expr))


def test_tokenize_escape_and_spaces():
    kinds = [(t.kind, t.value) for t in tokenize(r"a \* b")]
    assert kinds == [("LIT", "a"), ("LIT", "*"), ("LIT", "b")]


def test_postfix_precedence():
    assert postfix_str("ab|c") == "a b CONCAT c ALT"
    assert postfix_str("a(b|c)*") == "a b c ALT STAR CONCAT"
    assert postfix_str("ab*") == "a b STAR CONCAT"


def test_empty_alternatives_become_epsilon():
    assert postfix_str("") == "EPS"
    assert postfix_str("(|a)") == "EPS a ALT"
    assert postfix_str("a|") == "a EPS ALT"


@pytest.mark.parametrize("bad", ["(a", "a)", "*", "a|*", "\\"])
def test_syntax_errors(bad):
    with pytest.raises(RegexSyntaxError):
        regex_to_nfa(bad)


def test_thompson_shape():
    nfa = regex_to_nfa("a")
    assert nfa.nodes == frozenset({0, 1})
    assert nfa.start_node == 0
    assert nfa.goal_nodes == frozenset({1})
    nfa.validate()


def test_thompson_uses_epsilon_sentinel():
    nfa = regex_to_nfa("a*")
    assert any(t.symbol is EPSILON for t in nfa.transitions)
    assert nfa.alphabet() == {"a"}


def test_demo_regex_matches_handwritten_automaton(demo_words):
    positive, negative = demo_words
    nfa = regex_to_nfa("(ab*|b*c|a*c*)")
    n = build_nfa_epsilon_recognizer(nfa)
    d = build_deterministic_recognizer(convert_nfa_epsilon_to_dfa(nfa))
    for w in positive:
        assert n.recognize(w) and d.recognize(w), w
    for w in negative:
        assert not n.recognize(w) and not d.recognize(w), w


@pytest.mark.parametrize("expr", [
    "(ab*|b*c|a*c*)",
    "(a|b)*abb",
    "a+b?",
    "((a|ε)b)*",
    "(|a)(b|)c*",
    "(a*b*)*a",
])
def test_nfa_and_dfa_agree_with_python_re(expr):
    nfa = regex_to_nfa(expr)
    dfa = convert_nfa_epsilon_to_dfa(nfa)
    n = build_nfa_epsilon_recognizer(nfa)
    d = build_deterministic_recognizer(dfa)
    pattern = re.compile(expr.replace("ε", ""))
    for w in enumerate_words("abc", 5):
        s = "".join(w)
        expected = pattern.fullmatch(s) is not None
        assert n.recognize(s) == expected, s
        assert d.recognize(s) == expected, s
