import pytest

from FsmEngine import convert_nfa_epsilon_to_dfa
from FsmMain import DEMO_NEGATIVE, DEMO_POSITIVE, demo_automaton


@pytest.fixture
def demo_nfa():
    return demo_automaton()


@pytest.fixture
def demo_dfa(demo_nfa):
    return convert_nfa_epsilon_to_dfa(demo_nfa)


@pytest.fixture
def demo_words():
    return DEMO_POSITIVE, DEMO_NEGATIVE
