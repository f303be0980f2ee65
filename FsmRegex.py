from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from FsmEngine import EPSILON, EPSILON_LABEL, Automaton, Transition

log = logging.getLogger(__name__)

# Front-end de notación: expresión regular (infix) -> AFN-ε de Thompson.

class RegexSyntaxError(ValueError):
    pass

# ============================ Tokenización / ER ===============================
@dataclass
class Token:
    kind: str
    value: Optional[str] = None
    # kind ∈ {"LIT","EPS","ALT","CONCAT","STAR","PLUS","QMARK","LP","RP"}

_OPS = {"|": "ALT", "(": "LP", ")": "RP", "*": "STAR", "+": "PLUS", "?": "QMARK"}


def tokenize(expr: str) -> List[Token]:
    tokens: List[Token] = []
    i, n = 0, len(expr)
    while i < n:
        c = expr[i]
        if c == "\\":  # escape
            if i + 1 >= n:
                raise RegexSyntaxError("Escape '\\' al final de la expresión")
            tokens.append(Token("LIT", expr[i + 1]))
            i += 2
        elif c in " \t\r\n":
            i += 1
        elif c == EPSILON_LABEL:
            tokens.append(Token("EPS"))
            i += 1
        elif c in _OPS:
            tokens.append(Token(_OPS[c]))
            i += 1
        else:
            tokens.append(Token("LIT", c))
            i += 1
    return tokens


def _empty_alternatives(tokens: List[Token]) -> List[Token]:
    """ '(|a)', 'a|' y '()' significan ε: se inserta un token EPS explícito. """
    out: List[Token] = []
    prev: Optional[Token] = None
    for t in tokens:
        opens = prev is None or prev.kind in ("LP", "ALT")
        if opens and t.kind in ("ALT", "RP"):
            out.append(Token("EPS"))
        out.append(t)
        prev = t
    if prev is None or prev.kind == "ALT":
        out.append(Token("EPS"))
    return out


def add_concat(tokens: List[Token]) -> List[Token]:
    """ Inserta tokens CONCAT explícitos donde corresponde. """
    out: List[Token] = []
    prev: Optional[Token] = None
    for t in tokens:
        if prev is not None:
            left = prev.kind in ("LIT", "EPS", "RP", "STAR", "PLUS", "QMARK")
            right = t.kind in ("LIT", "EPS", "LP")
            if left and right:
                out.append(Token("CONCAT"))
        out.append(t)
        prev = t
    return out

# =============================== Shunting Yard ===============================
PRECEDENCE = {"ALT": 1, "CONCAT": 2}


def to_postfix(tokens: List[Token]) -> List[Token]:
    out: List[Token] = []
    ops: List[Token] = []
    for t in tokens:
        if t.kind in ("LIT", "EPS", "STAR", "PLUS", "QMARK"):
            # los unarios postfijos ya siguen a su operando
            out.append(t)
        elif t.kind == "LP":
            ops.append(t)
        elif t.kind == "RP":
            while ops and ops[-1].kind != "LP":
                out.append(ops.pop())
            if not ops:
                raise RegexSyntaxError("Paréntesis no balanceados: falta '('")
            ops.pop()
        else:
            while ops and ops[-1].kind != "LP" and PRECEDENCE[ops[-1].kind] >= PRECEDENCE[t.kind]:
                out.append(ops.pop())
            ops.append(t)
    while ops:
        if ops[-1].kind == "LP":
            raise RegexSyntaxError("Paréntesis no balanceados: falta ')'")
        out.append(ops.pop())
    return out

# =============================== Thompson AFN ================================
class _Builder:
    def __init__(self):
        self.count = 0
        self.transitions: List[Transition] = []

    def state(self) -> int:
        sid = self.count
        self.count += 1
        return sid

    def edge(self, u: int, sym, v: int):
        self.transitions.append(Transition(u, sym, v))


Fragment = Tuple[int, int]  # (inicio, aceptación)


def thompson(postfix: List[Token]) -> Automaton:
    """ Construye el AFN-ε de Thompson a partir de la postfija. """
    b = _Builder()
    st: List[Fragment] = []

    def pop() -> Fragment:
        if not st:
            raise RegexSyntaxError("Operador sin operando")
        return st.pop()

    for t in postfix:
        if t.kind in ("LIT", "EPS"):
            s, f = b.state(), b.state()
            b.edge(s, t.value if t.kind == "LIT" else EPSILON, f)
            st.append((s, f))
        elif t.kind == "CONCAT":
            (s2, f2), (s1, f1) = pop(), pop()
            b.edge(f1, EPSILON, s2)
            st.append((s1, f2))
        elif t.kind == "ALT":
            (s2, f2), (s1, f1) = pop(), pop()
            s, f = b.state(), b.state()
            b.edge(s, EPSILON, s1)
            b.edge(s, EPSILON, s2)
            b.edge(f1, EPSILON, f)
            b.edge(f2, EPSILON, f)
            st.append((s, f))
        else:  # STAR, PLUS, QMARK
            s1, f1 = pop()
            s, f = b.state(), b.state()
            b.edge(s, EPSILON, s1)
            b.edge(f1, EPSILON, f)
            if t.kind in ("STAR", "QMARK"):
                b.edge(s, EPSILON, f)
            if t.kind in ("STAR", "PLUS"):
                b.edge(f1, EPSILON, s1)
            st.append((s, f))

    if len(st) != 1:
        raise RegexSyntaxError("Postfija inválida para Thompson")
    start, accept = st[0]
    return Automaton(
        nodes=frozenset(range(b.count)),
        start_node=start,
        goal_nodes=frozenset({accept}),
        transitions=tuple(b.transitions),
    )

# ============================== Front–End ====================================
def regex_to_postfix(regex: str) -> List[Token]:
    return to_postfix(add_concat(_empty_alternatives(tokenize(regex))))


def regex_to_nfa(regex: str) -> Automaton:
    """
    regex (infix) -> tokens -> +CONCAT -> postfix -> AFN-ε de Thompson
    """
    nfa = thompson(regex_to_postfix(regex))
    log.debug("ER %r -> AFN-ε de %d nodos", regex, len(nfa.nodes))
    return nfa
