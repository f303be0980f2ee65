from __future__ import annotations
import logging
import random
from collections import deque, defaultdict
from dataclasses import dataclass, field
from itertools import product
from typing import Deque, Dict, FrozenSet, Hashable, Iterable, List, Optional, Set, Tuple, Union

log = logging.getLogger(__name__)

# ============================ Configuración básica ============================
class _Epsilon:
    """ Centinela único para transiciones ε (no es un str: no colisiona con Σ). """
    __slots__ = ()

    def __repr__(self) -> str:
        return "ε"

    def __reduce__(self) -> str:
        return "EPSILON"


EPSILON = _Epsilon()
EPSILON_LABEL = "ε"   # representación textual (dibujo / JSON)
FIRST_DFA_ID = 0      # primer id que acuña la construcción de subconjuntos

Symbol = Union[Hashable, _Epsilon]
StateSet = FrozenSet[int]
Table = Dict[Tuple[int, Symbol], FrozenSet[int]]

# ================================== Errores ==================================
class AutomatonError(ValueError):
    pass


class MalformedAutomatonError(AutomatonError):
    pass


class NotDeterministicError(MalformedAutomatonError):
    pass

# ============================ Modelo de autómata =============================
@dataclass(frozen=True)
class Transition:
    source: int
    symbol: Symbol
    destination: int

    @property
    def is_epsilon(self) -> bool:
        return self.symbol is EPSILON


@dataclass(frozen=True)
class Automaton:
    """
    Descripción formal de una máquina de estados: nodos, nodo inicial,
    nodos de aceptación y transiciones. Inmutable una vez construida.
    """
    nodes: FrozenSet[int]
    start_node: int
    goal_nodes: FrozenSet[int] = frozenset()
    transitions: Tuple[Transition, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # normaliza cualquier iterable a contenedores inmutables
        object.__setattr__(self, "nodes", frozenset(self.nodes))
        object.__setattr__(self, "goal_nodes", frozenset(self.goal_nodes))
        trans = tuple(t if isinstance(t, Transition) else Transition(*t) for t in self.transitions)
        object.__setattr__(self, "transitions", trans)

    def alphabet(self) -> Set[Symbol]:
        return {t.symbol for t in self.transitions if not t.is_epsilon}

    def has_epsilon(self) -> bool:
        return any(t.is_epsilon for t in self.transitions)

    def validate(self) -> "Automaton":
        """ Verifica que todo nodo referenciado pertenezca a `nodes`. """
        if not self.nodes:
            raise MalformedAutomatonError("El autómata no tiene nodos")
        if self.start_node not in self.nodes:
            raise MalformedAutomatonError(f"Nodo inicial {self.start_node!r} no pertenece a los nodos")
        missing = self.goal_nodes - self.nodes
        if missing:
            raise MalformedAutomatonError(f"Nodos de aceptación fuera del autómata: {sorted(missing)}")
        for t in self.transitions:
            if t.source not in self.nodes or t.destination not in self.nodes:
                raise MalformedAutomatonError(f"Transición con extremo desconocido: {t}")
        return self

    def _conflicts(self) -> List[Tuple[int, Symbol]]:
        seen: Dict[Tuple[int, Symbol], int] = {}
        bad: List[Tuple[int, Symbol]] = []
        for t in self.transitions:
            key = (t.source, t.symbol)
            if key in seen and seen[key] != t.destination:
                bad.append(key)
            seen.setdefault(key, t.destination)
        return bad

    def is_deterministic(self) -> bool:
        return not self.has_epsilon() and not self._conflicts()

    def validate_deterministic(self) -> "Automaton":
        self.validate()
        for t in self.transitions:
            if t.is_epsilon:
                raise NotDeterministicError(f"Un AFD no admite transiciones ε: {t}")
        bad = self._conflicts()
        if bad:
            u, a = bad[0]
            raise NotDeterministicError(f"Más de un destino desde {u} con {a!r}")
        return self

# ========================== Reconocedor determinista =========================
class DeterministicRecognizer:
    """
    AFD compilado a una tabla (estado, símbolo) -> estado.
    Reconoce en O(|w|) tras una compilación O(|transiciones|).
    """

    def __init__(self, automaton: Automaton):
        automaton.validate_deterministic()
        self.start: int = automaton.start_node
        self.goals: FrozenSet[int] = automaton.goal_nodes
        self._table: Dict[Tuple[int, Symbol], int] = {}
        for t in automaton.transitions:
            self._table[(t.source, t.symbol)] = t.destination
        log.debug("AFD compilado: %d entradas", len(self._table))

    def step(self, state: Optional[int], sym: Symbol) -> Optional[int]:
        # None = estado muerto (sin transición definida)
        if state is None:
            return None
        return self._table.get((state, sym))

    def recognize(self, w: Iterable[Symbol]) -> bool:
        cur: Optional[int] = self.start
        for ch in w:
            if cur is None:
                return False
            cur = self.step(cur, ch)
        return cur is not None and cur in self.goals

    accepts = recognize

# ======================= Reconocedor no determinista (ε) =====================
def compile_table(automaton: Automaton) -> Table:
    """ Agrupa transiciones por (origen, símbolo); ε es un símbolo más. """
    grouped: Dict[Tuple[int, Symbol], Set[int]] = defaultdict(set)
    for t in automaton.transitions:
        grouped[(t.source, t.symbol)].add(t.destination)
    return {k: frozenset(v) for k, v in grouped.items()}


def epsilon_closure(table: Table, states: Iterable[int]) -> StateSet:
    """ ε-clausura iterativa: se expande hasta que no aparece ningún estado nuevo. """
    closure = set(states)
    stack = list(closure)
    while stack:
        u = stack.pop()
        for v in table.get((u, EPSILON), ()):
            if v not in closure:
                closure.add(v)
                stack.append(v)
    return frozenset(closure)


def move(table: Table, S: Iterable[int], sym: Symbol) -> Set[int]:
    T: Set[int] = set()
    for u in S:
        T |= table.get((u, sym), frozenset())
    return T


class NfaEpsilonRecognizer:
    """
    AFN-ε compilado a una tabla (estado, símbolo) -> conjunto de estados.
    Simula el autómata manteniendo la frontera de estados activos.
    """

    def __init__(self, automaton: Automaton):
        automaton.validate()
        self.start: int = automaton.start_node
        self.goals: FrozenSet[int] = automaton.goal_nodes
        self._table: Table = compile_table(automaton)
        log.debug("AFN-ε compilado: %d entradas", len(self._table))

    def eclosure(self, S: Iterable[int]) -> StateSet:
        return epsilon_closure(self._table, S)

    def initial(self) -> StateSet:
        return self.eclosure({self.start})

    def step(self, frontier: StateSet, sym: Symbol) -> StateSet:
        return self.eclosure(move(self._table, frontier, sym))

    def recognize(self, w: Iterable[Symbol]) -> bool:
        frontier = self.initial()
        for ch in w:
            # ε no es un símbolo de entrada
            if not frontier or ch is EPSILON:
                return False
            frontier = self.step(frontier, ch)
        return not frontier.isdisjoint(self.goals)

    accepts = recognize

# ======================= Subconjuntos: AFN-ε -> AFD ==========================
@dataclass
class ConversionContext:
    """ Contabilidad de una sola conversión; se crea y se descarta por llamada. """
    table: Table
    next_id: int = FIRST_DFA_ID
    subset_id: Dict[StateSet, int] = field(default_factory=dict)
    pending: Deque[StateSet] = field(default_factory=deque)
    transitions: List[Transition] = field(default_factory=list)

    def mint(self, S: StateSet) -> int:
        i = self.next_id
        self.next_id += 1
        self.subset_id[S] = i
        self.pending.append(S)
        return i

    def id_of(self, S: StateSet) -> int:
        if S not in self.subset_id:
            return self.mint(S)
        return self.subset_id[S]


def _symbol_order(sym: Symbol) -> Tuple[str, str]:
    return (type(sym).__name__, repr(sym))


def next_symbols(table: Table, S: StateSet) -> List[Symbol]:
    """ Símbolos no-ε que salen de algún estado de S, en orden estable. """
    chars = {a for (u, a) in table if u in S and a is not EPSILON}
    return sorted(chars, key=_symbol_order)


def subset_construction(nfa: Automaton, first_id: int = FIRST_DFA_ID) -> Tuple[Automaton, Dict[StateSet, int]]:
    """
    Construcción por subconjuntos. Devuelve el AFD y el mapa
    conjunto-de-estados -> id de nodo AFD.
    """
    nfa.validate()
    ctx = ConversionContext(table=compile_table(nfa), next_id=first_id)

    S0 = epsilon_closure(ctx.table, {nfa.start_node})
    start_id = ctx.mint(S0)

    while ctx.pending:
        S = ctx.pending.popleft()
        u = ctx.subset_id[S]
        for c in next_symbols(ctx.table, S):
            U = epsilon_closure(ctx.table, move(ctx.table, S, c))
            ctx.transitions.append(Transition(u, c, ctx.id_of(U)))

    goals = {i for S, i in ctx.subset_id.items() if not S.isdisjoint(nfa.goal_nodes)}
    dfa = Automaton(
        nodes=frozenset(ctx.subset_id.values()),
        start_node=start_id,
        goal_nodes=frozenset(goals),
        transitions=tuple(ctx.transitions),
    )
    log.debug("Subconjuntos: %d nodos AFN-ε -> %d nodos AFD, %d transiciones",
              len(nfa.nodes), len(dfa.nodes), len(dfa.transitions))
    return dfa, dict(ctx.subset_id)

# ============================== Operaciones ==================================
def build_deterministic_recognizer(automaton: Automaton) -> DeterministicRecognizer:
    return DeterministicRecognizer(automaton)


def build_nfa_epsilon_recognizer(automaton: Automaton) -> NfaEpsilonRecognizer:
    return NfaEpsilonRecognizer(automaton)


def recognize(recognizer: Union[DeterministicRecognizer, NfaEpsilonRecognizer], sequence: Iterable[Symbol]) -> bool:
    return recognizer.recognize(sequence)


def convert_nfa_epsilon_to_dfa(nfa: Automaton, first_id: int = FIRST_DFA_ID) -> Automaton:
    dfa, _ = subset_construction(nfa, first_id=first_id)
    return dfa

# =============================== Verificación ================================
def _sorted_symbols(alphabet: Iterable[Symbol]) -> List[Symbol]:
    return sorted(set(alphabet), key=_symbol_order)


def random_words(alphabet: Iterable[Symbol], trials: int, max_len: int = 6, seed: int = 123) -> List[Tuple[Symbol, ...]]:
    rng = random.Random(seed)
    letters = _sorted_symbols(alphabet)
    out: List[Tuple[Symbol, ...]] = []
    for _ in range(trials):
        L = rng.randint(0, max_len)
        if letters:
            out.append(tuple(rng.choice(letters) for _ in range(L)))
        else:
            out.append(())
    return out


def enumerate_words(alphabet: Iterable[Symbol], max_len: int) -> List[Tuple[Symbol, ...]]:
    """ Todas las palabras de longitud <= max_len, por longitud y luego en orden. """
    letters = _sorted_symbols(alphabet)
    out: List[Tuple[Symbol, ...]] = []
    for L in range(max_len + 1):
        out.extend(product(letters, repeat=L))
    return out


def diff_test(nfa: Automaton, dfa: Automaton, trials: int = 200, max_len: int = 6, seed: int = 123) -> Tuple[int, int]:
    Σ = nfa.alphabet() | dfa.alphabet()
    n = NfaEpsilonRecognizer(nfa)
    d = DeterministicRecognizer(dfa)
    oks = 0; mism = 0
    for w in random_words(Σ, trials=trials, max_len=max_len, seed=seed):
        if n.recognize(w) == d.recognize(w):
            oks += 1
        else:
            mism += 1
            log.debug("Discrepancia en %r", w)
    return oks, mism
