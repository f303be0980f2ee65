from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence, Tuple

from FsmEngine import (
    EPSILON, Automaton, AutomatonError, Transition,
    build_deterministic_recognizer, build_nfa_epsilon_recognizer,
    diff_test, recognize, subset_construction,
)
from FsmIO import AutomatonFormatError, load_automaton, save_automaton
from FsmRegex import RegexSyntaxError, regex_to_nfa

log = logging.getLogger(__name__)

# ============================== Caso de ejemplo ==============================
DEMO_REGEX = "(ab*|b*c|a*c*)"

DEMO_POSITIVE = [
    "", "a", "aaaaaaaaa", "aaaaaaaaaccccccccc", "aaaaaaaaac", "ab",
    "abbbbbbbbb", "accccccccc", "bbbbbbbbbc", "bc", "c", "ccccccccc",
]
DEMO_NEGATIVE = [
    "aab", "aba", "aca", "b", "bbbbbbbbb", "bbbbbbbbbcc", "bcb", "ca", "cac", "cb",
]


def demo_automaton() -> Automaton:
    """ (ab*|b*c|a*c*) escrito a mano como AFN-ε de 7 nodos. """
    return Automaton(
        nodes=range(7),
        start_node=0,
        goal_nodes={2, 4, 5, 6},
        transitions=[
            Transition(0, EPSILON, 1), Transition(1, "a", 2), Transition(2, "b", 2),
            Transition(0, EPSILON, 3), Transition(3, "b", 3), Transition(3, "c", 4),
            Transition(0, EPSILON, 5), Transition(5, "a", 5), Transition(5, EPSILON, 6),
            Transition(6, "c", 6),
        ],
    )

# ================================== CLI ======================================
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="fsm-engine",
        description="Reconocimiento con AFN-ε / AFD y conversión por subconjuntos",
    )
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--regex", help="expresión regular a convertir en AFN-ε")
    src.add_argument("--json", help="ruta a un autómata en formato JSON")
    src.add_argument("--demo", action="store_true", help=f"usa el AFN-ε de {DEMO_REGEX}")
    p.add_argument("--words", help="palabras a probar, separadas por comas")
    p.add_argument("--sep", help="separador de símbolos dentro de cada palabra (por defecto, un carácter por símbolo)")
    p.add_argument("--dfa-out", help="guarda el AFD convertido como JSON")
    p.add_argument("--png", help="carpeta donde dibujar AFN-ε y AFD")
    p.add_argument("--check", type=int, default=0, metavar="N", help="prueba diferencial con N palabras aleatorias")
    p.add_argument("-v", "--verbose", action="store_true", help="logging a nivel DEBUG")
    return p.parse_args(argv)


def _load_source(args: argparse.Namespace) -> Automaton:
    if args.demo:
        return demo_automaton()
    if args.regex is not None:
        return regex_to_nfa(args.regex)
    return load_automaton(args.json)


def _split(word: str, sep: Optional[str]) -> Sequence[str]:
    if not sep:
        return word
    return tuple(word.split(sep)) if word else ()


def _words(args: argparse.Namespace) -> List[Tuple[Sequence[str], Optional[bool]]]:
    # (palabra, esperado); esperado=None si no hay expectativa
    out: List[Tuple[Sequence[str], Optional[bool]]] = []
    if args.demo:
        out += [(w, True) for w in DEMO_POSITIVE]
        out += [(w, False) for w in DEMO_NEGATIVE]
    if args.words is not None:
        out += [(_split(w, args.sep), None) for w in args.words.split(",")]
    return out


def run(args: argparse.Namespace) -> int:
    nfa = _load_source(args)
    dfa, subsets = subset_construction(nfa)
    n_rec = build_nfa_epsilon_recognizer(nfa)
    d_rec = build_deterministic_recognizer(dfa)

    print(f"AFN-ε: {len(nfa.nodes)} nodos, {len(nfa.transitions)} transiciones")
    print(f"AFD:   {len(dfa.nodes)} nodos, {len(dfa.transitions)} transiciones")
    for S, i in sorted(subsets.items(), key=lambda kv: kv[1]):
        mark = "*" if i in dfa.goal_nodes else " "
        print(f"  {mark}{i}: {{{', '.join(str(s) for s in sorted(S))}}}")

    status = 0
    for w, expected in _words(args):
        a = recognize(n_rec, w)
        b = recognize(d_rec, w)
        shown = w if isinstance(w, str) else (args.sep or "").join(w)
        line = f"{(shown or 'ε'):>20} -> AFN-ε: {a} | AFD: {b}"
        if a != b:
            status = 1
            line += "  [DISCREPANCIA]"
        if expected is not None:
            ok = a == expected and b == expected
            line += "  [OK]" if ok else "  [FALLO]"
            if not ok:
                status = 1
        print(line)

    if args.check > 0:
        oks, mism = diff_test(nfa, dfa, trials=args.check)
        print(f"Prueba diferencial: {oks} coincidencias, {mism} discrepancias")
        if mism:
            status = 1

    if args.dfa_out:
        save_automaton(dfa, args.dfa_out)
        log.info("AFD guardado en %s", args.dfa_out)

    if args.png:
        from FsmDraw import draw_automaton_png
        p1 = draw_automaton_png(nfa, os.path.join(args.png, "nfa.png"), title="AFN-ε")
        p2 = draw_automaton_png(dfa, os.path.join(args.png, "dfa.png"), title="AFD")
        print(f"Diagramas: {p1}, {p2}")
    return status


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except (AutomatonError, RegexSyntaxError, AutomatonFormatError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
