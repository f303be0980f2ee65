from __future__ import annotations
import json
import os
from typing import Any, Dict, List

from FsmEngine import EPSILON, Automaton, Transition

# Formato JSON:
#   {"nodes": [0, 1], "start": 0, "goals": [1],
#    "transitions": [[0, "a", 1], [0, null, 1]]}
# ε se escribe como null; los símbolos son siempre cadenas.

class AutomatonFormatError(ValueError):
    pass


def _symbol_from_json(sym: Any):
    if sym is None:
        return EPSILON
    if not isinstance(sym, str):
        raise AutomatonFormatError(f"Símbolo inválido: {sym!r}")
    return sym


def automaton_from_dict(data: Dict[str, Any]) -> Automaton:
    if not isinstance(data, dict):
        raise AutomatonFormatError("Se esperaba un objeto JSON")
    try:
        nodes = [int(x) for x in data["nodes"]]
        start = int(data["start"])
        goals = [int(x) for x in data.get("goals", [])]
        raw = data.get("transitions", [])
    except KeyError as e:
        raise AutomatonFormatError(f"Falta la clave {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise AutomatonFormatError(f"Ids de nodo inválidos: {e}") from e

    if not isinstance(raw, (list, tuple)):
        raise AutomatonFormatError(f"Se esperaba una lista de transiciones: {raw!r}")
    transitions: List[Transition] = []
    for item in raw:
        if not isinstance(item, (list, tuple)) or len(item) != 3:
            raise AutomatonFormatError(f"Transición inválida: {item!r}")
        u, sym, v = item
        a = _symbol_from_json(sym)
        try:
            transitions.append(Transition(int(u), a, int(v)))
        except (TypeError, ValueError) as e:
            raise AutomatonFormatError(f"Transición inválida: {item!r}") from e
    return Automaton(nodes=nodes, start_node=start, goal_nodes=goals, transitions=transitions)


def automaton_to_dict(automaton: Automaton) -> Dict[str, Any]:
    for t in automaton.transitions:
        if not t.is_epsilon and not isinstance(t.symbol, str):
            raise AutomatonFormatError(f"Solo se serializan símbolos de tipo str: {t.symbol!r}")

    def key(t: Transition):
        return (t.source, "" if t.is_epsilon else str(t.symbol), t.destination)

    return {
        "nodes": sorted(automaton.nodes),
        "start": automaton.start_node,
        "goals": sorted(automaton.goal_nodes),
        "transitions": [
            [t.source, None if t.is_epsilon else t.symbol, t.destination]
            for t in sorted(set(automaton.transitions), key=key)
        ],
    }


def load_automaton(path: str) -> Automaton:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AutomatonFormatError(f"JSON inválido en {path}: {e}") from e
    return automaton_from_dict(data)


def save_automaton(automaton: Automaton, path: str):
    data = automaton_to_dict(automaton)
    os.makedirs(os.path.dirname(path), exist_ok=True) if os.path.dirname(path) else None
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
