from __future__ import annotations
import os
from collections import deque, defaultdict
from typing import Dict, List, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import Circle, FancyArrowPatch, Arc

from FsmEngine import EPSILON_LABEL, Automaton

# ============================== Layout =======================================
def layout_positions(automaton: Automaton) -> Dict[int, Tuple[float, float]]:
    """
    Layout por niveles (BFS desde el inicial); los nodos inalcanzables
    van a la última columna.
    """
    adj: Dict[int, set] = defaultdict(set)
    for t in automaton.transitions:
        adj[t.source].add(t.destination)
    dist: Dict[int, int] = {automaton.start_node: 0}
    q = deque([automaton.start_node])
    while q:
        u = q.popleft()
        for v in sorted(adj[u]):
            if v not in dist:
                dist[v] = dist[u] + 1
                q.append(v)
    maxd = max(dist.values()) + 1 if len(dist) < len(automaton.nodes) else max(dist.values())
    for s in automaton.nodes:
        dist.setdefault(s, maxd)
    levels: Dict[int, List[int]] = {}
    for s, d in dist.items():
        levels.setdefault(d, []).append(s)
    pos: Dict[int, Tuple[float, float]] = {}
    sep_x, sep_y = 2.6, 1.6
    for d in sorted(levels):
        ys = sorted(levels[d])
        n = len(ys)
        for i, s in enumerate(ys):
            pos[s] = (d * sep_x, (i - (n - 1) / 2.0) * sep_y)
    return pos

# ============================== Dibujo =======================================
def draw_automaton_png(automaton: Automaton, filename_png: str, title: Optional[str] = None) -> str:
    pos = layout_positions(automaton)
    xs = [p[0] for p in pos.values()] + [-2]
    ys = [p[1] for p in pos.values()] + [0]
    x_min, x_max = min(xs) - 1.2, max(xs) + 1.2
    y_min, y_max = min(ys) - 1.2, max(ys) + 1.2

    fig, ax = plt.subplots(figsize=(max(6, (x_max - x_min) * 1.2),
                                    max(4, (y_max - y_min) * 1.2)))
    ax.set_xlim(x_min, x_max); ax.set_ylim(y_min, y_max)
    ax.axis("off")
    if title:
        ax.set_title(title)
    R = 0.28

    for u in sorted(automaton.nodes):
        x, y = pos[u]
        ax.add_patch(Circle((x, y), R, fill=False, lw=2))
        if u in automaton.goal_nodes:
            ax.add_patch(Circle((x, y), R - 0.06, fill=False, lw=2))
        ax.text(x, y, str(u), ha="center", va="center", fontsize=10)
        if u == automaton.start_node:
            ax.add_patch(FancyArrowPatch((x - 1.6, y), (x - R, y), arrowstyle="->", lw=1.6, mutation_scale=14))

    # agrupa símbolos por arista (u, v); ε se dibuja punteada
    labels = defaultdict(list)
    eps_edges = set()
    for t in set(automaton.transitions):
        if t.is_epsilon:
            eps_edges.add((t.source, t.destination))
        else:
            labels[(t.source, t.destination)].append(str(t.symbol))
    for edge in eps_edges:
        labels[edge].append(EPSILON_LABEL)

    for (u, v), syms in labels.items():
        x1, y1 = pos[u]; x2, y2 = pos[v]
        lbl = ",".join(sorted(syms))
        style = "dashed" if syms == [EPSILON_LABEL] else "solid"
        if u == v:
            ax.add_patch(Arc((x1, y1 + R + 0.20), 0.8, 0.6, angle=0, theta1=220, theta2=-40, lw=1.5, linestyle=style))
            ax.text(x1 + 0.05, y1 + R + 0.7, lbl, fontsize=9)
            continue
        ax.add_patch(FancyArrowPatch((x1, y1), (x2, y2), arrowstyle="->", lw=1.5, linestyle=style,
                                     connectionstyle="arc3,rad=0.15", mutation_scale=12, shrinkA=12, shrinkB=12))
        xm, ym = (x1 + x2) / 2.0, (y1 + y2) / 2.0 + 0.15
        ax.text(xm, ym, lbl, fontsize=9, ha="center")

    fig.tight_layout()
    if not filename_png.lower().endswith(".png"):
        filename_png += ".png"
    os.makedirs(os.path.dirname(filename_png), exist_ok=True) if os.path.dirname(filename_png) else None
    fig.savefig(filename_png, dpi=150)
    plt.close(fig)
    return filename_png
