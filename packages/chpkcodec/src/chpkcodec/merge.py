# packages/chpkcodec/src/chpkcodec/merge.py
from __future__ import annotations

"""
chpkcodec.merge - fusion gloutonne des blocs en patches (Rectangle Merger)

Règles
------
- Deux rectangles dont les aires se recouvrent sont toujours fusionnés.
- Deux rectangles qui partagent un bord sont candidats si la longueur commune
  est >= 50 % du côté correspondant le plus court ; la fusion est refusée si
  l'aire de l'union dépasse 1.25 x (aireA + aireB).
- Coin contre coin (contact diagonal) : jamais fusionné.

Le balayage est `i < j` dans l'ordre courant de la liste ; après chaque fusion
`working[i]` devient l'union, `working[j]` disparaît et le balayage repart de
zéro. Même entrée ⇒ même sortie, et la sortie ne contient aucun recouvrement.
"""

from typing import Iterable, List

from .pixels import Rectangle

__all__ = ["EDGE_OVERLAP_RATIO", "MAX_UNION_WASTE", "should_merge", "merge_rectangles"]

EDGE_OVERLAP_RATIO = 0.5
MAX_UNION_WASTE = 1.25


def _edge_candidate(a: Rectangle, b: Rectangle) -> bool:
    x_overlap = a.x < b.right and b.x < a.right
    y_overlap = a.y < b.bottom and b.y < a.bottom

    # bord horizontal commun (l'un au-dessus de l'autre)
    if x_overlap and (a.bottom == b.y or b.bottom == a.y):
        shared = min(a.right, b.right) - max(a.x, b.x)
        return shared >= min(a.width, b.width) * EDGE_OVERLAP_RATIO

    # bord vertical commun (côte à côte)
    if y_overlap and (a.right == b.x or b.right == a.x):
        shared = min(a.bottom, b.bottom) - max(a.y, b.y)
        return shared >= min(a.height, b.height) * EDGE_OVERLAP_RATIO

    return False


def should_merge(a: Rectangle, b: Rectangle) -> bool:
    if a.overlaps(b):
        return True
    if not _edge_candidate(a, b):
        return False
    return a.union(b).area <= (a.area + b.area) * MAX_UNION_WASTE


def merge_rectangles(blocks: Iterable[Rectangle]) -> List[Rectangle]:
    working: List[Rectangle] = list(blocks)
    merged = True
    while merged:
        merged = False
        n = len(working)
        for i in range(n):
            for j in range(i + 1, n):
                if should_merge(working[i], working[j]):
                    working[i] = working[i].union(working[j])
                    del working[j]
                    merged = True
                    break
            if merged:
                break
    return working
