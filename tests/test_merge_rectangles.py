from __future__ import annotations
import random

from chpkcodec.merge import merge_rectangles, should_merge
from chpkcodec.pixels import Rectangle


def _grid(cells, size=8):
    return [Rectangle(c * size, r * size, size, size) for r, c in cells]


def test_two_by_two_square_merges_to_one():
    blocks = _grid([(2, 2), (2, 3), (3, 2), (3, 3)])
    assert merge_rectangles(blocks) == [Rectangle(16, 16, 16, 16)]


def test_diagonal_contact_never_merges():
    a, b = Rectangle(0, 0, 8, 8), Rectangle(8, 8, 8, 8)
    assert not should_merge(a, b)
    assert merge_rectangles([a, b]) == [a, b]


def test_wasteful_union_is_rejected():
    # bord commun de 8 sur 8 mais l'union 16x16 gaspille trop (256 > 1.25 * 192)
    wide, small = Rectangle(0, 0, 16, 8), Rectangle(0, 8, 8, 8)
    assert not should_merge(wide, small)


def test_short_shared_edge_is_rejected():
    a, b = Rectangle(0, 0, 8, 8), Rectangle(8, 5, 8, 8)   # 3 px communs < 4
    assert not should_merge(a, b)


def test_overlapping_rects_always_merge():
    a, b = Rectangle(0, 0, 10, 10), Rectangle(9, 9, 10, 10)
    assert should_merge(a, b)
    assert merge_rectangles([a, b]) == [Rectangle(0, 0, 19, 19)]


def test_empty_input():
    assert merge_rectangles([]) == []


def _overlap_free(rects):
    for i in range(len(rects)):
        for j in range(i + 1, len(rects)):
            if rects[i].overlaps(rects[j]):
                return False
    return True


def test_random_grids_merge_without_overlap_and_cover_input():
    rnd = random.Random(1234)
    for _ in range(50):
        cells = sorted({(rnd.randrange(8), rnd.randrange(8)) for _ in range(rnd.randrange(1, 30))})
        blocks = _grid(cells)
        out = merge_rectangles(blocks)
        assert _overlap_free(out)
        # chaque bloc d'origine reste couvert par un rectangle de sortie
        for b in blocks:
            assert any(o.x <= b.x and o.y <= b.y and o.right >= b.right and o.bottom >= b.bottom for o in out)
        # déterminisme
        assert merge_rectangles(list(blocks)) == out
