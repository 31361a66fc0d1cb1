import itertools
import random
import unittest

from svgsprite.errors import PackingError
from svgsprite.packer import (
    GuillotinePackerSheet,
    HeuristicType,
    Rectangle,
    SplitHeuristic,
    pack,
)

SQUARES = [("big", 64, 64), ("medium", 32, 32), ("small", 16, 16)]


def assert_valid_packing(test, result, bound_width, bound_height):
    rects = list(result.placements.values())
    for a, b in itertools.combinations(rects, 2):
        test.assertFalse(a.intersects(b), f"{a} overlaps {b}")
    for rect in rects:
        test.assertGreaterEqual(rect.x, 0)
        test.assertGreaterEqual(rect.y, 0)
        test.assertLessEqual(rect.right, bound_width)
        test.assertLessEqual(rect.bottom, bound_height)
        test.assertLessEqual(rect.right, result.width)
        test.assertLessEqual(rect.bottom, result.height)
    test.assertEqual(result.width, max(r.right for r in rects))
    test.assertEqual(result.height, max(r.bottom for r in rects))


class PackTests(unittest.TestCase):
    def test_three_squares_fit_and_shrink(self) -> None:
        result = pack(128, 128, SQUARES)

        self.assertEqual(set(result.placements), {"big", "medium", "small"})
        self.assertEqual(result.placements["big"], Rectangle(64, 64, 0, 0, "big"))
        self.assertEqual(result.placements["medium"], Rectangle(32, 32, 0, 64, "medium"))
        self.assertEqual(result.placements["small"], Rectangle(16, 16, 0, 96, "small"))
        self.assertEqual((result.width, result.height), (64, 112))
        assert_valid_packing(self, result, 128, 128)

    def test_too_small_canvas_rejects_everything(self) -> None:
        with self.assertRaises(PackingError) as ctx:
            pack(8, 8, SQUARES)

        self.assertEqual([name for name, _, _ in ctx.exception.rejected], ["big", "medium", "small"])
        self.assertEqual((ctx.exception.width, ctx.exception.height), (8, 8))
        self.assertIn("not all sprites fit", str(ctx.exception))

    def test_single_rejection_fails_whole_pack(self) -> None:
        with self.assertRaises(PackingError) as ctx:
            pack(64, 64, [("full", 64, 64), ("extra", 1, 1)])
        self.assertEqual(ctx.exception.rejected, [("extra", 1, 1)])

    def test_first_item_goes_to_origin(self) -> None:
        result = pack(100, 100, [("wide", 90, 10), ("tall", 10, 90)])
        self.assertEqual((result.placements["wide"].x, result.placements["wide"].y), (0, 0))

    def test_repeated_runs_are_identical(self) -> None:
        items = [(f"sprite{i}", 5 + i % 7, 3 + (i * 5) % 11) for i in range(30)]
        first = pack(128, 128, items)
        second = pack(128, 128, items)
        self.assertEqual(first, second)

    def test_random_packings_hold_invariants(self) -> None:
        rng = random.Random(1234)
        items = [(f"s{i}", rng.randint(1, 40), rng.randint(1, 40)) for i in range(40)]
        for heuristic, split in itertools.product(HeuristicType, SplitHeuristic):
            with self.subTest(heuristic=heuristic, split=split):
                result = pack(512, 512, items, heuristic, split)
                self.assertEqual(len(result.placements), len(items))
                for name, width, height in items:
                    rect = result.placements[name]
                    self.assertEqual((rect.width, rect.height), (width, height))
                assert_valid_packing(self, result, 512, 512)

    def test_exact_fit(self) -> None:
        result = pack(30, 10, [("a", 10, 10), ("b", 10, 10), ("c", 10, 10)])
        self.assertEqual((result.width, result.height), (30, 10))
        assert_valid_packing(self, result, 30, 10)


class GuillotineSheetTests(unittest.TestCase):
    def test_shorter_axis_split(self) -> None:
        sheet = GuillotinePackerSheet(100, 50, split=SplitHeuristic.SHORTEST_AXIS)
        sheet.insert(30, 20, "a")
        self.assertEqual(sheet.free_rects, [Rectangle(30, 30, 0, 20), Rectangle(70, 50, 30, 0)])

    def test_longer_axis_split(self) -> None:
        sheet = GuillotinePackerSheet(100, 50, split=SplitHeuristic.LONGEST_AXIS)
        sheet.insert(30, 20, "a")
        self.assertEqual(sheet.free_rects, [Rectangle(100, 30, 0, 20), Rectangle(70, 20, 30, 0)])

    def test_exact_fit_leaves_no_free_space(self) -> None:
        sheet = GuillotinePackerSheet(10, 10)
        self.assertIsNotNone(sheet.insert(10, 10, "a"))
        self.assertEqual(sheet.free_rects, [])
        self.assertIsNone(sheet.insert(1, 1, "b"))

    def test_bottom_left_prefers_top_most_rectangle(self) -> None:
        sheet = GuillotinePackerSheet(100, 100, heuristic=HeuristicType.BOTTOM_LEFT,
                                      split=SplitHeuristic.LONGEST_AXIS)
        sheet.insert(50, 50, "a")
        placed = sheet.insert(10, 10, "b")
        self.assertEqual((placed.x, placed.y), (50, 0))

    def test_insert_list_reports_rejections_in_order(self) -> None:
        sheet = GuillotinePackerSheet(20, 20)
        placed, rejected = sheet.insert_list([("a", 30, 5), ("b", 20, 20), ("c", 1, 1)])
        self.assertEqual([r.name for r in placed], ["b"])
        self.assertEqual(rejected, [("a", 30, 5), ("c", 1, 1)])

    def test_shrink_without_placements(self) -> None:
        sheet = GuillotinePackerSheet(10, 10)
        sheet.shrink()
        self.assertEqual((sheet.width, sheet.height), (0, 0))

    def test_rejects_invalid_sizes(self) -> None:
        with self.assertRaises(ValueError):
            GuillotinePackerSheet(0, 10)
        with self.assertRaises(ValueError):
            GuillotinePackerSheet(10, 10).insert(-1, 2, "neg")


if __name__ == "__main__":
    unittest.main()
