import unittest

from timetable_ga.model import Course, Gene, ScheduleData, SchoolClass, Teacher
from timetable_ga.schedule import (
    Period,
    class_grid,
    find_swap_suggestions,
    from_class_periods,
    schedule_frame,
    to_class_periods,
)


def data():
    return ScheduleData(
        classes=[SchoolClass("A", 5, 1), SchoolClass("B", 5, 2)],
        courses=[Course("X", "數學"), Course("Y", "體育")],
        teachers=[Teacher("T1", "王", unavailable_slots=frozenset({2})), Teacher("T2", "李")],
    )


class ConversionTests(unittest.TestCase):
    def test_to_class_periods(self):
        chrom = [Gene("A", 0, "X", "T1"), Gene("A", 34, "Y", "T2", locked=True)]
        periods = to_class_periods(chrom, ["A", "B"])
        self.assertEqual(len(periods["A"]), 35)
        self.assertEqual(periods["A"][0], Period("X", "T1"))
        self.assertEqual(periods["A"][34], Period("Y", "T2", locked=True))
        self.assertEqual(periods["B"], [None] * 35)

    def test_round_trip_keeps_genes(self):
        chrom = [Gene("A", 3, "X", "T1"), Gene("B", 10, "Y", "T2", locked=True)]
        back = from_class_periods(to_class_periods(chrom))
        self.assertEqual(sorted(back, key=lambda g: g.class_id), chrom)

    def test_frames(self):
        chrom = [Gene("A", 0, "X", "T1"), Gene("A", 8, "Y", None)]
        df = schedule_frame(chrom, data())
        self.assertEqual(list(df["Curso"]), ["數學", "體育"])
        self.assertEqual(list(df["Docente"]), ["王", None])
        grid = class_grid(chrom, data(), "A")
        self.assertEqual(grid.shape, (7, 5))
        self.assertEqual(grid.loc["P1", "Lun"], "數學")
        self.assertEqual(grid.loc["P2", "Mar"], "體育")
        self.assertEqual(grid.loc["P3", "Mar"], "")


class SuggestionTests(unittest.TestCase):
    def test_moves_and_swaps(self):
        # T1 ocupado en B a la hora 1 y no disponible a la hora 2
        chrom = [
            Gene("A", 0, "X", "T1"),
            Gene("A", 3, "Y", "T2"),
            Gene("B", 1, "X", "T1"),
        ]
        suggestions = find_swap_suggestions(chrom, "A", 0, data())
        self.assertEqual(len(suggestions), 3)
        self.assertTrue(all(s.kind == "MOVE" for s in suggestions))
        targets = [s.target for s in suggestions]
        self.assertNotIn(1, targets)
        self.assertNotIn(2, targets)
        self.assertNotIn(3, targets)

    def test_swap_when_class_is_full(self):
        chrom = [Gene("A", s, "Y", "T2") for s in range(35)]
        chrom[0] = Gene("A", 0, "X", "T1")
        suggestions = find_swap_suggestions(chrom, "A", 0, data())
        self.assertTrue(suggestions)
        self.assertTrue(all(s.kind == "SWAP" for s in suggestions))
        self.assertTrue(all(s.with_course_id == "Y" for s in suggestions))

    def test_locked_or_empty_slot_has_no_suggestions(self):
        chrom = [Gene("A", 0, "X", "T1", locked=True)]
        self.assertEqual(find_swap_suggestions(chrom, "A", 0, data()), [])
        self.assertEqual(find_swap_suggestions(chrom, "A", 5, data()), [])
        self.assertEqual(find_swap_suggestions(chrom, "Z", 0, data()), [])


if __name__ == "__main__":
    unittest.main()
