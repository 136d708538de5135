import tempfile
import unittest
from pathlib import Path

from timetable_ga.config import GAConfig, load_config
from timetable_ga.data_loader import load_request, parse_data, parse_request
from timetable_ga.model import SubjectCategory

REQUEST = {
    "config": {"populationSize": 30, "mutationRate": 0.2, "unknown": 1},
    "data": {
        "classes": [{"id": 101, "grade": 2, "classNum": 1, "homeroomTeacherId": "T1"}],
        "courses": [{"id": "C1", "name": "國語"}, {"id": "C2", "name": {"name": "數學"}}],
        "teachers": [
            {"id": "T1", "name": "王", "unavailableSlots": [0, 1], "avoidSlots": [5], "classroomId": "R1"},
            {"id": "T2", "name": "李"},
        ],
        "classrooms": [{"id": "R1", "name": "美勞教室"}],
        "requirements": [
            {"classId": 101, "courseId": "C1", "teacherId": "T1", "periodsNeeded": 6, "fixedSlots": [2]},
            {"classId": 101, "courseId": "C2", "teacherId": None, "periodsNeeded": 4},
        ],
    },
}


class ConfigTests(unittest.TestCase):
    def test_defaults(self):
        cfg = GAConfig()
        self.assertEqual(cfg.population_size, 50)
        self.assertEqual(cfg.mutation_rate, 0.01)
        self.assertEqual(cfg.tournament_size, 3)
        self.assertEqual(cfg.progress_interval, 10)

    def test_from_dict_accepts_camel_case(self):
        cfg = GAConfig.from_dict({"populationSize": 12, "mutation_rate": 0.5, "foo": "bar"})
        self.assertEqual(cfg.population_size, 12)
        self.assertEqual(cfg.mutation_rate, 0.5)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            GAConfig(population_size=0)
        with self.assertRaises(ValueError):
            GAConfig(mutation_rate=1.5)
        with self.assertRaises(ValueError):
            GAConfig(elite_size=0)

    def test_yaml_strings_are_coerced(self):
        cfg = GAConfig.from_dict({"tournamentSize": "4", "progress_interval": "5", "elite_size": "2", "generations": "30"})
        self.assertEqual((cfg.tournament_size, cfg.progress_interval, cfg.elite_size, cfg.generations), (4, 5, 2, 30))
        self.assertEqual(25 % cfg.progress_interval, 0)

    def test_load_config_yaml_and_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("population_size: 7\nseed: 3\n", encoding="utf-8")
            cfg = load_config(str(path))
            self.assertEqual((cfg.population_size, cfg.seed), (7, 3))
            self.assertEqual(load_config(str(Path(tmp) / "nope.yaml")), GAConfig())

    def test_non_mapping_config_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(str(path))


class LoaderTests(unittest.TestCase):
    def test_parse_request(self):
        data, cfg = parse_request(REQUEST)
        self.assertEqual(cfg.population_size, 30)
        self.assertEqual(data.classes[0].id, "101")
        self.assertEqual(data.classes[0].grade, 2)
        t1 = data.teacher_by_id()["T1"]
        self.assertEqual(t1.unavailable_slots, frozenset({0, 1}))
        self.assertEqual(t1.avoid_slots, frozenset({5}))
        self.assertEqual(t1.classroom_id, "R1")
        self.assertIsNone(data.teacher_by_id()["T2"].classroom_id)
        self.assertEqual(data.course_by_id()["C2"].name, "數學")
        self.assertEqual(data.course_by_id()["C2"].category, SubjectCategory.MATH)
        self.assertEqual(data.requirements[0].fixed_slots, (2,))
        self.assertEqual(data.requirements[0].class_id, "101")
        self.assertIsNone(data.requirements[1].teacher_id)

    def test_snake_case_keys(self):
        data = parse_data({
            "teachers": [{"id": "T9", "unavailable_slots": [3]}],
            "requirements": [{"class_id": "A", "course_id": "X", "teacher_id": "T9", "periods_needed": 2}],
        })
        self.assertEqual(data.teachers[0].unavailable_slots, frozenset({3}))
        self.assertEqual(data.requirements[0].periods_needed, 2)

    def test_invalid_snapshot(self):
        with self.assertRaises(ValueError):
            parse_data({"classes": [{"grade": 1}]})

    def test_load_request_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "req.yaml"
            path.write_text(
                "config: {populationSize: 5}\n"
                "data:\n"
                "  classes: [{id: A, grade: 3}]\n"
                "  requirements: [{classId: A, courseId: X, teacherId: T, periodsNeeded: 2}]\n",
                encoding="utf-8",
            )
            data, cfg = load_request(str(path))
            self.assertEqual(cfg.population_size, 5)
            self.assertEqual(data.classes[0].grade, 3)
            with self.assertRaises(ValueError):
                load_request(str(Path(tmp) / "missing.yaml"))


if __name__ == "__main__":
    unittest.main()
