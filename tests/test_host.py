import random
import threading
import unittest
from unittest import mock

from timetable_ga import host as host_mod
from timetable_ga.config import GAConfig
from timetable_ga.host import FailedEvent, FinishedEvent, ProgressEvent, SearchHost
from timetable_ga.model import Requirement, ScheduleData, SchoolClass, Teacher


def small_data():
    return ScheduleData(
        classes=[SchoolClass("C1", 5, 1), SchoolClass("C2", 5, 2)],
        teachers=[Teacher("T1"), Teacher("T2")],
        requirements=[
            Requirement("C1", "Math", "T1", 5),
            Requirement("C1", "Eng", "T2", 5),
            Requirement("C2", "Math", "T1", 5),
            Requirement("C2", "Eng", "T2", 5),
        ],
    )


class SearchHostTests(unittest.TestCase):
    def test_runs_requested_generations(self):
        host = SearchHost()
        host.start(small_data(), GAConfig(population_size=8, seed=1), generations=25, rng=random.Random(1))
        self.assertTrue(host.join(timeout=30))
        events = list(host.events(timeout=1))

        progress = [e for e in events if isinstance(e, ProgressEvent)]
        self.assertIsInstance(events[-1], FinishedEvent)
        self.assertEqual(events[-1].reason, "generations")
        self.assertEqual(events[-1].generation, 25)
        self.assertEqual(host.state, host_mod.FINISHED)
        self.assertEqual(progress[0].generation, 1)
        # cada 10 generaciones siempre hay reporte
        self.assertIn(10, [e.generation for e in progress])
        self.assertIn(20, [e.generation for e in progress])
        scores = [e.best_score for e in progress]
        self.assertEqual(scores, sorted(scores))
        self.assertEqual(host.best_score, max(scores))

    def test_reports_only_on_interval_or_improvement(self):
        host = SearchHost()
        host.start(small_data(), GAConfig(population_size=6, seed=2), generations=40, rng=random.Random(2))
        host.join(timeout=30)
        progress = [e for e in host.events(timeout=1) if isinstance(e, ProgressEvent)]
        last = None
        for e in progress:
            self.assertTrue(e.generation % 10 == 0 or last is None or e.best_score > last)
            last = e.best_score

    def test_stop_is_cooperative(self):
        received = []
        after_stop = threading.Event()
        first = threading.Event()

        def listener(event):
            received.append((after_stop.is_set(), event))
            if isinstance(event, ProgressEvent):
                first.set()

        host = SearchHost(listener=listener)
        host.start(small_data(), GAConfig(population_size=6), rng=random.Random(3))
        self.assertTrue(first.wait(timeout=30))
        host.stop()
        after_stop.set()
        self.assertTrue(host.join(timeout=30))

        late_progress = [e for flag, e in received if flag and isinstance(e, ProgressEvent)]
        self.assertEqual(late_progress, [])
        self.assertIsInstance(received[-1][1], FinishedEvent)
        self.assertEqual(received[-1][1].reason, "stopped")
        self.assertEqual(host.state, host_mod.STOPPED)

    def test_start_is_one_shot(self):
        host = SearchHost()
        host.start(small_data(), GAConfig(population_size=4), generations=1)
        with self.assertRaises(RuntimeError):
            host.start(small_data(), GAConfig(population_size=4), generations=1)
        host.join(timeout=30)

    def test_fault_becomes_failed_event(self):
        host = SearchHost()
        with mock.patch.object(host_mod.GeneticSolver, "evolve", side_effect=RuntimeError("boom")):
            host.start(small_data(), GAConfig(population_size=4), generations=5)
            self.assertTrue(host.join(timeout=30))
        events = list(host.events(timeout=1))
        self.assertEqual(len(events), 1)
        self.assertIsInstance(events[0], FailedEvent)
        self.assertIn("boom", events[0].error)
        self.assertEqual(host.state, host_mod.FAILED)
        self.assertIsInstance(host.error, RuntimeError)


if __name__ == "__main__":
    unittest.main()
