# timetable_ga/host.py
"""
Bucle de búsqueda en segundo plano.

Contrato: un ``start`` (datos + configuración), cero o más eventos de
progreso y un ``stop`` cooperativo. El stop se observa entre generaciones;
la generación en curso puede terminar, pero ya no se publica nada de
progreso después de que ``stop()`` retorna.
"""
import logging
import queue
import random
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from .config import GAConfig
from .ga import GeneticSolver
from .model import Chromosome, ScheduleData

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"
FINISHED = "finished"
STOPPED = "stopped"
FAILED = "failed"


@dataclass(frozen=True)
class ProgressEvent:
    generation: int
    best_score: int
    best_solution: Chromosome


@dataclass(frozen=True)
class FinishedEvent:
    generation: int
    best_score: Optional[int]
    best_solution: Chromosome
    reason: str               # "stopped" | "generations"


@dataclass(frozen=True)
class FailedEvent:
    generation: int
    error: str


SearchEvent = Union[ProgressEvent, FinishedEvent, FailedEvent]
Listener = Callable[[SearchEvent], None]


class SearchHost:
    def __init__(self, listener: Optional[Listener] = None):
        self.listener = listener
        self.state = IDLE
        self.generation = 0
        self.best_score: Optional[int] = None
        self.best_solution: Chromosome = []
        self.error: Optional[BaseException] = None
        self._events: "queue.Queue[SearchEvent]" = queue.Queue()
        self._stop = threading.Event()
        self._lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None

    # --- API del llamador ---

    def start(
        self,
        data: ScheduleData,
        cfg: Optional[GAConfig] = None,
        generations: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("La búsqueda ya fue iniciada")
            cfg = cfg or GAConfig()
            self.state = RUNNING
            self._thread = threading.Thread(
                target=self._run, args=(data, cfg, generations, rng), daemon=True
            )
        logger.info(
            "Iniciando búsqueda: población=%d mutación=%.3f",
            cfg.population_size,
            cfg.mutation_rate,
        )
        self._thread.start()

    def stop(self) -> None:
        with self._lock:
            self._stop.set()
        logger.info("Stop solicitado en la generación %d", self.generation)

    def join(self, timeout: Optional[float] = None) -> bool:
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def events(self, timeout: Optional[float] = None) -> Iterator[SearchEvent]:
        """Itera los eventos hasta el evento terminal (Finished/Failed)."""
        while True:
            try:
                event = self._events.get(timeout=timeout)
            except queue.Empty:
                return
            yield event
            if isinstance(event, (FinishedEvent, FailedEvent)):
                return

    # --- Bucle ---

    def _publish(self, event: SearchEvent) -> bool:
        with self._lock:
            if isinstance(event, ProgressEvent) and self._stop.is_set():
                return False
            self._events.put(event)
            if self.listener is not None:
                self.listener(event)
        return True

    def _run(self, data: ScheduleData, cfg: GAConfig, generations: Optional[int], rng) -> None:
        last_reported = None
        try:
            solver = GeneticSolver(data, cfg, rng)
            population = solver.init_population()
            while not self._stop.is_set():
                if generations is not None and self.generation >= generations:
                    break
                result = solver.evolve(population)
                population = result.population
                self.generation += 1
                if self.best_score is None or result.best_score > self.best_score:
                    self.best_score = result.best_score
                    self.best_solution = result.best_solution

                # cada N generaciones o cuando mejora el mejor reportado
                if (
                    self.generation % cfg.progress_interval == 0
                    or last_reported is None
                    or result.best_score > last_reported
                ):
                    last_reported = result.best_score
                    self._publish(ProgressEvent(self.generation, result.best_score, result.best_solution))
        except Exception as exc:
            logger.exception("Error en la generación %d", self.generation)
            self.error = exc
            self.state = FAILED
            self._publish(FailedEvent(self.generation, f"{type(exc).__name__}: {exc}"))
            return

        reason = STOPPED if self._stop.is_set() else "generations"
        self.state = STOPPED if reason == STOPPED else FINISHED
        logger.info("Búsqueda terminada (%s) en la generación %d, score=%s", reason, self.generation, self.best_score)
        self._publish(FinishedEvent(self.generation, self.best_score, self.best_solution, reason))
