# timetable_ga/ga.py
import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from .config import GAConfig
from .evaluation import EvaluationContext, calculate_fitness
from .initial_population import build_initial_population
from .model import Chromosome, ScheduleData
from .operators import class_crossover, clone, mutate_swap, tournament_select

logger = logging.getLogger(__name__)


@dataclass
class EvolutionResult:
    best_score: int
    best_solution: Chromosome
    population: List[Chromosome]


class GeneticSolver:
    """
    Motor sin estado entre llamadas: cada ``evolve`` recibe una población y
    devuelve la siguiente. Quién decide cuántas generaciones correr es el
    bucle que lo maneja (ver ``host.SearchHost``).
    """

    def __init__(self, data: ScheduleData, cfg: Optional[GAConfig] = None, rng: Optional[random.Random] = None):
        self.data = data
        self.cfg = cfg or GAConfig()
        self.rng = rng or random.Random(self.cfg.seed)
        self.ctx = EvaluationContext.build(data, self.cfg)

    def init_population(self) -> List[Chromosome]:
        return build_initial_population(self.data, self.cfg, self.rng)

    def fitness(self, chromosome: Chromosome) -> int:
        return calculate_fitness(chromosome, self.ctx)

    def evolve(self, population: List[Chromosome]) -> EvolutionResult:
        if not population:
            raise ValueError("La población está vacía")

        scored = [(self.fitness(ind), ind) for ind in population]
        scored.sort(key=lambda x: x[0], reverse=True)
        best_score, best = scored[0]

        # Elitismo
        new_pop: List[Chromosome] = [clone(ind) for _, ind in scored[: self.cfg.elite_size]]

        while len(new_pop) < self.cfg.population_size:
            p1 = tournament_select(scored, self.cfg.tournament_size, self.rng)
            p2 = tournament_select(scored, self.cfg.tournament_size, self.rng)
            child = class_crossover(p1, p2, self.rng)
            mutate_swap(child, self.cfg.mutation_rate, self.rng)
            new_pop.append(child)

        return EvolutionResult(best_score=best_score, best_solution=clone(best), population=new_pop)

    def run(self, generations: int, population: Optional[List[Chromosome]] = None) -> EvolutionResult:
        """Bucle síncrono simple; útil para scripts y pruebas."""
        population = population if population is not None else self.init_population()
        result = None
        for gen in range(generations):
            result = self.evolve(population)
            population = result.population
            if gen % self.cfg.progress_interval == 0 or gen == generations - 1:
                logger.info("Gen %d: mejor score=%d", gen, result.best_score)
        if result is None:
            scored = max(population, key=self.fitness)
            return EvolutionResult(self.fitness(scored), clone(scored), population)
        return result
