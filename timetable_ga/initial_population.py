# timetable_ga/initial_population.py
import logging
import random
from typing import Dict, List, Optional

from .config import GAConfig
from .model import Chromosome, Gene, Requirement, ScheduleData
from .timeslots import TOTAL_SLOTS, is_slot_allowed

logger = logging.getLogger(__name__)

ClassSlots = Dict[str, List[Optional[Gene]]]


def _place_fixed(req: Requirement, slots: List[Optional[Gene]]) -> None:
    for s in req.fixed_slots:
        # el primero que escribe se queda el slot
        if 0 <= s < TOTAL_SLOTS and slots[s] is None:
            slots[s] = Gene(req.class_id, s, req.course_id, req.teacher_id, locked=True)


def _place_random(
    req: Requirement,
    slots: List[Optional[Gene]],
    grade: int,
    unavailable: frozenset,
    cfg: GAConfig,
    rng: random.Random,
) -> int:
    """Coloca los periodos restantes al azar; devuelve cuántos quedaron sin ubicar."""
    count = req.periods_needed - len(req.fixed_slots)
    attempts = 0
    while count > 0 and attempts < cfg.max_placement_attempts:
        attempts += 1
        s = rng.randrange(TOTAL_SLOTS)
        if not is_slot_allowed(grade, s) or slots[s] is not None:
            continue
        # al principio evitamos las horas bloqueadas del docente
        if attempts <= cfg.biased_placement_attempts and s in unavailable:
            continue
        slots[s] = Gene(req.class_id, s, req.course_id, req.teacher_id)
        count -= 1
    return max(count, 0)


def build_random_individual(
    data: ScheduleData,
    cfg: GAConfig,
    rng: random.Random = random,
) -> Chromosome:
    class_slots: ClassSlots = {c.id: [None] * TOTAL_SLOTS for c in data.classes}
    grades = {c.id: c.grade for c in data.classes}
    teachers = data.teacher_by_id()

    # Primera pasada: slots pre-asignados
    for req in data.requirements:
        if req.fixed_slots and req.class_id in class_slots:
            _place_fixed(req, class_slots[req.class_id])

    # Segunda pasada: resto al azar
    unplaced = 0
    for req in data.requirements:
        slots = class_slots.get(req.class_id)
        if slots is None:
            continue
        teacher = teachers.get(req.teacher_id)
        unavailable = teacher.unavailable_slots if teacher else frozenset()
        missing = _place_random(req, slots, grades.get(req.class_id) or 1, unavailable, cfg, rng)
        if missing:
            unplaced += missing
            logger.debug(
                "Sin lugar para %d periodos de %s/%s", missing, req.class_id, req.course_id
            )
    if unplaced:
        logger.debug("Individuo con %d periodos sin ubicar", unplaced)

    return [g for slots in class_slots.values() for g in slots if g is not None]


def build_initial_population(
    data: ScheduleData,
    cfg: GAConfig,
    rng: random.Random = random,
) -> List[Chromosome]:
    return [build_random_individual(data, cfg, rng) for _ in range(cfg.population_size)]
