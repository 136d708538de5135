# timetable_ga/evaluation.py
"""
Fitness de un cromosoma (mayor es mejor):

    score = base - duras * 10000 - blandas * 10

Sin cota inferior: un horario muy conflictivo puede quedar negativo y aun
así se puede comparar con otro peor.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import DefaultDict, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .config import GAConfig
from .model import Chromosome, ScheduleData, SubjectCategory, Teacher, is_placeholder_teacher
from .timeslots import (
    AFTERNOON_START,
    DAYS_PER_WEEK,
    TOTAL_SLOTS,
    day_index,
    is_afternoon,
    period_in_day,
    slot_label,
)

# Unidades de penalización duras
HARD_TEACHER_CONFLICT = 1
HARD_TEACHER_UNAVAILABLE = 5
HARD_ROOM_CONFLICT = 20

# Unidades de penalización blandas
SOFT_TEACHER_AVOID = 3
SOFT_BLOCK_NO_PAIR = 8
SOFT_BLOCK_DAY_SPREAD = 4
SOFT_BLOCK_CONSECUTIVE_DAYS = 2
SOFT_ART_MORNING = 50
SOFT_ART_SPLIT = 30
SOFT_LANGUAGE_EXTRA_PER_DAY = 2000
SOFT_LANGUAGE_SPREAD = 200
SOFT_MATH_EXTRA_PER_DAY = 2000

LUNCH_BOUNDARY = AFTERNOON_START - 1   # el par (3, 4) cruza el almuerzo
LANGUAGE_MAX_PER_DAY = 2
LANGUAGE_TARGET_DAYS = 5


@dataclass(frozen=True)
class EvaluationContext:
    """Tablas de consulta de una corrida; se construyen una vez y no se mutan."""
    teachers: Mapping[str, Teacher]
    categories: Mapping[str, SubjectCategory]
    classroom_ids: frozenset
    base_score: int = 1_000_000
    hard_weight: int = 10_000
    soft_weight: int = 10

    @classmethod
    def build(cls, data: ScheduleData, cfg: Optional[GAConfig] = None) -> "EvaluationContext":
        cfg = cfg or GAConfig()
        return cls(
            teachers=MappingProxyType(data.teacher_by_id()),
            categories=MappingProxyType({c.id: c.category for c in data.courses}),
            classroom_ids=frozenset(r.id for r in data.classrooms),
            base_score=cfg.base_score,
            hard_weight=cfg.hard_weight,
            soft_weight=cfg.soft_weight,
        )


@dataclass
class EvaluationResult:
    score: int
    hard: int = 0
    soft: int = 0
    teacher_conflicts: int = 0
    unavailable_hits: int = 0
    room_conflicts: int = 0
    avoid_hits: int = 0
    violations: List[str] = field(default_factory=list)


def _day_counts(slots: Iterable[int]) -> np.ndarray:
    days = np.asarray([day_index(s) for s in slots], dtype=int)
    return np.bincount(days, minlength=DAYS_PER_WEEK)


def _is_block_pair(s1: int, s2: int) -> bool:
    # mismo día, contiguos y sin cruzar el almuerzo
    return (
        day_index(s1) == day_index(s2)
        and s2 - s1 == 1
        and period_in_day(s1) != LUNCH_BOUNDARY
    )


def block_penalty(slots: List[int]) -> int:
    """Patrón ideal 2+1: un par contiguo un día y el tercero en otro día."""
    ordered = sorted(slots)
    found_pair = any(_is_block_pair(a, b) for a, b in zip(ordered, ordered[1:]))
    days = sorted({day_index(s) for s in ordered})
    if not found_pair:
        return SOFT_BLOCK_NO_PAIR
    if len(days) != 2:
        return SOFT_BLOCK_DAY_SPREAD
    if days[1] - days[0] == 1:
        return SOFT_BLOCK_CONSECUTIVE_DAYS
    return 0


def art_penalty(slots: List[int]) -> int:
    """Dos periodos de tarde, contiguos el mismo día."""
    s1, s2 = sorted(slots)
    penalty = 0
    if not (is_afternoon(s1) and is_afternoon(s2)):
        penalty += SOFT_ART_MORNING
    if not _is_block_pair(s1, s2):
        penalty += SOFT_ART_SPLIT
    return penalty


def language_penalty(slots: List[int]) -> int:
    counts = _day_counts(slots)
    over = counts[counts > LANGUAGE_MAX_PER_DAY] - LANGUAGE_MAX_PER_DAY
    penalty = int(over.sum()) * SOFT_LANGUAGE_EXTRA_PER_DAY
    used_days = int(np.count_nonzero(counts))
    if len(slots) >= LANGUAGE_TARGET_DAYS and used_days < LANGUAGE_TARGET_DAYS:
        penalty += (LANGUAGE_TARGET_DAYS - used_days) * SOFT_LANGUAGE_SPREAD
    return penalty


def math_penalty(slots: List[int]) -> int:
    counts = _day_counts(slots)
    over = counts[counts > 1] - 1
    return int(over.sum()) * SOFT_MATH_EXTRA_PER_DAY


def distribution_penalty(slots: List[int]) -> int:
    return len(slots) - int(np.count_nonzero(_day_counts(slots)))


def subject_penalty(category: SubjectCategory, slots: List[int]) -> int:
    if category is SubjectCategory.BLOCK and len(slots) == 3:
        return block_penalty(slots)
    if category is SubjectCategory.ART and len(slots) == 2:
        return art_penalty(slots)
    if category is SubjectCategory.LANGUAGE:
        return language_penalty(slots)
    if category is SubjectCategory.MATH:
        return math_penalty(slots)
    return distribution_penalty(slots)


def evaluate(chromosome: Chromosome, ctx: EvaluationContext) -> EvaluationResult:
    res = EvaluationResult(score=ctx.base_score)

    # Ocupación [entidad][slot]
    teacher_occ: DefaultDict[str, np.ndarray] = defaultdict(lambda: np.zeros(TOTAL_SLOTS, dtype=int))
    room_occ: DefaultDict[str, np.ndarray] = defaultdict(lambda: np.zeros(TOTAL_SLOTS, dtype=int))
    groups: Dict[Tuple[str, str], List[int]] = defaultdict(list)

    for g in chromosome:
        if not g.teacher_id:
            continue  # slot vacío
        slot = g.period_index

        if not is_placeholder_teacher(g.teacher_id):
            occ = teacher_occ[g.teacher_id]
            occ[slot] += 1
            if occ[slot] > 1:
                res.teacher_conflicts += 1
                res.hard += HARD_TEACHER_CONFLICT
                res.violations.append(f"Choque docente {g.teacher_id} en {slot_label(slot)}")

            teacher = ctx.teachers.get(g.teacher_id)
            if teacher is not None:
                if slot in teacher.unavailable_slots:
                    res.unavailable_hits += 1
                    res.hard += HARD_TEACHER_UNAVAILABLE
                    res.violations.append(f"Docente {g.teacher_id} no disponible en {slot_label(slot)}")
                if slot in teacher.avoid_slots:
                    res.avoid_hits += 1
                    res.soft += SOFT_TEACHER_AVOID
                if teacher.classroom_id and teacher.classroom_id in ctx.classroom_ids:
                    room = room_occ[teacher.classroom_id]
                    room[slot] += 1
                    if room[slot] > 1:
                        res.room_conflicts += 1
                        res.hard += HARD_ROOM_CONFLICT
                        res.violations.append(
                            f"Choque aula {teacher.classroom_id} en {slot_label(slot)}"
                        )

        groups[(g.class_id, g.course_id)].append(slot)

    for (_, course_id), slots in groups.items():
        category = ctx.categories.get(course_id, SubjectCategory.REGULAR)
        res.soft += subject_penalty(category, slots)

    res.score = ctx.base_score - res.hard * ctx.hard_weight - res.soft * ctx.soft_weight
    return res


def calculate_fitness(chromosome: Chromosome, ctx: EvaluationContext) -> int:
    return evaluate(chromosome, ctx).score
