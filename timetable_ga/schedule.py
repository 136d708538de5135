# timetable_ga/schedule.py
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .model import Chromosome, Gene, ScheduleData
from .timeslots import (
    DAY_NAMES,
    DAYS_PER_WEEK,
    PERIODS_PER_DAY,
    TOTAL_SLOTS,
    day_index,
    is_slot_allowed,
    period_in_day,
    slot_label,
)

MOVE_SCORE = 100
SWAP_SCORE = 80
MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class Period:
    course_id: Optional[str]
    teacher_id: Optional[str]
    locked: bool = False


@dataclass(frozen=True)
class Suggestion:
    kind: str                  # "MOVE" | "SWAP"
    source: int
    target: int
    score: int
    description: str
    with_course_id: Optional[str] = None


ClassPeriods = Dict[str, List[Optional[Period]]]


def to_class_periods(chromosome: Chromosome, class_ids: Iterable[str] = ()) -> ClassPeriods:
    """Cromosoma -> horario de 35 slots por clase (None = libre)."""
    out: ClassPeriods = {cid: [None] * TOTAL_SLOTS for cid in class_ids}
    for g in chromosome:
        slots = out.setdefault(g.class_id, [None] * TOTAL_SLOTS)
        if 0 <= g.period_index < TOTAL_SLOTS and slots[g.period_index] is None:
            slots[g.period_index] = Period(g.course_id, g.teacher_id, g.locked)
    return out


def from_class_periods(periods_by_class: ClassPeriods) -> Chromosome:
    return [
        Gene(cid, s, p.course_id, p.teacher_id, p.locked)
        for cid, periods in periods_by_class.items()
        for s, p in enumerate(periods)
        if p is not None and p.course_id
    ]


# --- Sugerencias para resolver un conflicto ---

def _teacher_busy(periods: ClassPeriods, teacher_id: Optional[str], slot: int, exclude_class: str) -> bool:
    if not teacher_id:
        return False
    return any(
        cid != exclude_class and p[slot] is not None and p[slot].teacher_id == teacher_id
        for cid, p in periods.items()
    )


def _teacher_can_take(data_teachers, periods: ClassPeriods, teacher_id, slot: int, class_id: str) -> bool:
    teacher = data_teachers.get(teacher_id)
    if teacher is not None and slot in teacher.unavailable_slots:
        return False
    return not _teacher_busy(periods, teacher_id, slot, class_id)


def find_swap_suggestions(
    chromosome: Chromosome,
    class_id: str,
    slot: int,
    data: ScheduleData,
) -> List[Suggestion]:
    periods = to_class_periods(chromosome, [c.id for c in data.classes])
    own = periods.get(class_id)
    if own is None or own[slot] is None or not own[slot].course_id or own[slot].locked:
        return []
    cls = data.class_by_id().get(class_id)
    grade = cls.grade if cls else 1
    teachers = data.teacher_by_id()
    current = own[slot]

    suggestions: List[Suggestion] = []
    for target in range(TOTAL_SLOTS):
        if target == slot or not is_slot_allowed(grade, target):
            continue
        other = own[target]
        if other is None:
            if _teacher_can_take(teachers, periods, current.teacher_id, target, class_id):
                suggestions.append(Suggestion(
                    "MOVE", slot, target, MOVE_SCORE, f"Mover a {slot_label(target)} (libre)"
                ))
        elif not other.locked:
            if _teacher_can_take(teachers, periods, current.teacher_id, target, class_id) and _teacher_can_take(
                teachers, periods, other.teacher_id, slot, class_id
            ):
                suggestions.append(Suggestion(
                    "SWAP", slot, target, SWAP_SCORE,
                    f"Intercambiar con {other.course_id} de {slot_label(target)}",
                    with_course_id=other.course_id,
                ))

    suggestions.sort(key=lambda s: s.score, reverse=True)
    return suggestions[:MAX_SUGGESTIONS]


# --- Tablas ---

def schedule_frame(chromosome: Chromosome, data: ScheduleData) -> pd.DataFrame:
    courses = data.course_by_id()
    teachers = data.teacher_by_id()
    rows = []
    for g in sorted(chromosome, key=lambda g: (g.class_id, g.period_index)):
        course = courses.get(g.course_id)
        teacher = teachers.get(g.teacher_id)
        rows.append({
            "Clase": g.class_id,
            "Slot": g.period_index,
            "Dia": DAY_NAMES[day_index(g.period_index)],
            "Periodo": period_in_day(g.period_index) + 1,
            "Curso": course.name if course else g.course_id,
            "Docente": teacher.name if teacher and teacher.name else g.teacher_id,
            "Fijo": g.locked,
        })
    return pd.DataFrame(rows, columns=["Clase", "Slot", "Dia", "Periodo", "Curso", "Docente", "Fijo"])


def class_grid(chromosome: Chromosome, data: ScheduleData, class_id: str) -> pd.DataFrame:
    """Matriz periodos x días con el nombre del curso en cada celda."""
    courses = data.course_by_id()
    matrix = np.full((PERIODS_PER_DAY, DAYS_PER_WEEK), "", dtype=object)
    for g in chromosome:
        if g.class_id != class_id or not 0 <= g.period_index < TOTAL_SLOTS:
            continue
        course = courses.get(g.course_id)
        matrix[period_in_day(g.period_index), day_index(g.period_index)] = course.name if course else (g.course_id or "")
    df = pd.DataFrame(matrix, columns=DAY_NAMES)
    df.index = [f"P{i + 1}" for i in range(PERIODS_PER_DAY)]
    return df
