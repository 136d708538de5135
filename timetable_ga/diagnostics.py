# timetable_ga/diagnostics.py
"""
Chequeos sobre los datos antes de correr el AG, y sobre el resultado
después (periodos que quedaron sin ubicar).
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, List, Optional

import pandas as pd

from .model import Chromosome, ScheduleData
from .timeslots import TOTAL_SLOTS, allowed_slots, is_slot_allowed

ERROR = "error"
WARNING = "warning"

HIGH_LOAD_RATIO = 0.9


@dataclass
class Diagnostic:
    level: str
    title: str
    message: str
    details: List[str] = field(default_factory=list)
    suggestion: str = ""
    action: Optional[str] = None
    payload: Any = None


@dataclass(frozen=True)
class UnplacedRequirement:
    class_id: str
    course_id: str
    teacher_id: Optional[str]
    needed: int
    placed: int

    @property
    def missing(self) -> int:
        return self.needed - self.placed


def requirements_frame(data: ScheduleData) -> pd.DataFrame:
    rows = [
        {
            "class_id": r.class_id,
            "course_id": r.course_id,
            "teacher_id": r.teacher_id,
            "periods_needed": r.periods_needed,
            "n_fixed": len(r.fixed_slots),
        }
        for r in data.requirements
    ]
    return pd.DataFrame(rows, columns=["class_id", "course_id", "teacher_id", "periods_needed", "n_fixed"])


def teacher_workload(data: ScheduleData) -> pd.DataFrame:
    """Periodos requeridos vs. slots disponibles por docente."""
    reqs = requirements_frame(data)
    totals = reqs.groupby("teacher_id")["periods_needed"].sum()
    df = pd.DataFrame(
        [
            {
                "teacher_id": t.id,
                "name": t.name or t.id,
                "total": int(totals.get(t.id, 0)),
                "available": TOTAL_SLOTS - len(t.unavailable_slots),
            }
            for t in data.teachers
        ],
        columns=["teacher_id", "name", "total", "available"],
    )
    df["ratio"] = (df["total"] / df["available"].where(df["available"] > 0)).fillna(float("inf"))
    return df


def class_workload(data: ScheduleData) -> pd.DataFrame:
    reqs = requirements_frame(data)
    totals = reqs.groupby("class_id")["periods_needed"].sum()
    return pd.DataFrame(
        [
            {
                "class_id": c.id,
                "grade": c.grade,
                "total": int(totals.get(c.id, 0)),
                "capacity": len(allowed_slots(c.grade)),
            }
            for c in data.classes
        ],
        columns=["class_id", "grade", "total", "capacity"],
    )


def _teacher_checks(data: ScheduleData) -> List[Diagnostic]:
    out: List[Diagnostic] = []
    df = teacher_workload(data)
    over = df[df["total"] > df["available"]]
    high = df[(df["total"] <= df["available"]) & (df["total"] > df["available"] * HIGH_LOAD_RATIO)]

    if not over.empty:
        out.append(Diagnostic(
            level=ERROR,
            title=f"{len(over)} docentes sin horas suficientes",
            message="Tienen más periodos asignados que slots disponibles.",
            details=[f"{r.name} (requeridos: {r.total}, disponibles: {r.available})" for r in over.itertuples()],
            suggestion="Liberar horas bloqueadas o reducir la carga asignada.",
            action="JUMP_TO_TEACHER",
            payload=over.iloc[0]["teacher_id"],
        ))
    if not high.empty:
        out.append(Diagnostic(
            level=WARNING,
            title=f"{len(high)} docentes con carga muy alta",
            message=f"Carga mayor al {int(HIGH_LOAD_RATIO * 100)}% de sus slots disponibles.",
            details=[f"{r.name} (carga: {round(r.ratio * 100)}%)" for r in high.itertuples()],
            suggestion="Liberar horas a evitar para dar más margen.",
            action="JUMP_TO_TEACHER",
            payload=high.iloc[0]["teacher_id"],
        ))
    return out


def _class_checks(data: ScheduleData) -> List[Diagnostic]:
    df = class_workload(data)
    over = df[df["total"] > df["capacity"]]
    if over.empty:
        return []
    return [Diagnostic(
        level=WARNING,
        title=f"{len(over)} clases con exceso de periodos",
        message="Piden más periodos de los que permite el calendario de su grado.",
        details=[f"{r.class_id} (requeridos: {r.total}, máximo: {r.capacity})" for r in over.itertuples()],
        suggestion="Revisar asignaciones duplicadas.",
        action="CHECK_CLASS",
    )]


def _requirement_checks(data: ScheduleData) -> List[Diagnostic]:
    out: List[Diagnostic] = []
    invalid = [r for r in data.requirements if not (r.teacher_id and r.course_id and r.class_id)]
    if invalid:
        out.append(Diagnostic(
            level=ERROR,
            title="Asignaciones inválidas",
            message=f"{len(invalid)} asignaciones no tienen docente, curso o clase.",
            details=[f"{r.class_id or '?'} / {r.course_id or '?'} / {r.teacher_id or '?'}" for r in invalid],
            suggestion="Depurar los datos inválidos antes de generar.",
            action="FIX_INVALID_DATA",
        ))

    grades = {c.id: c.grade for c in data.classes}
    bad_fixed: List[str] = []
    for r in data.requirements:
        if not r.fixed_slots:
            continue
        grade = grades.get(r.class_id) or 1
        if len(r.fixed_slots) > r.periods_needed:
            bad_fixed.append(f"{r.class_id}/{r.course_id}: {len(r.fixed_slots)} fijos > {r.periods_needed} periodos")
        for s in r.fixed_slots:
            if not 0 <= s < TOTAL_SLOTS:
                bad_fixed.append(f"{r.class_id}/{r.course_id}: slot {s} fuera de rango")
            elif not is_slot_allowed(grade, s):
                bad_fixed.append(f"{r.class_id}/{r.course_id}: slot {s} no permitido para grado {grade}")
    if bad_fixed:
        out.append(Diagnostic(
            level=WARNING,
            title="Pre-asignaciones con problemas",
            message=f"{len(bad_fixed)} slots fijos no se pueden respetar tal cual.",
            details=bad_fixed,
            suggestion="Revisar los bloqueos de la pre-programación.",
            action="CHECK_LOCKS",
        ))
    return out


def run_diagnostics(data: ScheduleData) -> List[Diagnostic]:
    return _teacher_checks(data) + _class_checks(data) + _requirement_checks(data)


def unplaced_periods(chromosome: Chromosome, data: ScheduleData) -> List[UnplacedRequirement]:
    """
    Requisitos con menos genes que periodos pedidos. El fitness no los
    penaliza; esto solo los hace visibles.
    """
    placed = Counter((g.class_id, g.course_id, g.teacher_id) for g in chromosome)
    out: List[UnplacedRequirement] = []
    for r in data.requirements:
        key = (r.class_id, r.course_id, r.teacher_id)
        got = min(placed[key], r.periods_needed)
        placed[key] -= got
        if got < r.periods_needed:
            out.append(UnplacedRequirement(r.class_id, r.course_id, r.teacher_id, r.periods_needed, got))
    return out
