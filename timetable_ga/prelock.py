# timetable_ga/prelock.py
"""Pre-programación: bloquear slots fijos en los requisitos antes de correr el AG."""
from dataclasses import dataclass, replace
from typing import Collection, List, Optional

from .model import Requirement


@dataclass(frozen=True)
class LockedOccupation:
    slot: int
    teacher_id: str
    class_id: str
    course_id: str


def _targets(req: Requirement, class_ids: Optional[Collection[str]], course_ids: Optional[Collection[str]]) -> bool:
    return (class_ids is None or req.class_id in class_ids) and (
        course_ids is None or req.course_id in course_ids
    )


def is_slot_locked(requirements: List[Requirement], class_ids, course_ids, slot: int) -> bool:
    """True si todos los requisitos seleccionados ya tienen el slot fijo."""
    targets = [r for r in requirements if _targets(r, class_ids, course_ids)]
    return bool(targets) and all(slot in r.fixed_slots for r in targets)


def toggle_lock(
    requirements: List[Requirement],
    class_ids: Collection[str],
    course_ids: Collection[str],
    slot: int,
) -> List[Requirement]:
    """Quita el slot si ya estaba bloqueado en toda la selección; si no, lo agrega."""
    locked = is_slot_locked(requirements, class_ids, course_ids, slot)
    out: List[Requirement] = []
    for r in requirements:
        if not _targets(r, class_ids, course_ids):
            out.append(r)
        elif locked:
            out.append(replace(r, fixed_slots=tuple(s for s in r.fixed_slots if s != slot)))
        elif slot in r.fixed_slots:
            out.append(r)
        else:
            out.append(replace(r, fixed_slots=r.fixed_slots + (slot,)))
    return out


def clear_locks(
    requirements: List[Requirement],
    class_ids: Optional[Collection[str]] = None,
    course_ids: Optional[Collection[str]] = None,
) -> List[Requirement]:
    return [
        replace(r, fixed_slots=()) if r.fixed_slots and _targets(r, class_ids, course_ids) else r
        for r in requirements
    ]


def locked_occupations(requirements: List[Requirement], slot: int) -> List[LockedOccupation]:
    return [
        LockedOccupation(slot, r.teacher_id, r.class_id, r.course_id)
        for r in requirements
        if r.teacher_id and slot in r.fixed_slots
    ]


def lock_conflicts(
    requirements: List[Requirement],
    slot: int,
    teacher_ids: Collection[str],
) -> List[LockedOccupation]:
    """Docentes de la selección que ya están fijos en ese slot en otra clase."""
    return [o for o in locked_occupations(requirements, slot) if o.teacher_id in teacher_ids]
