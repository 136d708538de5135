# timetable_ga/timeslots.py
"""
Espacio semanal de slots: 5 días x 7 periodos = 35 índices (0..34).

slot = día * 7 + periodo, con día 0=lunes .. 4=viernes y periodo 0..6
(el almuerzo cae entre los periodos 3 y 4).
"""
from typing import List

PERIODS_PER_DAY = 7
DAYS_PER_WEEK = 5
TOTAL_SLOTS = PERIODS_PER_DAY * DAYS_PER_WEEK
AFTERNOON_START = 4    # primer periodo después del almuerzo

DAY_NAMES = ["Lun", "Mar", "Mié", "Jue", "Vie"]


def day_index(slot: int) -> int:
    return slot // PERIODS_PER_DAY


def period_in_day(slot: int) -> int:
    return slot % PERIODS_PER_DAY


def is_afternoon(slot: int) -> bool:
    return period_in_day(slot) >= AFTERNOON_START


def is_slot_allowed(grade: int, slot: int) -> bool:
    """
    Calendario por grado:
    - Miércoles por la tarde cerrado para todos.
    - 1° y 2°: medio día salvo el martes.
    - 3° y 4°: viernes medio día.
    - 5° y 6°: sin restricción extra.
    """
    day = day_index(slot)
    afternoon = is_afternoon(slot)

    if day == 2 and afternoon:
        return False
    if grade in (1, 2) and day != 1 and afternoon:
        return False
    if grade in (3, 4) and day == 4 and afternoon:
        return False
    return True


def allowed_slots(grade: int) -> List[int]:
    return [s for s in range(TOTAL_SLOTS) if is_slot_allowed(grade, s)]


def slot_label(slot: int) -> str:
    return f"{DAY_NAMES[day_index(slot)]} P{period_in_day(slot) + 1}"
