# timetable_ga/model.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

ClassId = str
SlotIdx = int

# Docentes "tutor por defecto": cuentan como sin asignar
PLACEHOLDER_TEACHER_IDS = frozenset({"0", "1"})


class SubjectCategory(Enum):
    BLOCK = "block"          # 社會 / 自然: patrón 2+1
    ART = "art"              # 美勞 / 藝術: bloque de tarde
    LANGUAGE = "language"    # 國語 / 英語: 1-2 por día, repartido
    MATH = "math"            # 數學: máximo 1 por día
    REGULAR = "regular"


# Orden de prioridad: la primera coincidencia gana
CATEGORY_KEYWORDS = (
    (SubjectCategory.BLOCK, ("社", "自")),
    (SubjectCategory.ART, ("美", "藝")),
    (SubjectCategory.LANGUAGE, ("國", "語")),
    (SubjectCategory.MATH, ("數",)),
)


def classify_subject(name: Optional[str]) -> SubjectCategory:
    if not name:
        return SubjectCategory.REGULAR
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in name for k in keywords):
            return category
    return SubjectCategory.REGULAR


def is_placeholder_teacher(teacher_id: Optional[str]) -> bool:
    return teacher_id in PLACEHOLDER_TEACHER_IDS


@dataclass(frozen=True)
class SchoolClass:
    id: ClassId
    grade: int
    class_num: int = 0
    homeroom_teacher_id: Optional[str] = None


@dataclass(frozen=True)
class Course:
    id: str
    name: str

    @property
    def category(self) -> SubjectCategory:
        return classify_subject(self.name)


@dataclass(frozen=True)
class Teacher:
    id: str
    name: str = ""
    unavailable_slots: FrozenSet[SlotIdx] = frozenset()
    avoid_slots: FrozenSet[SlotIdx] = frozenset()
    classroom_id: Optional[str] = None


@dataclass(frozen=True)
class Classroom:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Requirement:
    # "la clase X necesita N periodos/semana del curso C con el docente T"
    class_id: ClassId
    course_id: str
    teacher_id: Optional[str]
    periods_needed: int
    fixed_slots: tuple = ()


@dataclass
class Gene:
    # Un "gen" = un periodo agendado para una clase
    class_id: ClassId
    period_index: SlotIdx
    course_id: Optional[str]
    teacher_id: Optional[str]
    locked: bool = False              # pre-asignado (no alterable)


Chromosome = List[Gene]


@dataclass(frozen=True)
class ScheduleData:
    classes: List[SchoolClass] = field(default_factory=list)
    courses: List[Course] = field(default_factory=list)
    teachers: List[Teacher] = field(default_factory=list)
    classrooms: List[Classroom] = field(default_factory=list)
    requirements: List[Requirement] = field(default_factory=list)

    def class_by_id(self) -> Dict[ClassId, SchoolClass]:
        return {c.id: c for c in self.classes}

    def course_by_id(self) -> Dict[str, Course]:
        return {c.id: c for c in self.courses}

    def teacher_by_id(self) -> Dict[str, Teacher]:
        return {t.id: t for t in self.teachers}
