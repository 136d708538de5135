# timetable_ga/data_loader.py
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import GAConfig, read_mapping
from .model import Classroom, Course, Requirement, ScheduleData, SchoolClass, Teacher


def _get(rec: Dict[str, Any], *keys: str, default=None):
    # El mensaje de inicio llega en camelCase; los archivos locales pueden venir en snake_case
    for k in keys:
        if k in rec and rec[k] is not None:
            return rec[k]
    return default


def _opt_id(val: Any) -> Optional[str]:
    if val is None or val == "":
        return None
    return str(val)


def _slots(val: Optional[Iterable[Any]]) -> List[int]:
    return [int(s) for s in (val or [])]


def _course_name(val: Any) -> str:
    # Hay nombres guardados como objeto {"name": ...}
    if isinstance(val, dict):
        return str(val.get("name", ""))
    return "" if val is None else str(val)


def parse_class(rec: Dict[str, Any]) -> SchoolClass:
    return SchoolClass(
        id=str(rec["id"]),
        grade=int(_get(rec, "grade", default=1)),
        class_num=int(_get(rec, "classNum", "class_num", default=0)),
        homeroom_teacher_id=_opt_id(_get(rec, "homeroomTeacherId", "homeroom_teacher_id")),
    )


def parse_teacher(rec: Dict[str, Any]) -> Teacher:
    return Teacher(
        id=str(rec["id"]),
        name=str(_get(rec, "name", default="")),
        unavailable_slots=frozenset(_slots(_get(rec, "unavailableSlots", "unavailable_slots"))),
        avoid_slots=frozenset(_slots(_get(rec, "avoidSlots", "avoid_slots"))),
        classroom_id=_opt_id(_get(rec, "classroomId", "classroom_id")),
    )


def parse_requirement(rec: Dict[str, Any]) -> Requirement:
    return Requirement(
        class_id=str(_get(rec, "classId", "class_id", default="")),
        course_id=str(_get(rec, "courseId", "course_id", default="")),
        teacher_id=_opt_id(_get(rec, "teacherId", "teacher_id")),
        periods_needed=int(_get(rec, "periodsNeeded", "periods_needed", default=0)),
        fixed_slots=tuple(_slots(_get(rec, "fixedSlots", "fixed_slots"))),
    )


def parse_data(data: Dict[str, Any]) -> ScheduleData:
    """Construye el ScheduleData a partir del bloque ``data`` del mensaje de inicio."""
    try:
        return ScheduleData(
            classes=[parse_class(r) for r in data.get("classes") or []],
            courses=[
                Course(id=str(r["id"]), name=_course_name(r.get("name")))
                for r in data.get("courses") or []
            ],
            teachers=[parse_teacher(r) for r in data.get("teachers") or []],
            classrooms=[
                Classroom(id=str(r["id"]), name=str(r.get("name", "")))
                for r in data.get("classrooms") or []
            ],
            requirements=[parse_requirement(r) for r in data.get("requirements") or []],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Snapshot inválido: {exc}") from exc


def parse_request(request: Dict[str, Any]) -> Tuple[ScheduleData, GAConfig]:
    data = parse_data(request.get("data") or {})
    cfg = GAConfig.from_dict(request.get("config") or {})
    return data, cfg


def load_request(path: str) -> Tuple[ScheduleData, GAConfig]:
    req_path = Path(path)
    if not req_path.exists():
        raise ValueError(f"No existe el archivo de datos {req_path}")
    return parse_request(read_mapping(req_path))
