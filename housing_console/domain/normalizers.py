"""
Response normalizers: raw backend payload -> canonical record.

The backend is not contractually stable. The same logical field shows up under
different names, or one level deeper, depending on endpoint and version. Every
such variation is absorbed here, through one ordered-fallback resolver and a
declarative rule table per entity. Nothing downstream ever looks at a raw
payload.

All functions in this module are pure.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .models import (
    MISSING_ID,
    ApplicationRecord,
    ApplicationStatus,
    BuildingRecord,
    CanonicalRecord,
    ComplaintRecord,
    ComplaintStatus,
    EntityKind,
    NotificationRecord,
    PaymentRecord,
    RoomRecord,
    StudentRecord,
)

_MISSING = object()


# =============================================================================
# Generic resolver
# =============================================================================


def lookup(source: Any, path: str) -> Any:
    """Follow a dotted path through nested mappings; ``_MISSING`` if any hop fails."""
    current = source
    for key in path.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current


def resolve(
    source: Any,
    paths: Sequence[str],
    default: Any = None,
    *,
    blank_is_missing: bool = False,
    accept: Optional[Callable[[Any], bool]] = None,
) -> Any:
    """
    Return the value at the first path that is present and not None.

    Args:
        source: raw payload (anything; non-mappings resolve to ``default``)
        paths: dotted accessor paths, tried in order
        default: returned when no path matches
        blank_is_missing: also skip empty / whitespace-only strings
        accept: extra predicate a candidate must satisfy (e.g. "is a mapping")
    """
    for path in paths:
        value = lookup(source, path)
        if value is _MISSING or value is None:
            continue
        if blank_is_missing and isinstance(value, str) and not value.strip():
            continue
        if accept is not None and not accept(value):
            continue
        return value
    return default


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def as_id(value: Any) -> Any:
    """Identifiers: int when int-like, non-blank string otherwise, else the sentinel."""
    if isinstance(value, bool):
        return MISSING_ID
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return MISSING_ID
        # 1.0 is the id 1; 1.5 is kept as text, the same way "1.5" would be
        return int(value) if value.is_integer() else str(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return MISSING_ID
        try:
            return int(text)
        except ValueError:
            return text
    return MISSING_ID


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def as_text(value: Any) -> str:
    return "" if value is None else str(value)


def as_status(value: Any) -> str:
    return as_text(value).strip().lower()


@dataclass(frozen=True)
class FieldRule:
    """One logical field: where to look, in which order, and what to fall back to."""
    name: str
    paths: Tuple[str, ...]
    default: Any = None
    coerce: Optional[Callable[[Any], Any]] = None
    blank_is_missing: bool = False
    accept: Optional[Callable[[Any], bool]] = None

    def apply(self, source: Any) -> Any:
        value = resolve(
            source,
            self.paths,
            _MISSING,
            blank_is_missing=self.blank_is_missing,
            accept=self.accept,
        )
        if value is _MISSING:
            return self.default
        return self.coerce(value) if self.coerce else value


def resolve_fields(source: Any, rules: Sequence[FieldRule]) -> Dict[str, Any]:
    return {rule.name: rule.apply(source) for rule in rules}


def _id_rule(name: str, *paths: str) -> FieldRule:
    return FieldRule(name, paths, MISSING_ID, coerce=as_id, accept=_is_scalar)


def _text_rule(name: str, *paths: str, default: str = "", blank_is_missing: bool = False) -> FieldRule:
    return FieldRule(name, paths, default, coerce=as_text, blank_is_missing=blank_is_missing, accept=_is_scalar)


def _block_rule(name: str, *paths: str, default: Any = None) -> FieldRule:
    # copy so the record never aliases the raw payload
    return FieldRule(name, paths, default, coerce=dict, accept=_is_mapping)


# =============================================================================
# Rule tables
# =============================================================================

APPLICATION_BLOCK_RULES: Tuple[FieldRule, ...] = (
    FieldRule("student_info", ("studentInfo", "student", "studentData", "studentDto"),
              None, coerce=dict, accept=_is_mapping),
    _block_rule("father_info", "fatherInfo", "father", "fatherData"),
    _block_rule("guardian_info", "guardianInfo", "guardian", "guardianData"),
    _block_rule("secondary_info", "secondaryInfo", "secondary", "secondaryData"),
    _block_rule("academic_info", "academicInfo", "academic", "academicData"),
)

# Evaluated over the raw payload with "studentInfo" replaced by the resolved block.
APPLICATION_RULES: Tuple[FieldRule, ...] = (
    _id_rule("application_id", "applicationId", "applicationID", "id"),
    _id_rule("student_id", "studentId", "studentInfo.studentId"),
    _text_rule("student_name", "studentName", "studentInfo.fullName", "studentInfo.name", blank_is_missing=True),
    FieldRule("status", ("status", "applicationStatus"), ApplicationStatus.PENDING,
              coerce=as_status, blank_is_missing=True, accept=_is_scalar),
    _text_rule("submitted_at", "submittedAt", "submissionDate", "createdAt", blank_is_missing=True),
)

BUILDING_RULES: Tuple[FieldRule, ...] = (
    _id_rule("building_id", "buildingId", "buildingID", "id"),
    _text_rule("name", "name", "buildingName"),
    _text_rule("type", "type", "buildingType"),
    FieldRule("number_of_floors", ("numberOfFloors", "floors", "floorsCount"), 0, coerce=as_int),
    _text_rule("status", "status", "buildingStatus"),
)

ROOM_RULES: Tuple[FieldRule, ...] = (
    _id_rule("room_id", "roomId", "roomID", "id"),
    _text_rule("room_number", "roomNumber", "number", "name"),
    _id_rule("building_id", "buildingId", "building.buildingId", "building.id"),
    _text_rule("building_name", "buildingName", "building.name"),
    FieldRule("floor", ("floor", "floorNumber"), 0, coerce=as_int),
    FieldRule("capacity", ("capacity", "maxCapacity"), 0, coerce=as_int),
    FieldRule("current_occupancy", ("currentOccupancy", "occupancy", "occupiedBeds"), 0, coerce=as_int),
    _text_rule("status", "status", "roomStatus"),
)

STUDENT_RULES: Tuple[FieldRule, ...] = (
    _id_rule("student_id", "studentId", "studentID", "id"),
    _text_rule("full_name", "fullName", "name", "studentName", blank_is_missing=True),
    _text_rule("national_id", "nationalId", "nationalID"),
    _text_rule("email", "email"),
    _text_rule("phone", "phone", "phoneNumber"),
    _text_rule("faculty", "faculty", "college"),
    _text_rule("department", "department"),
    _text_rule("level", "level", "academicYear"),
    _text_rule("gender", "gender"),
    _text_rule("room_number", "roomNumber", "room.roomNumber"),
)

PAYMENT_RULES: Tuple[FieldRule, ...] = (
    _id_rule("payment_id", "paymentId", "paymentID", "id"),
    _id_rule("student_id", "studentId", "student.studentId", "student.id"),
    _text_rule("student_name", "studentName", "student.fullName", "student.name", blank_is_missing=True),
    FieldRule("amount", ("amount", "value"), 0.0, coerce=as_float),
    FieldRule("status", ("status", "paymentStatus"), "", coerce=as_status, accept=_is_scalar),
    _text_rule("paid_at", "paidAt", "paymentDate", "createdAt", blank_is_missing=True),
    _text_rule("method", "method", "paymentMethod"),
)

COMPLAINT_RULES: Tuple[FieldRule, ...] = (
    _id_rule("complaint_id", "complaintId", "complaintID", "id"),
    _text_rule("title", "title", "subject"),
    _text_rule("message", "message", "description", "body"),
    _text_rule("student_name", "studentName", "student.fullName", "student.name", blank_is_missing=True),
    _text_rule("room", "room", "roomNumber", "room.roomNumber"),
    FieldRule("priority", ("priority",), "", coerce=as_status, accept=_is_scalar),
    FieldRule("status", ("status", "complaintStatus"), ComplaintStatus.UNRESOLVED,
              coerce=as_status, blank_is_missing=True, accept=_is_scalar),
    _text_rule("resolution", "resolution", "resolutionText"),
    _text_rule("created_at", "createdAt", "submittedAt", "date", blank_is_missing=True),
)

NOTIFICATION_RULES: Tuple[FieldRule, ...] = (
    _id_rule("notification_id", "notificationId", "notificationID", "id"),
    _text_rule("title", "title", "subject"),
    _text_rule("message", "message", "body", "content"),
    _text_rule("recipients", "recipients", "target", "audience"),
    _text_rule("type", "type", "notificationType", "category"),
    _text_rule("sent_at", "sentAt", "createdAt", "date", blank_is_missing=True),
)


# =============================================================================
# Normalizers
# =============================================================================


def _as_source(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


def normalize_application(raw: Any) -> ApplicationRecord:
    source = _as_source(raw)
    blocks = resolve_fields(source, APPLICATION_BLOCK_RULES)
    if blocks["student_info"] is None:
        blocks["student_info"] = {}
    # scalar fallbacks may read from whichever alias supplied the student block
    scope = dict(source)
    scope["studentInfo"] = blocks["student_info"]
    return ApplicationRecord(**resolve_fields(scope, APPLICATION_RULES), **blocks)


def normalize_building(raw: Any) -> BuildingRecord:
    return BuildingRecord(**resolve_fields(_as_source(raw), BUILDING_RULES))


def normalize_room(raw: Any) -> RoomRecord:
    return RoomRecord(**resolve_fields(_as_source(raw), ROOM_RULES))


def normalize_student(raw: Any) -> StudentRecord:
    return StudentRecord(**resolve_fields(_as_source(raw), STUDENT_RULES))


def normalize_payment(raw: Any) -> PaymentRecord:
    return PaymentRecord(**resolve_fields(_as_source(raw), PAYMENT_RULES))


def normalize_complaint(raw: Any) -> ComplaintRecord:
    return ComplaintRecord(**resolve_fields(_as_source(raw), COMPLAINT_RULES))


def normalize_notification(raw: Any) -> NotificationRecord:
    return NotificationRecord(**resolve_fields(_as_source(raw), NOTIFICATION_RULES))


NORMALIZERS: Dict[EntityKind, Callable[[Any], CanonicalRecord]] = {
    EntityKind.APPLICATIONS: normalize_application,
    EntityKind.BUILDINGS: normalize_building,
    EntityKind.ROOMS: normalize_room,
    EntityKind.STUDENTS: normalize_student,
    EntityKind.PAYMENTS: normalize_payment,
    EntityKind.COMPLAINTS: normalize_complaint,
    EntityKind.NOTIFICATIONS: normalize_notification,
}


def unwrap_list(payload: Any) -> List[Any]:
    """
    A list endpoint answers either ``[...]`` or ``{"data": [...]}``.

    Anything else yields an empty list so the page still renders.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []
