"""
Domain models: the canonical in-memory shapes the pages render.

Everything here is a frozen value object. Records are rebuilt from the remote
payload on every fetch; an edit goes to the server and the list is refetched,
nothing is patched in place.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

RecordId = Union[int, str]

# Sentinel used when a payload carries no identifier at all.
MISSING_ID = 0

DEFAULT_ROLE = "User"


class EntityKind(str, Enum):
    """Remote collections the console manages."""
    APPLICATIONS = "applications"
    BUILDINGS = "buildings"
    ROOMS = "rooms"
    STUDENTS = "students"
    PAYMENTS = "payments"
    COMPLAINTS = "complaints"
    NOTIFICATIONS = "notifications"

    @classmethod
    def parse(cls, value: Union[str, "EntityKind"]) -> "EntityKind":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class ApplicationStatus:
    """Known application states. Unknown states from the server are kept verbatim."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class ComplaintStatus:
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


# =============================================================================
# Session
# =============================================================================


@dataclass(frozen=True)
class UserIdentity:
    """The operator behind a session, as persisted under the ``user`` entry."""
    id: RecordId
    username: str
    role: str = DEFAULT_ROLE

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "role": self.role}

    @classmethod
    def from_dict(cls, d: Dict[str, Any], fallback_username: str = "") -> "UserIdentity":
        uid = d.get("id")
        if uid is None:
            uid = d.get("userId")
        username = d.get("username")
        if username is None:
            username = d.get("userName")
        role = d.get("role")
        return cls(
            id=uid if uid is not None else MISSING_ID,
            username=str(username) if username is not None else fallback_username,
            role=str(role) if role is not None else DEFAULT_ROLE,
        )


@dataclass(frozen=True)
class Session:
    """Live, validated login: identity plus the opaque credential token."""
    user: UserIdentity
    token: str

    @property
    def user_id(self) -> RecordId:
        return self.user.id

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def role(self) -> str:
        return self.user.role

    def __repr__(self) -> str:
        # keep the token out of logs and tracebacks
        return f"Session(user={self.user!r}, token=***)"


@dataclass(frozen=True)
class LoginResult:
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "LoginResult":
        return cls(success=True)

    @classmethod
    def failure(cls, error: str) -> "LoginResult":
        return cls(success=False, error=error)


# =============================================================================
# Canonical records
# =============================================================================


@dataclass(frozen=True)
class _Record:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ApplicationRecord(_Record):
    """
    Housing application.

    ``status`` falls back to ``pending`` when the server omits it. That is a
    display policy, not something the server said.
    """
    application_id: RecordId
    student_id: RecordId
    student_name: str
    status: str
    submitted_at: str
    student_info: Dict[str, Any] = field(default_factory=dict)
    father_info: Optional[Dict[str, Any]] = None
    guardian_info: Optional[Dict[str, Any]] = None
    secondary_info: Optional[Dict[str, Any]] = None
    academic_info: Optional[Dict[str, Any]] = None

    @property
    def record_id(self) -> RecordId:
        return self.application_id

    @property
    def national_id(self) -> str:
        return str(self.student_info.get("nationalId") or "")


@dataclass(frozen=True)
class BuildingRecord(_Record):
    # occupancy/capacity are not part of the data contract; nothing is derived here
    building_id: RecordId
    name: str
    type: str
    number_of_floors: int
    status: str

    @property
    def record_id(self) -> RecordId:
        return self.building_id


@dataclass(frozen=True)
class RoomRecord(_Record):
    room_id: RecordId
    room_number: str
    building_id: RecordId
    building_name: str
    floor: int
    capacity: int
    current_occupancy: int
    status: str

    @property
    def record_id(self) -> RecordId:
        return self.room_id


@dataclass(frozen=True)
class StudentRecord(_Record):
    student_id: RecordId
    full_name: str
    national_id: str
    email: str
    phone: str
    faculty: str
    department: str
    level: str
    gender: str
    room_number: str

    @property
    def record_id(self) -> RecordId:
        return self.student_id


@dataclass(frozen=True)
class PaymentRecord(_Record):
    payment_id: RecordId
    student_id: RecordId
    student_name: str
    amount: float
    status: str
    paid_at: str
    method: str

    @property
    def record_id(self) -> RecordId:
        return self.payment_id


@dataclass(frozen=True)
class ComplaintRecord(_Record):
    """``status`` falls back to ``unresolved`` (display policy, like applications)."""
    complaint_id: RecordId
    title: str
    message: str
    student_name: str
    room: str
    priority: str
    status: str
    resolution: str
    created_at: str

    @property
    def record_id(self) -> RecordId:
        return self.complaint_id


@dataclass(frozen=True)
class NotificationRecord(_Record):
    notification_id: RecordId
    title: str
    message: str
    recipients: str
    type: str
    sent_at: str

    @property
    def record_id(self) -> RecordId:
        return self.notification_id


CanonicalRecord = Union[
    ApplicationRecord,
    BuildingRecord,
    RoomRecord,
    StudentRecord,
    PaymentRecord,
    ComplaintRecord,
    NotificationRecord,
]

RecordList = Tuple[CanonicalRecord, ...]
