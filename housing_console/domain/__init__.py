"""Domain layer: canonical records and the response normalizers that build them."""

from .models import (
    ApplicationRecord,
    ApplicationStatus,
    BuildingRecord,
    ComplaintRecord,
    ComplaintStatus,
    EntityKind,
    LoginResult,
    NotificationRecord,
    PaymentRecord,
    RoomRecord,
    Session,
    StudentRecord,
    UserIdentity,
)
from .normalizers import NORMALIZERS, FieldRule, resolve, unwrap_list

__all__ = [
    "ApplicationRecord",
    "ApplicationStatus",
    "BuildingRecord",
    "ComplaintRecord",
    "ComplaintStatus",
    "EntityKind",
    "LoginResult",
    "NotificationRecord",
    "PaymentRecord",
    "RoomRecord",
    "Session",
    "StudentRecord",
    "UserIdentity",
    "NORMALIZERS",
    "FieldRule",
    "resolve",
    "unwrap_list",
]
