"""Housing API endpoints on top of the credential transport."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from ...domain.models import EntityKind, RecordId
from .transport import ApiResponse, CredentialTransport

DEFAULT_AUTH_PATH = "/api/Auth/login"

DEFAULT_ENDPOINTS: Dict[EntityKind, str] = {
    EntityKind.APPLICATIONS: "/api/Applications",
    EntityKind.BUILDINGS: "/api/Buildings",
    EntityKind.ROOMS: "/api/Rooms",
    EntityKind.STUDENTS: "/api/Students",
    EntityKind.PAYMENTS: "/api/Payments",
    EntityKind.COMPLAINTS: "/api/Complaints",
    EntityKind.NOTIFICATIONS: "/api/Notifications",
}


class HousingApi:
    def __init__(
        self,
        transport: CredentialTransport,
        endpoints: Optional[Mapping[EntityKind, str]] = None,
        auth_path: str = DEFAULT_AUTH_PATH,
    ):
        self.transport = transport
        self.endpoints: Dict[EntityKind, str] = dict(DEFAULT_ENDPOINTS)
        if endpoints:
            self.endpoints.update({EntityKind.parse(k): v for k, v in endpoints.items()})
        self.auth_path = auth_path

    def endpoint(self, kind: Union[EntityKind, str]) -> str:
        return self.endpoints[EntityKind.parse(kind)].rstrip("/")

    def _item_path(self, kind: Union[EntityKind, str], record_id: RecordId) -> str:
        return f"{self.endpoint(kind)}/{record_id}"

    async def login(self, username: str, password: str) -> ApiResponse:
        return await self.transport.request(
            "POST",
            self.auth_path,
            json={"username": username, "password": password},
            authenticated=False,
        )

    async def list(self, kind: Union[EntityKind, str]) -> ApiResponse:
        return await self.transport.request("GET", self.endpoint(kind))

    async def create(self, kind: Union[EntityKind, str], payload: Dict[str, Any]) -> ApiResponse:
        return await self.transport.request("POST", self.endpoint(kind), json=payload)

    async def update(self, kind: Union[EntityKind, str], record_id: RecordId, payload: Dict[str, Any]) -> ApiResponse:
        return await self.transport.request("PUT", self._item_path(kind, record_id), json=payload)

    async def delete(self, kind: Union[EntityKind, str], record_id: RecordId) -> ApiResponse:
        return await self.transport.request("DELETE", self._item_path(kind, record_id))
