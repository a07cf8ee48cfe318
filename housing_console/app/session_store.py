"""
Session store: the one authoritative login session of a console instance.

Lifecycle
---------
- ``restore()`` once at startup, before any protected fetch. It adopts a
  persisted ``{user, auth_token}`` pair without contacting the server, or heals
  silently by discarding whatever is there.
- ``login()`` / ``logout()`` are the only ways the session changes.
- Pages read through ``session`` / ``is_authenticated`` / ``is_loading`` and may
  ``subscribe()`` to changes; they never assign the session themselves.
"""
from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from ..adapters.http.api import HousingApi
from ..adapters.http.transport import TRANSPORT_FAILURE_MESSAGE, CredentialTransport
from ..domain.models import DEFAULT_ROLE, MISSING_ID, LoginResult, Session, UserIdentity
from ..domain.normalizers import resolve
from ..infra.exceptions import ProtocolError, StorageError
from ..infra.logging import get_logger
from ..infra.serialization import safe_json_dumps, safe_json_loads
from ..ports.storage import TOKEN_KEY, USER_KEY, SessionStorage

logger = get_logger(__name__)

NO_CREDENTIAL_MESSAGE = "No sign-in token was received from the server"
NO_DATA_MESSAGE = "The server did not return valid sign-in data"
PERSIST_FAILED_MESSAGE = "The session could not be saved on this machine"

Listener = Callable[["SessionStore"], None]


def _is_token(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return isinstance(value, int)


def extract_token(payload: Any) -> Tuple[Optional[str], Mapping[str, Any]]:
    """
    Locate the credential token in a login response.

    Order: top-level ``token``, then ``data.token``. Returns the token and the
    mapping that held it (identity fields are looked up there first).
    """
    if not isinstance(payload, Mapping):
        return None, {}
    if _is_token(payload.get("token")):
        return str(payload["token"]), payload
    inner = payload.get("data")
    if isinstance(inner, Mapping) and _is_token(inner.get("token")):
        return str(inner["token"]), inner
    return None, payload


def _is_id_value(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def _first(containers: Sequence[Mapping[str, Any]], paths: Sequence[str], **kwargs) -> Any:
    for container in containers:
        value = resolve(container, paths, **kwargs)
        if value is not None:
            return value
    return None


def identity_from_login_payload(
    holder: Mapping[str, Any], payload: Mapping[str, Any], submitted_username: str
) -> UserIdentity:
    """
    Build the operator identity: an explicit ``user`` object wins, otherwise it
    is assembled from ``userId``/``id``, ``userName``/``username`` and ``role``.
    """
    containers: List[Mapping[str, Any]] = [holder]
    if payload is not holder:
        containers.append(payload)

    user_obj = _first(containers, ("user",), accept=lambda v: isinstance(v, Mapping))
    if user_obj is not None:
        return UserIdentity.from_dict(user_obj, fallback_username=submitted_username)

    uid = _first(containers, ("userId", "id"), accept=_is_id_value)
    username = _first(containers, ("userName", "username"), accept=lambda v: isinstance(v, str))
    role = _first(containers, ("role",), accept=lambda v: isinstance(v, str))
    return UserIdentity(
        id=uid if uid is not None else MISSING_ID,
        username=username if username is not None else submitted_username,
        role=role if role is not None else DEFAULT_ROLE,
    )


def session_from_login_payload(payload: Any, submitted_username: str) -> Session:
    """
    Raises:
        ProtocolError: no token anywhere in the payload
    """
    token, holder = extract_token(payload)
    if token is None:
        raise ProtocolError(NO_CREDENTIAL_MESSAGE, field="token")
    user = identity_from_login_payload(holder, payload, submitted_username)
    return Session(user=user, token=token)


class SessionStore:
    def __init__(
        self,
        storage: SessionStorage,
        api: HousingApi,
        transport: Optional[CredentialTransport] = None,
    ):
        self._storage = storage
        self._api = api
        self._transport = transport or api.transport
        self._session: Optional[Session] = None
        self._is_loading = True
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------ state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def user(self) -> Optional[UserIdentity]:
        return self._session.user if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns the matching unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                # a broken listener must not block the others or the state change
                logger.error(f"Session listener {listener!r} failed: {e}", exc_info=True)

    def _adopt(self, session: Optional[Session]) -> None:
        self._session = session
        if session is None:
            self._transport.clear_token()
        else:
            self._transport.set_token(session.token)

    # ---------------------------------------------------------------- restore

    def _read_persisted(self) -> Optional[Session]:
        try:
            raw_user = self._storage.get_item(USER_KEY)
            token = self._storage.get_item(TOKEN_KEY)
        except StorageError as e:
            logger.warning(f"Persisted session unreadable, discarding: {e.message}")
            return None

        if not raw_user or not token:
            if raw_user or token:
                logger.warning("Persisted session is incomplete, discarding")
            return None

        data = safe_json_loads(raw_user)
        if not isinstance(data, dict):
            logger.warning("Persisted session is not a valid user record, discarding")
            return None
        return Session(user=UserIdentity.from_dict(data), token=token)

    def _erase_persisted(self) -> None:
        for key in (USER_KEY, TOKEN_KEY):
            try:
                self._storage.remove_item(key)
            except StorageError as e:
                logger.error(f"Could not erase persisted {key}: {e.message}")

    def restore(self) -> Optional[Session]:
        """Adopt the persisted session if it is complete and well-formed. Never raises."""
        self._is_loading = True
        try:
            session = self._read_persisted()
            if session is None:
                self._erase_persisted()
            else:
                logger.info(f"Restored session for {session.username!r}")
            self._adopt(session)
        finally:
            self._is_loading = False
        self._notify()
        return session

    # ------------------------------------------------------------ login/out

    def _persist(self, session: Session) -> None:
        self._storage.set_item(USER_KEY, safe_json_dumps(session.user.to_dict()))
        self._storage.set_item(TOKEN_KEY, session.token)

    async def login(self, username: str, password: str) -> LoginResult:
        """Authenticate once against the server. Always returns a result, never raises."""
        try:
            response = await self._api.login(username, password)
        except Exception as e:
            logger.error(f"Login call failed unexpectedly: {e}", exc_info=True)
            return LoginResult.failure(TRANSPORT_FAILURE_MESSAGE)

        if not response.ok:
            logger.warning(f"Login rejected ({response.error_kind}): {response.error}")
            return LoginResult.failure(response.error or TRANSPORT_FAILURE_MESSAGE)

        if response.data is None:
            return LoginResult.failure(NO_DATA_MESSAGE)

        try:
            session = session_from_login_payload(response.data, username)
        except ProtocolError as e:
            logger.warning(f"Login response without token for {username!r}")
            return LoginResult.failure(e.message)

        try:
            self._persist(session)
        except StorageError as e:
            logger.error(f"Could not persist session: {e.message}")
            self._erase_persisted()
            return LoginResult.failure(PERSIST_FAILED_MESSAGE)

        self._adopt(session)
        logger.info(f"Signed in as {session.username!r} ({session.role})")
        self._notify()
        return LoginResult.ok()

    def logout(self) -> None:
        """Clear the live session and every persisted copy. Safe to call repeatedly."""
        had_session = self._session is not None
        self._adopt(None)
        self._erase_persisted()
        if had_session:
            logger.info("Signed out")
            self._notify()
