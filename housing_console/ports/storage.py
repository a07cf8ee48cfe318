"""
Session storage port.

Persisted state is two independent string entries, ``user`` and
``auth_token``. They must survive page reloads. The session store never assumes
that one implies the other.

On a server the entries are scoped per browser: each browser carries a random
id, and its pair lives under ``<storage_dir>/<browser id>/``. Nobody shares a
login with whoever signed in last on the same machine.
"""
from __future__ import annotations

import os
import re
import secrets
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from ..infra.exceptions import StorageError

USER_KEY = "user"
TOKEN_KEY = "auth_token"

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_\-]+$")
# new_browser_id() gives 32 characters
_BROWSER_ID = re.compile(r"^[A-Za-z0-9_\-]{32,64}$")


class SessionStorage(ABC):
    """Key/value string storage for the persisted session."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string or None"""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove the entry; a missing entry is not an error"""
        ...


class MemorySessionStorage(SessionStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return sorted(self._items)


class FileSessionStorage(SessionStorage):
    """One UTF-8 file per key under ``base_dir``. Writes are atomic (temp file + rename)."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key or ""):
            raise StorageError(f"Invalid storage key: {key!r}", key=key, operation="path")
        return self.base_dir / key

    def get_item(self, key: str) -> Optional[str]:
        p = self._path(key)
        try:
            return p.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            # an unreadable entry is the same as a corrupt one: let restore() discard it
            raise StorageError(f"Cannot read {key}: {e}", key=key, operation="read") from e

    def set_item(self, key: str, value: str) -> None:
        p = self._path(key)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.base_dir), prefix=f".{key}.")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(str(value))
            os.replace(tmp, p)
        except OSError as e:
            raise StorageError(f"Cannot write {key}: {e}", key=key, operation="write") from e

    def remove_item(self, key: str) -> None:
        p = self._path(key)
        try:
            p.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Cannot remove {key}: {e}", key=key, operation="remove") from e


def new_browser_id() -> str:
    return secrets.token_urlsafe(24)


def is_browser_id(value: Optional[str]) -> bool:
    return bool(value) and _BROWSER_ID.match(value) is not None


def browser_session_storage(base_dir: Union[str, Path], browser_id: str) -> FileSessionStorage:
    """File storage for one browser's session pair."""
    if not is_browser_id(browser_id):
        raise StorageError("Invalid browser id", key="browser_id", operation="scope")
    return FileSessionStorage(Path(base_dir) / browser_id)
