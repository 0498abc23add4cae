"""
Locally persisted session: user id, bearer token, selected assistant.

Persistence sits behind ``Storage`` so the session can live in a JSON file
(the analogue of browser local storage) or purely in memory.
"""

from __future__ import annotations

import base64
import json
import logging
import math
import time
import uuid
from pathlib import Path
from typing import Dict, Optional, Protocol

from .personas import describe
from ..models.envelope import AssistantDescriptor

log = logging.getLogger(__name__)

TOKEN_KEY = "mw_token"
USER_ID_KEY = "mw_user_id"
ASSISTANT_KEY = "mw_assistant"
USER_NAME_KEY = "mw_user_name"

SESSION_KEYS = (TOKEN_KEY, USER_ID_KEY, ASSISTANT_KEY, USER_NAME_KEY)


class Storage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = str(value)

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """String key-value pairs kept in a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, OSError):
            log.warning(f"⚠️ Ignoring unreadable session file {self.path}")
            return {}
        if not isinstance(parsed, dict):
            return {}
        return {str(k): str(v) for k, v in parsed.items() if v is not None}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


def generate_user_id() -> str:
    """Temporary id in the ``user_<epoch-ms>_<suffix>`` shape."""
    suffix = uuid.uuid4().hex[:9]
    return f"user_{int(time.time() * 1000)}_{suffix}"


def token_expired(token: Optional[str], now: Optional[float] = None) -> bool:
    """
    Check the ``exp`` claim of a JWT without verifying it.

    Anything that cannot be decoded counts as expired.
    """
    if not token:
        return True
    try:
        segment = token.split(".")[1]
        padded = segment + "=" * (-len(segment) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded))
        exp = float(payload["exp"])
        if not math.isfinite(exp):
            raise ValueError("non-finite exp claim")
    except (IndexError, KeyError, TypeError, ValueError, OverflowError) as e:
        log.debug(f"Token decode failed: {e}")
        return True
    current = time.time() if now is None else now
    return exp < current


class SessionState:
    def __init__(self, storage: Storage, default_assistant: str = "nona") -> None:
        self.storage = storage
        self.default_assistant = default_assistant

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(TOKEN_KEY)

    @property
    def user_name(self) -> Optional[str]:
        return self.storage.get(USER_NAME_KEY)

    def get_user_id(self) -> str:
        user_id = self.storage.get(USER_ID_KEY)
        if not user_id:
            user_id = generate_user_id()
            self.storage.set(USER_ID_KEY, user_id)
            log.info(f"🆕 Generated user id {user_id}")
        return user_id

    def get_current_assistant(self) -> str:
        return self.storage.get(ASSISTANT_KEY) or self.default_assistant

    def switch_assistant(self, assistant_id: str, greeting: Optional[str] = None) -> AssistantDescriptor:
        self.storage.set(ASSISTANT_KEY, assistant_id)
        log.info(f"🔁 Assistant set to {assistant_id}")
        return describe(assistant_id, greeting)

    def set_credentials(self, token: str, user_id: Optional[str], user_name: Optional[str] = None) -> None:
        self.storage.set(TOKEN_KEY, token)
        if user_id:
            self.storage.set(USER_ID_KEY, user_id)
        if user_name:
            self.storage.set(USER_NAME_KEY, user_name)

    def is_token_expired(self, now: Optional[float] = None) -> bool:
        return token_expired(self.token, now)

    def is_authenticated(self) -> bool:
        return bool(self.token) and not self.is_token_expired()

    def logout(self) -> None:
        for key in SESSION_KEYS:
            self.storage.remove(key)
        log.info("👋 Session cleared")
