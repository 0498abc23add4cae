"""
Webhook client for the Mediterranean Wellness assistants.

Every call is a single attempt. Failures never escape: they are logged and
returned as failure results so the page can keep going.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from ..core.config import Settings, get_settings
from ..core.personas import describe
from ..core.session import JsonFileStorage, MemoryStorage, SessionState, Storage
from ..models.envelope import Envelope, HistoryResult
from .recipe_parser import RecipeParser

log = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Unable to connect to assistant. Please try again."
MESSAGE_KEYS = ("message", "response", "assistant_message", "output", "text")


class RemoteCallError(Exception):
    """Non-success HTTP status from the webhook host."""


def build_storage(settings: Settings) -> Storage:
    if settings.storage_path:
        return JsonFileStorage(settings.storage_path)
    return MemoryStorage()


def _first_object(data: Any) -> Any:
    # n8n "respond with all items" wraps the reply in a list
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return data


def _pick_message(data: Dict[str, Any]) -> Optional[str]:
    for key in MESSAGE_KEYS:
        value = data.get(key)
        if value:
            return value if isinstance(value, str) else json.dumps(value)
    return None


class WellnessClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[SessionState] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.session = session or SessionState(
            build_storage(self.settings), self.settings.default_assistant
        )
        self.http = httpx.AsyncClient(timeout=self.settings.request_timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self.http.aclose()
        log.info("🔌 HTTP client closed")

    def _url(self, path: str) -> str:
        base = self.settings.base_url.rstrip("/")
        webhook = self.settings.webhook_path.strip("/")
        return f"{base}/{webhook}/{path}" if webhook else f"{base}/{path}"

    def _headers(self, auth: bool = True) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.session.token
        if auth and token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> httpx.Response:
        url = self._url(path)
        log.info(f"📤 {method} {url}")
        response = await self.http.request(
            method, url, json=payload, params=params, headers=self._headers(auth)
        )
        if not response.is_success:
            raise RemoteCallError(f"HTTP {response.status_code}: {response.reason_phrase}")
        return response

    async def _request_json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = await self._request(method, path, **kwargs)
        data = _first_object(response.json())
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object from {path}")
        return data

    # Session passthroughs

    def get_user_id(self) -> str:
        return self.session.get_user_id()

    def get_current_assistant(self) -> str:
        return self.session.get_current_assistant()

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated()

    def is_token_expired(self) -> bool:
        return self.session.is_token_expired()

    def logout(self) -> None:
        self.session.logout()

    # Remote operations

    def _build_envelope(self, body: str, assistant_id: str) -> Envelope:
        try:
            data = _first_object(json.loads(body))
        except ValueError:
            data = body

        if not isinstance(data, dict):
            message = data if isinstance(data, str) else body
            data = {}
        else:
            message = _pick_message(data)

        is_recipe = RecipeParser.is_recipe_response(message)
        if "isRecipe" in data:
            is_recipe = data["isRecipe"]

        envelope = Envelope(
            success=data.get("success", True),
            message=message,
            error=str(data["error"]) if data.get("error") is not None else None,
            assistant=describe(assistant_id),
            is_recipe=is_recipe,
            extra=Envelope.passthrough(data),
        )
        if envelope.is_recipe and message:
            envelope.recipe = RecipeParser.parse(message)
        return envelope

    async def send_message(self, message: str) -> Envelope:
        if not message or not message.strip():
            return Envelope(success=False, error="Message is empty")

        assistant_id = self.session.get_current_assistant()
        user_id = self.session.get_user_id()
        payload = {
            "chatInput": message,
            "userId": user_id,
            "sessionId": f"{user_id}_{assistant_id}",
            "userName": self.session.user_name or self.settings.default_user_name,
        }
        try:
            response = await self._request("POST", f"{assistant_id}_chat", payload=payload)
            envelope = self._build_envelope(response.text, assistant_id)
            log.info(f"✅ Reply from {assistant_id} (recipe={envelope.is_recipe})")
            return envelope
        except Exception as e:
            log.error(f"❌ Send message error: {e}")
            return Envelope(success=False, error=str(e), message=FALLBACK_MESSAGE)

    async def switch_assistant(self, assistant_id: str) -> Envelope:
        # Local selection is authoritative; the webhook only supplies a greeting
        descriptor = self.session.switch_assistant(assistant_id)
        if not self.settings.confirm_assistant_switch:
            return Envelope(success=True, assistant=descriptor)

        try:
            data = await self._request_json(
                "POST",
                "select-assistant",
                payload={"user_id": self.session.get_user_id(), "assistant_id": assistant_id},
            )
        except Exception as e:
            log.error(f"❌ Switch assistant error: {e}")
            return Envelope(success=True, assistant=descriptor)

        greeting = data.get("greeting")
        if isinstance(greeting, str) and greeting:
            descriptor = describe(assistant_id, greeting)
        extra = {k: v for k, v in Envelope.passthrough(data).items() if k != "greeting"}
        return Envelope(success=True, assistant=descriptor, extra=extra)

    async def register(self, email: str, name: str, preferences: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            data = await self._request_json(
                "POST",
                "register-user",
                payload={"email": email, "name": name, "preferences": preferences or {}},
                auth=False,
            )
        except Exception as e:
            log.error(f"❌ Registration error: {e}")
            return {"success": False, "error": str(e)}

        if data.get("success") and data.get("token"):
            self.session.set_credentials(data["token"], data.get("user_id"), name)
            log.info(f"✅ Registered {email}")
        return data

    async def update_preferences(self, preferences: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return await self._request_json(
                "POST",
                "update-preferences",
                payload={"user_id": self.session.get_user_id(), "preferences": preferences},
            )
        except Exception as e:
            log.error(f"❌ Update preferences error: {e}")
            return {"success": False, "error": str(e)}

    async def get_message_history(self, limit: int = 50) -> HistoryResult:
        try:
            response = await self._request(
                "GET",
                "message-history",
                params={"user_id": self.session.get_user_id(), "limit": limit},
            )
            data = response.json()
            if isinstance(data, list):
                return HistoryResult(success=True, messages=data)
            if not isinstance(data, dict):
                raise ValueError("Expected a JSON object from message-history")
            messages = data.get("messages") or []
            if not isinstance(messages, list):
                raise ValueError("messages must be a list")
            return HistoryResult(
                success=data.get("success", True),
                messages=messages,
                error=data.get("error"),
                extra={k: v for k, v in data.items() if k not in {"success", "messages", "error"}},
            )
        except Exception as e:
            log.error(f"❌ Get message history error: {e}")
            return HistoryResult(success=False, messages=[], error=str(e))
