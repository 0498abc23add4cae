from __future__ import annotations

from typing import Any, ClassVar, Dict, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .recipe import Recipe


class AssistantDescriptor(BaseModel):
    id: str
    name: str
    greeting: str


class Envelope(BaseModel):
    """
    Uniform result of a client operation.

    Typed fields are computed by the client. Whatever else the remote payload
    carried is kept in ``extra`` and flattened back in by ``to_payload``.
    """

    model_config = ConfigDict(populate_by_name=True)

    RESERVED: ClassVar[FrozenSet[str]] = frozenset(
        {"success", "message", "error", "assistant", "isRecipe", "recipe"}
    )

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    assistant: Optional[AssistantDescriptor] = None
    is_recipe: Optional[bool] = Field(None, alias="isRecipe")
    recipe: Optional[Recipe] = None
    extra: Dict[str, Any] = {}

    @classmethod
    def passthrough(cls, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Payload fields that do not collide with a typed field."""
        return {k: v for k, v in payload.items() if k not in cls.RESERVED}

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        payload.update(
            self.model_dump(by_alias=True, exclude={"extra"}, exclude_none=True)
        )
        return payload


class HistoryResult(BaseModel):
    success: bool
    messages: List[Any] = []
    error: Optional[str] = None
    extra: Dict[str, Any] = {}

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        payload.update(self.model_dump(exclude={"extra"}, exclude_none=True))
        return payload
