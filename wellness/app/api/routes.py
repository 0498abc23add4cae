from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
import logging

from ..core.personas import describe, known_assistants
from ..models.envelope import AssistantDescriptor
from ..services.recipe_parser import RecipeParser
from ..services.webhook_client import WellnessClient

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


class ChatRequest(BaseModel):
    message: str


class AssistantRequest(BaseModel):
    assistant_id: str


class RegisterRequest(BaseModel):
    email: str
    name: str
    preferences: Dict[str, Any] = {}


class PreferencesRequest(BaseModel):
    preferences: Dict[str, Any]


class ParseRequest(BaseModel):
    text: str


def get_client(request: Request) -> WellnessClient:
    """The single client built at startup."""
    return request.app.state.client


@router.get("/session")
async def session_info(client: WellnessClient = Depends(get_client)):
    return {
        "user_id": client.get_user_id(),
        "assistant": describe(client.get_current_assistant()).model_dump(),
        "authenticated": client.is_authenticated(),
    }


@router.get("/assistants", response_model=List[AssistantDescriptor])
async def list_assistants():
    return known_assistants()


@router.post("/chat")
async def chat(body: ChatRequest, client: WellnessClient = Depends(get_client)):
    envelope = await client.send_message(body.message)
    return envelope.to_payload()


@router.post("/assistant")
async def switch_assistant(body: AssistantRequest, client: WellnessClient = Depends(get_client)):
    envelope = await client.switch_assistant(body.assistant_id)
    return envelope.to_payload()


@router.post("/register")
async def register(body: RegisterRequest, client: WellnessClient = Depends(get_client)):
    return await client.register(body.email, body.name, body.preferences)


@router.post("/preferences")
async def update_preferences(body: PreferencesRequest, client: WellnessClient = Depends(get_client)):
    return await client.update_preferences(body.preferences)


@router.get("/history")
async def history(
    limit: int = Query(50, ge=1, le=500),
    client: WellnessClient = Depends(get_client),
):
    result = await client.get_message_history(limit)
    return result.to_payload()


@router.post("/logout")
async def logout(client: WellnessClient = Depends(get_client)):
    client.logout()
    return {"success": True}


@router.post("/recipes/parse")
async def parse_recipe(body: ParseRequest):
    is_recipe = RecipeParser.is_recipe_response(body.text)
    recipe: Optional[Dict[str, Any]] = None
    if is_recipe:
        recipe = RecipeParser.parse(body.text).model_dump(by_alias=True)
    log.info(f"🍋 Parse request: recipe={is_recipe}")
    return {"isRecipe": is_recipe, "recipe": recipe}
