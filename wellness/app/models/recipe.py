from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, conint


class RecipeInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    servings: Optional[conint(ge=0)] = None
    prep_minutes: Optional[conint(ge=0)] = Field(None, alias="prepMinutes")
    cook_minutes: Optional[conint(ge=0)] = Field(None, alias="cookMinutes")
    total_minutes: Optional[conint(ge=0)] = Field(None, alias="totalMinutes")
    calories_per_serving: Optional[conint(ge=0)] = Field(None, alias="caloriesPerServing")
    dietary_tags: List[str] = Field(default_factory=list, alias="dietaryTags")


class Recipe(BaseModel):
    """Structured view of a recipe reply. Every field may be empty."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    summary: str = ""
    ingredients: List[str] = []
    instructions: List[str] = []
    notes: str = ""
    closing_summary: str = Field("", alias="closingSummary")
    tags: List[str] = []
    info: Optional[RecipeInfo] = None
