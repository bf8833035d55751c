# File: api/models/profile_models.py
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SurveyRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    responses: Optional[Any] = None


class PersonaUpdateRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    persona_data: Optional[Any] = Field(default=None, alias="personaData")


class AvatarColorRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    avatar_color: Optional[str] = Field(default=None, alias="avatarColor")


class PersonaSummaryRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    force_regenerate: bool = Field(default=False, alias="forceRegenerate")


class PersonaSummaryUpdateRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    field: Optional[str] = None
    value: Optional[Any] = None


class InterviewRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    action: Optional[str] = None
    message: Optional[str] = None


class ChatbotRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    message: Optional[str] = None


class StudentProjectRequest(_CamelModel):
    user_id: Optional[int] = Field(default=None, alias="userId")
    project_type: Optional[str] = Field(default=None, alias="projectType")
    project_description: Optional[str] = Field(default=None, alias="projectDescription")


class InteractionRequest(_CamelModel):
    type: Optional[str] = None
    persona_user_id: Optional[int] = Field(default=None, alias="personaUserId")
    user_id: Optional[int] = Field(default=None, alias="userId")
    emoji: Optional[str] = None
    comment: Optional[str] = None

