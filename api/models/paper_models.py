# File: api/models/paper_models.py
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PersonalizedPaperRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[int] = Field(default=None, alias="userId")
    week_number: Optional[Union[str, int]] = Field(default=None, alias="weekNumber")
    force_regenerate: bool = Field(default=False, alias="forceRegenerate")

    @field_validator("week_number")
    @classmethod
    def _week_as_text(cls, value):
        if value is None:
            return None
        return str(value).strip() or None
