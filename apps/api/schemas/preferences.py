from __future__ import annotations

from pydantic import BaseModel, Field


class ThemeRequest(BaseModel):
    theme: str = Field(..., min_length=1)


class ThemeResponse(BaseModel):
    theme: str
