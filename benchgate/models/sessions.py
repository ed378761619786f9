from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, Field

# Sessions are decoded API payloads; the schema has shifted between flat
# (``appName``) and nested (``app.name``) shapes, so they stay as mappings.
Session = Mapping[str, object]


class SessionQuery(BaseModel):
    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=15, ge=1)
    sort: str = "timePushed:desc"
    apps: list[str] = Field(default_factory=list)
    devices: list[str] = Field(default_factory=list)
    manufacturers: list[str] = Field(default_factory=list)


class SessionPage(BaseModel):
    content: list[dict[str, object]] = Field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    size: int = 0
    number: int = 0


__all__ = ["Session", "SessionPage", "SessionQuery"]
