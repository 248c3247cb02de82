from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MenuItem(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str
    url: Optional[str] = None
    type: str = "HTTP"
    items: List["MenuItem"] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    def to_input(self) -> Dict[str, Any]:
        """Item as accepted by ``MenuItemCreateInput``; ids are never copied."""
        body: Dict[str, Any] = {"title": self.title, "type": self.type}
        if self.url is not None:
            body["url"] = self.url
        if self.items:
            body["items"] = [item.to_input() for item in self.items]
        return body


MenuItem.model_rebuild()


class Menu(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    handle: str
    title: str
    items: List[MenuItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    def to_create_input(self) -> Dict[str, Any]:
        return {
            "handle": self.handle,
            "title": self.title,
            "items": [item.to_input() for item in self.items],
        }
