"""Pydantic models for component render results and the assets they declare."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class StyleDefinition(BaseModel):
    """A stylesheet requirement. hook=None means enqueue immediately."""

    handle: str = Field(min_length=1)
    src: str = ""
    deps: list[str] = Field(default_factory=list)
    version: str | None = None
    media: str = "all"
    hook: str | None = None

    model_config = {"extra": "forbid"}


class ScriptDefinition(BaseModel):
    """A script requirement. hook=None means enqueue immediately."""

    handle: str = Field(min_length=1)
    src: str = ""
    deps: list[str] = Field(default_factory=list)
    version: str | None = None
    in_footer: bool = True
    hook: str | None = None
    # object name → data handed to the page alongside the script
    localize: dict[str, dict[str, Any]] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


class ComponentRenderResult(BaseModel):
    """What a component render factory hands back."""

    markup: str = ""
    styles: list[StyleDefinition] = Field(default_factory=list)
    scripts: list[ScriptDefinition] = Field(default_factory=list)
    requires_media: bool = False
    repeatable: bool = False
    context_schema: dict[str, Any] = Field(default_factory=dict)
    component_type: Literal["form_field", "form_element", "layout_wrapper", "template"] = "form_field"

    model_config = {"extra": "forbid"}

    def submits_data(self) -> bool:
        return self.component_type == "form_field"

    def has_assets(self) -> bool:
        return bool(self.styles or self.scripts or self.requires_media)
