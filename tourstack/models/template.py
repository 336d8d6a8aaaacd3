"""Tour templates — one per positioning technology, each with custom stop fields."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from tourstack.models.base import TourStackModel, utc_now


class CustomField(TourStackModel):
    """A per-stop field a template adds to the stop editor (e.g. GPS latitude)."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    label: str
    type: str = "text"
    required: bool = False
    placeholder: str | None = None
    help_text: str | None = None
    options: list[str] | None = None
    unit: str | None = None
    multilingual: bool | None = None


class Template(TourStackModel):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    built_in: bool = False
    custom_fields: list[CustomField] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
