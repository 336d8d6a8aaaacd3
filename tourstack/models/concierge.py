"""AI concierge configuration: persona, knowledge sources and quick actions."""

from __future__ import annotations

from pydantic import Field

from tourstack.models.base import LocalizedText, TourStackModel, utc_now

DEFAULT_WELCOME: LocalizedText = {"en": "Welcome! How can I help you today?"}

PERSONA_PROMPTS: dict[str, str] = {
    "friendly": (
        "You are a friendly museum docent. Be warm and welcoming. "
        "Use casual language but remain informative."
    ),
    "professional": (
        "You are a professional museum guide. Maintain a formal but approachable tone. "
        "Provide accurate, factual information."
    ),
    "fun": (
        "You are a fun, family-friendly museum guide! Use simple words that kids can "
        "understand. Be enthusiastic and encouraging!"
    ),
    "scholarly": (
        "You are an expert museum scholar. Provide detailed, academic-quality information."
    ),
}


class KnowledgeSource(TourStackModel):
    """Text the concierge may answer from.  Higher ``priority`` sorts first."""

    id: str
    config_id: str
    source_type: str
    source_id: str | None = None
    title: str
    content: str
    character_count: int = 0
    priority: int = 0
    enabled: bool = True
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class QuickAction(TourStackModel):
    """A suggested visitor question shown as a button in the chat drawer."""

    id: str
    config_id: str
    question: LocalizedText = Field(default_factory=dict)
    category: str
    icon: str | None = None
    order: int = 0
    enabled: bool = True
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class ConciergeConfig(TourStackModel):
    id: str
    museum_id: str | None = None
    enabled: bool = False
    persona: str = "friendly"
    custom_persona: str | None = None
    welcome_message: LocalizedText = Field(default_factory=lambda: dict(DEFAULT_WELCOME))
    enabled_languages: list[str] = Field(default_factory=lambda: ["en", "es", "fr", "de"])
    knowledge_sources: list[KnowledgeSource] = Field(default_factory=list)
    quick_actions: list[QuickAction] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    def persona_prompt(self) -> str:
        """System persona text; ``custom`` uses the admin-written persona."""
        if self.persona == "custom" and self.custom_persona:
            return self.custom_persona
        return PERSONA_PROMPTS.get(self.persona, PERSONA_PROMPTS["friendly"])
