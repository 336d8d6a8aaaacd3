"""Abstract base class for AI concierge persistence.

A museum has at most one concierge configuration.  Knowledge sources and
quick actions hang off that configuration and are deleted with it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tourstack.models.concierge import ConciergeConfig, KnowledgeSource, QuickAction


# Concrete implementation: SQLiteConciergeProvider (tourstack/providers/storage/)
class IConciergeProvider(ABC):
    """Contract for concierge config, knowledge and quick-action storage."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    # ── Config ─────────────────────────────────────────────────────────

    @abstractmethod
    async def get_first_config(self) -> ConciergeConfig | None:
        """The oldest config with its knowledge sources and quick actions.

        Knowledge sources are ordered by priority (highest first) and quick
        actions by ``order``.
        """

    @abstractmethod
    async def get_config(self, config_id: str) -> ConciergeConfig | None:
        """Retrieve a config with its children, ordered as above."""

    @abstractmethod
    async def create_config(self, config: ConciergeConfig) -> ConciergeConfig:
        """Persist a new config (children are ignored)."""

    @abstractmethod
    async def update_config(self, config: ConciergeConfig) -> ConciergeConfig:
        """Write the config columns and refresh ``updated_at``."""

    # ── Knowledge ──────────────────────────────────────────────────────

    @abstractmethod
    async def list_knowledge(self, config_id: str) -> list[KnowledgeSource]:
        """Knowledge sources of a config, highest priority first."""

    @abstractmethod
    async def get_knowledge(self, knowledge_id: str) -> KnowledgeSource | None:
        """Retrieve a knowledge source by id."""

    @abstractmethod
    async def find_knowledge(
        self,
        config_id: str,
        source_type: str,
        source_id: str,
    ) -> KnowledgeSource | None:
        """Retrieve the knowledge source imported from (*source_type*, *source_id*)."""

    @abstractmethod
    async def create_knowledge(self, source: KnowledgeSource) -> KnowledgeSource:
        """Persist a new knowledge source."""

    @abstractmethod
    async def update_knowledge(self, source: KnowledgeSource) -> KnowledgeSource:
        """Write every column of *source* and refresh ``updated_at``."""

    @abstractmethod
    async def delete_knowledge(self, knowledge_id: str) -> bool:
        """Delete a knowledge source.  Returns ``True`` if it existed."""

    # ── Quick actions ──────────────────────────────────────────────────

    @abstractmethod
    async def list_quick_actions(self, config_id: str) -> list[QuickAction]:
        """Quick actions of a config ordered by ``order``."""

    @abstractmethod
    async def get_quick_action(self, action_id: str) -> QuickAction | None:
        """Retrieve a quick action by id."""

    @abstractmethod
    async def max_quick_action_order(self, config_id: str) -> int | None:
        """Highest quick-action order, or ``None`` when there are none."""

    @abstractmethod
    async def create_quick_action(self, action: QuickAction) -> QuickAction:
        """Persist a new quick action."""

    @abstractmethod
    async def update_quick_action(self, action: QuickAction) -> QuickAction:
        """Write every column of *action* and refresh ``updated_at``."""

    @abstractmethod
    async def delete_quick_action(self, action_id: str) -> bool:
        """Delete a quick action.  Returns ``True`` if it existed."""

    @abstractmethod
    async def set_quick_action_orders(self, orders: dict[str, int]) -> None:
        """Apply ``{action_id: order}`` in one transaction."""
