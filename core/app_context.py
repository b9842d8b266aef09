from dataclasses import dataclass

from core.catalog import CatalogService
from core.config_loader import AppConfig, NotificationConfig
from core.lifecycle import LifecycleOrchestrator
from core.matcher import SmartMatchingService
from core.scorer import ScoringService
from database.repository import MarketplaceRepository
from notification.events import EventBus


@dataclass
class AppContext:
    """Application context container that holds the long-lived wiring.

    Services are cheap and bound to a repository, so they are built per
    unit of work: obtain a repo via marketplace_uow() and ask the context
    for the service you need.
    """
    config: AppConfig
    events: EventBus

    @classmethod
    def build(cls, config: AppConfig) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration

        Returns:
            AppContext with a shared event bus (no DB session attached)
        """
        return cls(config=config, events=cls._build_event_bus(config.notifications))

    @staticmethod
    def _build_event_bus(notification_config: NotificationConfig) -> EventBus:
        return EventBus(
            enabled=notification_config.enabled,
            queue_maxsize=notification_config.queue_maxsize
        )

    def scoring_service(self, repo: MarketplaceRepository) -> ScoringService:
        return ScoringService(
            repo,
            config=self.config.scoring,
            latency_seconds=self.config.lifecycle.latency_seconds
        )

    def matching_service(self, repo: MarketplaceRepository) -> SmartMatchingService:
        return SmartMatchingService(
            repo,
            config=self.config.matching,
            latency_seconds=self.config.lifecycle.latency_seconds
        )

    def lifecycle(self, repo: MarketplaceRepository) -> LifecycleOrchestrator:
        return LifecycleOrchestrator(repo, config=self.config.lifecycle, events=self.events)

    def catalog(self, repo: MarketplaceRepository) -> CatalogService:
        return CatalogService(
            repo,
            events=self.events,
            latency_seconds=self.config.lifecycle.latency_seconds
        )
