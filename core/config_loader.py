import yaml
import os
from typing import List, Dict
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///marketplace.db"
    echo: bool = False


class CoarseScoringConfig(BaseModel):
    """
    Configuration for the coarse requester/provider score (0-100).

    Factor ceilings add up to 100 so the total cannot exceed it.
    """
    needs_max: float = 40.0
    budget_max: float = 25.0
    rating_max: float = 20.0
    location_max: float = 10.0
    reviews_max: float = 5.0

    # Budget band: requester midpoint relative to provider midpoint
    budget_band_low: float = 0.8
    budget_band_high: float = 1.5
    budget_tier_mid: float = 0.6
    budget_tier_mid_points: float = 15.0
    budget_tier_low: float = 0.4
    budget_tier_low_points: float = 10.0

    location_partial_points: float = 5.0

    # review count threshold -> points, checked highest first
    review_tiers: Dict[int, float] = Field(default_factory=lambda: {20: 5.0, 10: 3.0, 5: 1.0})

    excellent_rating: float = 4.5
    min_match_score: int = 30  # find_matches keeps scores strictly above this


class CompatibilityWeights(BaseModel):
    """Weights for each compatibility dimension in the smart match score."""
    needs: float = 0.30
    budget: float = 0.25
    location: float = 0.20
    industry: float = 0.15
    size: float = 0.10


def _default_industry_mapping() -> Dict[str, List[str]]:
    return {
        'tecnología': ['desarrollo de software', 'consultoría it', 'marketing digital', 'diseño web'],
        'retail': ['marketing digital', 'diseño', 'logística', 'contabilidad'],
        'manufactura': ['logística', 'consultoría', 'contabilidad', 'recursos humanos'],
        'servicios': ['marketing digital', 'contabilidad', 'recursos humanos', 'consultoría'],
        'salud': ['consultoría', 'contabilidad', 'recursos humanos', 'marketing digital'],
        'educación': ['consultoría', 'marketing digital', 'recursos humanos', 'contabilidad'],
        'construcción': ['logística', 'contabilidad', 'consultoría', 'recursos humanos'],
        'alimentación': ['marketing digital', 'logística', 'contabilidad', 'consultoría'],
        'technology': ['software development', 'it consulting', 'digital marketing', 'web design'],
        'manufacturing': ['logistics', 'consulting', 'accounting', 'human resources'],
        'services': ['digital marketing', 'accounting', 'human resources', 'consulting'],
        'health': ['consulting', 'accounting', 'human resources', 'digital marketing'],
        'education': ['consulting', 'digital marketing', 'human resources', 'accounting'],
        'construction': ['logistics', 'accounting', 'consulting', 'human resources'],
        'food': ['digital marketing', 'logistics', 'accounting', 'consulting'],
    }


def _default_size_multipliers() -> Dict[str, float]:
    return {
        'micro': 0.3,
        'small': 0.6,
        'medium': 1.0,
        'pequeña': 0.6,
        'mediana': 1.0,
    }


class SmartMatchingConfig(BaseModel):
    """
    Configuration for the smart matching pipeline (offering-level, 0-1 score).
    """
    weights: CompatibilityWeights = Field(default_factory=CompatibilityWeights)
    min_score: float = 0.1  # candidates below this are discarded
    reason_threshold: float = 0.7  # a dimension emits a reason only above this
    default_size_multiplier: float = 0.5
    size_tolerance: float = 0.5
    size_match_score: float = 1.0
    size_mismatch_score: float = 0.6
    size_multipliers: Dict[str, float] = Field(default_factory=_default_size_multipliers)
    industry_mapping: Dict[str, List[str]] = Field(default_factory=_default_industry_mapping)
    default_budget_min: float = 0.0
    default_budget_max: float = 100000.0
    recommendations_limit: int = 10


class LifecycleConfig(BaseModel):
    """
    Configuration for the conversation/quote/engagement/rating lifecycle.
    """
    latency_seconds: float = 0.5  # simulated I/O wait per public operation
    quote_validity_days: int = 7
    default_currency: str = "MXN"
    system_sender_id: str = "system"
    unknown_provider_id: str = "unknown"
    welcome_message: str = (
        "Hi! You have started a conversation with this provider. "
        "It has been saved and will stay available in your conversation list. "
        "How can we help you?"
    )
    # When enabled, accepting a quote copies its price/currency/id onto the
    # conversation's engagement. Disabled keeps the amount at 0.
    sync_engagement_amount_on_accept: bool = False


class NotificationConfig(BaseModel):
    """
    Configuration for lifecycle event broadcasting.
    """
    enabled: bool = True
    queue_maxsize: int = 100  # per-subscriber queue; events are dropped when full


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scoring: CoarseScoringConfig = Field(default_factory=CoarseScoringConfig)
    matching: SmartMatchingConfig = Field(default_factory=SmartMatchingConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another dir), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    # Allow env var override for simulated latency
    env_latency = os.environ.get("MARKETPLACE_LATENCY_SECONDS")
    if env_latency:
        data.setdefault('lifecycle', {})
        data['lifecycle']['latency_seconds'] = float(env_latency)

    return AppConfig(**data)
