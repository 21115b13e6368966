"""
War Room - Feature Flags System
===============================

Flags for selecting status policies and service behaviour.

Usage:
    from warroom.feature_flags import FeatureFlags, ItemStatusPolicy

    policy = FeatureFlags.get_item_status_policy()
    if FeatureFlags.is_enabled("seed_demo_data"):
        ...

Configuration via environment variables:
    WARROOM_ITEM_STATUS_POLICY=boq-strict
    WARROOM_SEED_DEMO_DATA=false
    WARROOM_LOG_LEVEL=DEBUG
    WARROOM_STORE_PATH=data/projects.json
"""

from __future__ import annotations

import os
import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional

from warroom.status_engine.item_status import ItemStatusPolicy

logger = logging.getLogger(__name__)


_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


# ═══════════════════════════════════════════════════════════════════════════════
# FEATURE FLAGS CLASS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class FeatureFlagsConfig:
    """
    Feature flag configuration.

    Defaults follow the current dashboard behaviour: only rejected items
    are blocked, and the demo portfolio is seeded on startup.
    """
    item_status_policy: ItemStatusPolicy = ItemStatusPolicy.APPROVAL_GATED

    # Feature toggles
    seed_demo_data: bool = True

    # Persistence (None keeps the store in memory)
    store_path: Optional[str] = None

    # Service
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000


class FeatureFlags:
    """
    Singleton holding the active feature flags.

    Loads from environment variables on first access, falling back to
    defaults for anything missing or invalid.

    Usage:
        policy = FeatureFlags.get_item_status_policy()

        if FeatureFlags.is_enabled("seed_demo_data"):
            ...

        config = FeatureFlags.get_config()
    """

    _instance: Optional[FeatureFlagsConfig] = None

    @classmethod
    def _load_from_env(cls) -> FeatureFlagsConfig:
        """Load configuration from environment variables."""
        config = FeatureFlagsConfig()

        value = os.environ.get("WARROOM_ITEM_STATUS_POLICY")
        if value:
            try:
                config.item_status_policy = ItemStatusPolicy(value.lower())
                logger.info(f"Feature flag item_status_policy = {value}")
            except ValueError:
                logger.warning(f"Invalid value for WARROOM_ITEM_STATUS_POLICY: {value}")

        value = os.environ.get("WARROOM_SEED_DEMO_DATA")
        if value:
            if value.lower() in _TRUE_VALUES:
                config.seed_demo_data = True
            elif value.lower() in _FALSE_VALUES:
                config.seed_demo_data = False
            else:
                logger.warning(f"Invalid value for WARROOM_SEED_DEMO_DATA: {value}")

        value = os.environ.get("WARROOM_STORE_PATH")
        if value:
            config.store_path = value

        value = os.environ.get("WARROOM_LOG_LEVEL")
        if value:
            if value.upper() in _LOG_LEVELS:
                config.log_level = value.upper()
            else:
                logger.warning(f"Invalid value for WARROOM_LOG_LEVEL: {value}")

        value = os.environ.get("WARROOM_HOST")
        if value:
            config.host = value

        value = os.environ.get("WARROOM_PORT")
        if value:
            try:
                config.port = int(value)
            except ValueError:
                logger.warning(f"Invalid value for WARROOM_PORT: {value}")

        return config

    @classmethod
    def get_config(cls) -> FeatureFlagsConfig:
        """Return the current configuration."""
        if cls._instance is None:
            cls._instance = cls._load_from_env()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached config so the next access reloads it."""
        cls._instance = None

    @classmethod
    def get_item_status_policy(cls) -> ItemStatusPolicy:
        """Return the active per-item status policy."""
        return cls.get_config().item_status_policy

    @classmethod
    def is_enabled(cls, feature: str) -> bool:
        """
        Check whether a feature toggle is on.

        Args:
            feature: Feature name (seed_demo_data)
        """
        config = cls.get_config()
        feature_map = {
            "seed_demo_data": config.seed_demo_data,
        }
        return feature_map.get(feature, False)

    @classmethod
    def set_item_status_policy(cls, value: str) -> bool:
        """
        Switch the item status policy at runtime.

        Returns:
            True if the value was accepted
        """
        config = cls.get_config()
        try:
            config.item_status_policy = ItemStatusPolicy(value.lower())
            logger.info(f"Item status policy set to {value}")
            return True
        except ValueError:
            logger.warning(f"Invalid item status policy: {value}")
            return False

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Export the configuration as a dict."""
        config = cls.get_config()
        return {
            "policies": {
                "item_status": config.item_status_policy.value,
            },
            "features": {
                "seed_demo_data": config.seed_demo_data,
            },
            "store_path": config.store_path,
            "log_level": config.log_level,
        }
