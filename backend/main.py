"""
Composition root for the guided session engine.

Part of HYG-21: Engine configuration

This module wires the SessionController with its production collaborators
from Settings:
- JsonProfileStore at `profile_store_path`
- OpenAIPlanProvider when an OpenAI key is configured, otherwise none (every
  provider call then uses its fallback)
- AsyncioTickSource at `tick_interval_seconds`

Usage:
    from backend.main import create_session_controller
    from backend.settings import Settings

    # Default controller (uses get_settings())
    controller = create_session_controller()

    # Test controller with custom settings and collaborators
    test_settings = Settings(environment="test", _env_file=None)
    controller = create_session_controller(
        settings=test_settings,
        profile_store=FakeProfileStore(),
        plan_provider=FakePlanProvider(),
        tick_source=ManualTickSource(),
    )
"""

import logging
from typing import Optional

import sentry_sdk

from application.ports import PlanProvider, ProfileStore
from backend.ai.plan_provider import OpenAIPlanProvider
from backend.core.clock import AsyncioTickSource, TickSource
from backend.core.session_controller import SessionController
from backend.settings import Settings, get_settings
from infrastructure.profile_store import JsonProfileStore

logger = logging.getLogger(__name__)


def create_session_controller(
    settings: Optional[Settings] = None,
    *,
    profile_store: Optional[ProfileStore] = None,
    plan_provider: Optional[PlanProvider] = None,
    tick_source: Optional[TickSource] = None,
) -> SessionController:
    """
    Create and configure a SessionController.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.
        profile_store: Overrides the JSON profile store
        plan_provider: Overrides the provider built from settings
        tick_source: Overrides the asyncio clock

    Returns:
        Configured SessionController instance.
    """
    if settings is None:
        settings = get_settings()

    _configure_logging(settings)
    _init_sentry(settings)

    if profile_store is None:
        profile_store = JsonProfileStore(settings.profile_store_path)
    if plan_provider is None:
        plan_provider = _build_plan_provider(settings)
    if tick_source is None:
        tick_source = AsyncioTickSource(settings.tick_interval_seconds)

    _log_feature_flags(settings)

    return SessionController(
        profile_store,
        plan_provider,
        tick_source=tick_source,
        provider_timeout_seconds=settings.plan_provider_timeout_seconds,
        default_session_minutes=settings.default_session_minutes,
        default_focus_hint=settings.default_focus_hint,
    )


def _configure_logging(settings: Settings) -> None:
    """Set the root logging level; add a handler only if none is configured."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root.setLevel(settings.log_level)


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized for session engine")


def _build_plan_provider(settings: Settings) -> Optional[PlanProvider]:
    if not settings.plan_provider_enabled:
        return None
    return OpenAIPlanProvider(
        api_key=settings.openai_api_key,
        model=settings.plan_provider_model,
        max_attempts=settings.plan_provider_max_attempts,
    )


def _log_feature_flags(settings: Settings) -> None:
    """Log configuration status on startup."""
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Plan provider: {settings.plan_provider_model if settings.plan_provider_enabled else 'disabled (fallbacks only)'}")
    logger.info(f"Profile store: {settings.profile_store_path}")
    logger.info(f"Sentry: {'enabled' if settings.sentry_dsn else 'disabled'}")
