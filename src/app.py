"""Application composition root.

This module wires together configuration, the catalog, the matching engine and the intent
resolver. Every collaborator is constructed here and passed explicitly; there are no module-level
singletons.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.catalog.store import CatalogStore
from src.config.settings import Settings
from src.intent.llm_parser import ChatCompletionsBackend, GenerationBackend, llm_config_from_settings
from src.intent.resolver import IntentResolver
from src.search.engine import MatchingEngine


@dataclass(frozen=True)
class App:
    """Shared application dependencies for handlers."""

    settings: Settings
    catalog: CatalogStore
    engine: MatchingEngine
    resolver: IntentResolver


def create_app(settings: Settings, *, backend: GenerationBackend | None = None) -> App:
    """Create the application container and load the catalog.

    Raises:
        LoadError: If the configured catalog cannot be loaded.
    """

    catalog = CatalogStore()
    catalog.load(settings.catalog_csv_path)

    if backend is None:
        backend = ChatCompletionsBackend(llm_config_from_settings(settings))

    return App(
        settings=settings,
        catalog=catalog,
        engine=MatchingEngine(catalog),
        resolver=IntentResolver(backend),
    )
