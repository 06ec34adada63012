from __future__ import annotations

import logging
from typing import Optional

import requests

from asmr_catalog.core.api import AsmrOneClient, GoogleTranslateClient
from asmr_catalog.core.cache import (
    TRANSLATION_CACHE_CAPACITY,
    TREE_CACHE_CAPACITY,
    TimeBasedLRUCache,
)
from asmr_catalog.core.http_client import create_http_client_from_settings
from asmr_catalog.core.settings import CatalogSettings, create_settings_from_config
from asmr_catalog.core.translation import TranslationBatcher
from asmr_catalog.core.works_manager import WorksManager

logger = logging.getLogger(__name__)


class CoreContext:
    """
    Shared Core dependencies (settings + caches + clients + managers).

    Use a single instance for app lifetime: the caches live here and are
    handed to their users by reference.
    """

    def __init__(
        self,
        *,
        settings: Optional[CatalogSettings] = None,
        config_store=None,
        session: Optional[requests.Session] = None,
    ):
        if settings is None:
            settings = (
                create_settings_from_config(config_store)
                if config_store is not None
                else CatalogSettings()
            )
        self.settings = settings

        self._http_client = create_http_client_from_settings(self.settings)
        self.session = session or self._http_client.create_sync_session()

        self.tree_cache = TimeBasedLRUCache(TREE_CACHE_CAPACITY, name="media_tree")
        self.translation_cache = TimeBasedLRUCache(TRANSLATION_CACHE_CAPACITY, name="translation")

        self.catalog = AsmrOneClient(
            session=self.session,
            settings=self.settings,
            timeout=self._http_client.config.requests_timeout,
        )
        self.translator = GoogleTranslateClient(self._http_client)
        self.batcher = TranslationBatcher(self.translator, self.translation_cache)

        self.works = WorksManager(
            client=self.catalog,
            batcher=self.batcher,
            tree_cache=self.tree_cache,
            settings=self.settings,
        )
        logger.info(
            f"Core context ready - mirror: {self.settings.site_mirror}, "
            f"language: {self.settings.translation_language}"
        )

    async def aclose(self) -> None:
        await self.translator.close()
        await self._http_client.close_async_session()
        self._http_client.close()
        self.session.close()
