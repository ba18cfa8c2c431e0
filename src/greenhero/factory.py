"""
factory - Composition root for the GreenHero client.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, tests) call this factory to get fully
configured services that share ONE SessionManager.

Usage:
    from greenhero.factory import ServiceFactory
    from greenhero.infrastructure.config import Settings

    factory = ServiceFactory(Settings.from_env())
    session = factory.session
    await session.bootstrap()  # one-time startup

    marketplace = factory.create_marketplace_service()
    products = await marketplace.list_products()
"""

from __future__ import annotations

import logging
from typing import Optional

from greenhero.domain.ports import ApiClient, CredentialStore
from greenhero.infrastructure.config import Settings
from greenhero.infrastructure.http.client import RequestsApiClient
from greenhero.infrastructure.storage.credential_store import FileCredentialStore
from greenhero.application.services.session import SessionManager
from greenhero.application.services.marketplace import MarketplaceService
from greenhero.application.services.chat import ChatService
from greenhero.application.services.waste import WasteClassifierService
from greenhero.application.services.profile import ProfileService

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root: wires all dependencies together.

    ``api`` and ``store`` can be injected (tests use fakes); otherwise they
    are built from settings.
    """

    def __init__(
        self,
        config: Settings,
        *,
        api: Optional[ApiClient] = None,
        store: Optional[CredentialStore] = None,
    ):
        self._config = config
        self._api = api or RequestsApiClient(
            config.api_base_url,
            timeout=config.request_timeout,
            skip_tunnel_warning=config.skip_tunnel_warning,
        )
        self._store = store or FileCredentialStore(config.credential_file)
        self._session = SessionManager(self._api, self._store)

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def session(self) -> SessionManager:
        return self._session

    def create_marketplace_service(self) -> MarketplaceService:
        return MarketplaceService(self._session)

    def create_chat_service(self) -> ChatService:
        return ChatService(self._session, self._api, self._config.chat_url)

    def create_waste_classifier(self) -> WasteClassifierService:
        return WasteClassifierService(self._api, self._config.classifier_url)

    def create_profile_service(self) -> ProfileService:
        # The CLI restarts between commands, so edits must survive in storage
        return ProfileService(self._session, persist_user=True)

    def close(self) -> None:
        close = getattr(self._api, "close", None)
        if callable(close):
            close()
