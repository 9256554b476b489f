"""
Dependency Injection Container for GeoMind.

Builds the storage, shop directory, location cursor, assistant gateway, chat
log, map adapter and controller from settings, lazily and once each.

Usage:
    # At application startup
    container = DependencyContainer()
    await container.initialize()

    controller = container.controller

    # At shutdown
    await container.shutdown()
"""

from __future__ import annotations

import structlog

from geomind.chat.chat_log import ChatLog
from geomind.config.settings import Settings, get_settings
from geomind.controller.app_controller import AppController
from geomind.core.exceptions import InitializationError
from geomind.gateway.assistant import (
    AnthropicAssistantGateway,
    AssistantGateway,
    UnconfiguredAssistantGateway,
)
from geomind.map.adapter import SnapshotMapAdapter
from geomind.models.schemas import LatLng
from geomind.store.geo_store import GeoStore
from geomind.store.location import LocationCursor
from geomind.store.storage import JsonFileStorage, KeyValueStorage

logger = structlog.get_logger(__name__)


class DependencyContainer:
    """
    Central container for all service dependencies.

    Every component is created on first access and cached. Components can be
    injected up front (tests pass an in-memory storage or a fake gateway).

    Example:
        container = DependencyContainer(storage=InMemoryStorage(), gateway=FakeGateway())
        await container.initialize()
        container.controller.select_shop("seed-1")
        await container.shutdown()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        storage: KeyValueStorage | None = None,
        gateway: AssistantGateway | None = None,
    ):
        """
        Initialize the container.

        Args:
            settings: Application settings. Defaults to get_settings().
            storage: Durable storage. Defaults to a JSON file at settings.storage_path.
            gateway: Assistant gateway. Defaults to Claude when a key is configured.
        """
        self._settings = settings or get_settings()
        self._storage = storage
        self._gateway = gateway
        self._store: GeoStore | None = None
        self._cursor: LocationCursor | None = None
        self._chat: ChatLog | None = None
        self._map_adapter: SnapshotMapAdapter | None = None
        self._controller: AppController | None = None
        self._initialized = False

        logger.info("dependency_container_created")

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @property
    def storage(self) -> KeyValueStorage:
        if self._storage is None:
            self._storage = JsonFileStorage(self._settings.storage_path)
            logger.info("storage_created", path=str(self._settings.storage_path))
        return self._storage

    @property
    def gateway(self) -> AssistantGateway:
        if self._gateway is None:
            if self._settings.assistant_enabled:
                self._gateway = AnthropicAssistantGateway(
                    api_key=self._settings.anthropic_api_key.get_secret_value(),
                    model=self._settings.assistant_model,
                    max_tokens=self._settings.assistant_max_tokens,
                    web_search=self._settings.assistant_web_search,
                    max_attempts=self._settings.assistant_max_retries,
                )
                logger.info("assistant_gateway_created", model=self._settings.assistant_model)
            else:
                self._gateway = UnconfiguredAssistantGateway()
                logger.warning("assistant_gateway_unconfigured")
        return self._gateway

    @property
    def store(self) -> GeoStore:
        """
        Get the shop directory (lazy initialization).

        Raises:
            InitializationError: If the directory cannot be created.
        """
        if self._store is None:
            try:
                self._store = GeoStore(
                    self.storage,
                    storage_key=self._settings.vendor_storage_key,
                )
            except Exception as e:
                logger.error("geo_store_creation_failed", error=str(e))
                raise InitializationError(
                    "GeoStore",
                    f"Failed to create shop directory: {e}",
                    {"storage_key": self._settings.vendor_storage_key},
                ) from e
        return self._store

    @property
    def cursor(self) -> LocationCursor:
        if self._cursor is None:
            self._cursor = LocationCursor(
                LatLng(lat=self._settings.default_latitude, lng=self._settings.default_longitude)
            )
        return self._cursor

    @property
    def chat(self) -> ChatLog:
        if self._chat is None:
            # The controller is built after the chat log; resolve it per call
            self._chat = ChatLog(
                self.gateway,
                self.cursor,
                context_provider=lambda: self.controller.shop_context(),
            )
        return self._chat

    @property
    def map_adapter(self) -> SnapshotMapAdapter:
        if self._map_adapter is None:
            self._map_adapter = SnapshotMapAdapter()
        return self._map_adapter

    @property
    def controller(self) -> AppController:
        if self._controller is None:
            self._controller = AppController(
                store=self.store,
                cursor=self.cursor,
                chat=self.chat,
                map_adapter=self.map_adapter,
            )
        return self._controller

    async def initialize(self) -> None:
        """
        Build the controller and start its map event consumer.

        Must run inside the application's event loop.
        """
        if self._initialized:
            logger.warning("container_already_initialized")
            return

        logger.info("container_initializing")
        self.controller.start()
        self._initialized = True
        logger.info(
            "container_initialized",
            shops=len(self.store.list_all()),
            assistant=type(self.gateway).__name__,
        )

    async def shutdown(self) -> None:
        """Stop the controller; in-flight assistant replies are cancelled."""
        logger.info("container_shutting_down")

        if self._controller is not None:
            try:
                await self._controller.stop()
            except Exception as e:
                logger.error("controller_stop_error", error=str(e))

        self._initialized = False
        logger.info("container_shutdown_complete")

    @property
    def is_initialized(self) -> bool:
        """Check if container has been initialized."""
        return self._initialized
