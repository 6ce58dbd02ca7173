from __future__ import annotations

import asyncio
import copy
import logging
from typing import Callable, Generic, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from remote_config.config.models import ClientSettings
from remote_config.errors import ConfigServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
A = TypeVar("A")

_TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


class _HandleState(Generic[T]):
    def __init__(
        self,
        *,
        model: Type[T],
        service: str,
        label: str,
        application: str,
        timeout_seconds: Optional[float],
    ) -> None:
        self.model = model
        self.service = service
        self.label = label
        self.application = application
        self.timeout_seconds = timeout_seconds

        self.lock = asyncio.Lock()
        self.current: T = model()
        self.loaded = False


class ConfigHandle(Generic[T]):
    """
    Cached view of one configuration document served by a config service.

    The document is fetched from ``{service}/{application}-{label}.json`` and validated
    into ``model``. Until the first successful ``load`` the handle serves ``model()``.
    Snapshots are swapped whole under a lock, so readers always see one complete
    document. Handles returned by ``clone`` share the same cached document.
    """

    def __init__(
        self,
        model: Type[T],
        *,
        service: str,
        label: str,
        application: str,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._state: _HandleState[T] = _HandleState(
            model=model,
            service=service,
            label=label,
            application=application,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def from_settings(cls, model: Type[T], settings: ClientSettings) -> ConfigHandle[T]:
        return cls(
            model,
            service=settings.service,
            label=settings.label,
            application=settings.application,
            timeout_seconds=settings.timeout_seconds,
        )

    @property
    def service(self) -> str:
        return self._state.service

    @property
    def label(self) -> str:
        return self._state.label

    @property
    def application(self) -> str:
        return self._state.application

    @property
    def endpoint(self) -> str:
        state = self._state
        return f"{state.service}/{state.application}-{state.label}.json"

    @property
    def loaded(self) -> bool:
        """True once any load through this handle or its clones has succeeded."""
        return self._state.loaded

    def clone(self) -> ConfigHandle[T]:
        return copy.copy(self)

    async def load(self) -> None:
        """
        Fetch the document and replace the cached snapshot.

        Raises ConfigServiceError on transport failures, non-2xx responses (the message is
        the response body) and documents that do not validate. The cached snapshot is
        left untouched on any failure.
        """
        state = self._state
        logger.debug("Loading remote configuration. application=%s label=%s", state.application, state.label)

        text = await self._fetch_text()
        try:
            document = state.model.model_validate_json(text)
        except ValidationError as exc:
            raise ConfigServiceError(str(exc)) from exc

        async with state.lock:
            state.current = document
            state.loaded = True
        logger.info(
            "Remote configuration loaded. application=%s label=%s model=%s",
            state.application,
            state.label,
            state.model.__name__,
        )

    async def get(self, projector: Callable[[T], A]) -> A:
        """Apply ``projector`` to the current snapshot and return its result."""
        state = self._state
        async with state.lock:
            current = state.current
        return projector(current)

    async def snapshot(self) -> T:
        return await self.get(lambda document: document)

    async def _fetch_text(self) -> str:
        timeout = aiohttp.ClientTimeout(total=self._state.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.endpoint) as response:
                    text = await response.text(errors="replace")
                    if not 200 <= response.status < 300:
                        raise ConfigServiceError(text)
                    return text
        except _TRANSPORT_ERRORS as exc:
            raise ConfigServiceError(str(exc) or type(exc).__name__) from exc
