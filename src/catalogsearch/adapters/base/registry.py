"""Transport registry — Backend names to live transports.

``Settings.engine.backend`` names a transport; the registry turns that name
plus the engine settings into an initialized ``SearchTransport`` and owns it
until ``shutdown_all``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from catalogsearch.adapters.base.transport import SearchTransport, TransportHealth
from catalogsearch.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

TransportFactory = Callable[..., SearchTransport]


class TransportNotFoundError(ConfigurationError):
    """No transport is registered under the configured backend name."""


class TransportRegistry:
    """Backend name → transport factory, plus the transports opened through it.

    Example:
        >>> registry = TransportRegistry.with_builtin_transports()
        >>> transport = await registry.initialize_transport("elasticsearch", **settings.engine.transport_kwargs())
        >>> await registry.shutdown_all()
    """

    def __init__(self) -> None:
        self._factories: dict[str, TransportFactory] = {}
        self._live: dict[str, SearchTransport] = {}

    @classmethod
    def with_builtin_transports(cls) -> TransportRegistry:
        """Registry knowing ``elasticsearch`` and ``opensearch``.

        ``opensearch`` needs the ``opensearch`` extra; without it the
        transport raises ``ConfigurationError`` on initialize.
        """
        from catalogsearch.adapters.elasticsearch.transport import ElasticsearchTransport
        from catalogsearch.adapters.opensearch.transport import OpenSearchTransport

        registry = cls()
        registry.register("elasticsearch", ElasticsearchTransport)
        registry.register("opensearch", OpenSearchTransport)
        return registry

    def register(self, backend: str, factory: TransportFactory) -> None:
        if backend in self._factories:
            logger.warning("Replacing transport factory for backend '%s'", backend)
        self._factories[backend] = factory

    async def initialize_transport(self, backend: str, **kwargs: Any) -> SearchTransport:
        """Build the transport for *backend* from *kwargs* and connect it.

        A transport that fails to initialize is not kept. Initializing a
        backend that is already live closes the previous instance first.

        Raises:
            TransportNotFoundError: If *backend* was never registered.
        """
        factory = self._factories.get(backend)
        if factory is None:
            raise TransportNotFoundError(
                f"Unknown search backend '{backend}'; registered: {sorted(self._factories)}"
            )

        previous = self._live.pop(backend, None)
        if previous is not None:
            await self._close(backend, previous)

        transport = factory(**kwargs)
        await transport.initialize()
        self._live[backend] = transport
        logger.info("Opened %s transport", backend)
        return transport

    async def health_check_all(self) -> dict[str, TransportHealth]:
        """Health of every live transport; a raising check reads as unhealthy."""
        names = list(self._live)
        checks = await asyncio.gather(
            *(self._live[name].health_check() for name in names),
            return_exceptions=True,
        )
        results: dict[str, TransportHealth] = {}
        for name, check in zip(names, checks):
            if isinstance(check, TransportHealth):
                results[name] = check
            else:
                results[name] = TransportHealth(status="unhealthy", message=str(check))
        return results

    async def shutdown_all(self) -> None:
        live, self._live = self._live, {}
        for backend, transport in live.items():
            await self._close(backend, transport)

    async def _close(self, backend: str, transport: SearchTransport) -> None:
        try:
            await transport.shutdown()
        except Exception:
            logger.warning("Closing %s transport failed", backend, exc_info=True)
        else:
            logger.info("Closed %s transport", backend)

    @property
    def registered_transports(self) -> list[str]:
        return list(self._factories)

    @property
    def active_transports(self) -> list[str]:
        return list(self._live)
