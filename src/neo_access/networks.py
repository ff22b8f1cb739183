"""
NetworkRegistry: one NeoService per enabled network.

Each service gets its own cache and rate limiter built from Settings, so
traffic on one network never touches the other's state.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Union

from neo_access.accounts import AccountBackend
from neo_access.config import Network, NetworkMode, Settings, load_settings
from neo_access.errors import ValidationError
from neo_access.services.neo_service import NeoService
from neo_access.utils.cache import TTLCache
from neo_access.utils.logging import get_logger, set_level
from neo_access.utils.rate_limiter import RateLimiter
from neo_access.utils.retry import RetryConfig
from neo_access.utils.validation import validate_network

_logger = get_logger(__name__)


class NetworkRegistry:
    """
    Selects the service for a network.

    Example:
        ```python
        registry = NetworkRegistry.from_settings()
        service = registry.service_for()            # default network
        testnet = registry.service_for("testnet")
        ```
    """

    def __init__(
        self,
        services: Mapping[Network, NeoService],
        mode: NetworkMode = NetworkMode.BOTH,
    ) -> None:
        if not services:
            raise ValidationError("At least one network service is required")
        self._services: Dict[Network, NeoService] = dict(services)
        self._mode = mode

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        account_backend: Optional[AccountBackend] = None,
    ) -> "NetworkRegistry":
        """Build a service for every network the settings enable."""
        settings = settings or load_settings()
        set_level(settings.log_level)

        services: Dict[Network, NeoService] = {}
        for network in settings.network_mode.enabled_networks:
            services[network] = NeoService(
                settings.rpc_url_for(network),
                network,
                cache=TTLCache(f"neo:{network.value}", ttl_ms=settings.cache_ttl_ms),
                rate_limiter=RateLimiter(
                    max_requests=settings.max_requests_per_minute,
                    window_ms=60_000,
                    enabled=settings.rate_limiting_enabled,
                ),
                retry_config=RetryConfig(max_attempts=settings.rpc_max_attempts),
                account_backend=account_backend,
                timeout=settings.rpc_timeout_seconds,
            )

        _logger.info(
            "Network registry initialized",
            extra={
                "mode": settings.network_mode.value,
                "networks": [n.value for n in services],
            },
        )
        return cls(services, settings.network_mode)

    @property
    def mode(self) -> NetworkMode:
        return self._mode

    @property
    def networks(self) -> list:
        return list(self._services)

    def resolve(self, network: Optional[Union[Network, str]] = None) -> Network:
        """
        Pick the network for a call.

        Defaults to mainnet unless the mode is testnet-only.

        Raises:
            ValidationError: If the network is unknown or not enabled
        """
        if network is None or network == "":
            return self._mode.default_network

        selected = validate_network(network)
        if selected not in self._services:
            raise ValidationError(
                f"Network {selected.value} is not enabled (mode: {self._mode.value})",
                code="NETWORK_DISABLED",
                details={"network": selected.value, "mode": self._mode.value},
            )
        return selected

    def service_for(self, network: Optional[Union[Network, str]] = None) -> NeoService:
        return self._services[self.resolve(network)]

    async def aclose(self) -> None:
        for service in self._services.values():
            await service.aclose()
