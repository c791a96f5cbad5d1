"""Upstream provider descriptors, health state, and provider selection."""

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from thorchain_dashboard.api.errors import ProviderConfigurationError
from thorchain_dashboard.api.request import FetchRequest

DEFAULT_MAX_FAILURES = 3


class Provider(BaseModel):
    """
    One upstream HTTP service offering equivalent data.

    Attributes
    ----------
    name : str
        Unique provider identifier (e.g., 'liquify', 'ninerealms')
    base_url : str
        Base URL that request paths are appended to
    extra_headers : dict[str, str]
        Headers sent with every request to this provider
    nominal_update_interval_ms : int | None
        How often the provider's data refreshes, if known
    supports_height_query : bool
        Whether the provider answers height-pinned historical queries
    priority : int
        Ordering key, lower is preferred

    """

    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
    extra_headers: dict[str, str] = Field(default_factory=dict)
    nominal_update_interval_ms: int | None = None
    supports_height_query: bool = False
    priority: int = 1


class ProviderHealth:
    """
    Consecutive-failure tracking for one provider.

    Parameters
    ----------
    max_failures_before_demotion : int
        Failures after which the provider is tried after healthy ones

    """

    def __init__(self, max_failures_before_demotion: int = DEFAULT_MAX_FAILURES) -> None:
        self.max_failures_before_demotion = max_failures_before_demotion
        self.consecutive_failures = 0
        self.last_error: str | None = None
        self.last_success_at: float | None = None
        self.last_failure_at: float | None = None

    @property
    def is_demoted(self) -> bool:
        return self.consecutive_failures >= self.max_failures_before_demotion

    def record_success(self, at: float | None = None) -> None:
        self.consecutive_failures = 0
        self.last_success_at = at

    def record_failure(self, error: str, at: float | None = None) -> None:
        self.consecutive_failures += 1
        self.last_error = error
        self.last_failure_at = at

    def reset(self) -> None:
        self.consecutive_failures = 0

    def copy(self) -> "ProviderHealth":
        clone = ProviderHealth(self.max_failures_before_demotion)
        clone.consecutive_failures = self.consecutive_failures
        clone.last_error = self.last_error
        clone.last_success_at = self.last_success_at
        clone.last_failure_at = self.last_failure_at
        return clone

    def __repr__(self) -> str:
        return (
            f"ProviderHealth(consecutive_failures={self.consecutive_failures}, "
            f"max_failures_before_demotion={self.max_failures_before_demotion})"
        )


class ProviderRegistry:
    """
    Static, priority-ordered set of providers for one API.

    Providers flagged with ``supports_height_query`` are treated as archives:
    they serve height-pinned requests and are only used for latest-state
    requests when the registry has no other provider.

    Parameters
    ----------
    providers : Iterable[Provider]
        Providers for this API

    Raises
    ------
    ProviderConfigurationError
        If no providers are given or provider names are not unique

    """

    def __init__(self, providers: Iterable[Provider]) -> None:
        ordered = sorted(providers, key=lambda p: p.priority)
        if not ordered:
            msg = "Provider registry requires at least one provider"
            raise ProviderConfigurationError(msg)

        names = [p.name for p in ordered]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            msg = f"Duplicate provider names: {', '.join(duplicates)}"
            raise ProviderConfigurationError(msg)

        self._providers: tuple[Provider, ...] = tuple(ordered)

    @property
    def providers(self) -> tuple[Provider, ...]:
        """All providers ordered by priority."""
        return self._providers

    @property
    def names(self) -> list[str]:
        return [p.name for p in self._providers]

    @property
    def supports_height_queries(self) -> bool:
        return any(p.supports_height_query for p in self._providers)

    def get(self, name: str) -> Provider | None:
        """
        Get a provider by name.

        Parameters
        ----------
        name : str
            Provider name

        Returns
        -------
        Provider | None
            Provider or None if not registered

        """
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def _general_providers(self) -> list[Provider]:
        general = [p for p in self._providers if not p.supports_height_query]
        return general or list(self._providers)

    def select_providers(
        self,
        request: FetchRequest,
        health: Mapping[str, ProviderHealth] | None = None,
    ) -> list[Provider]:
        """
        Order the providers that should be attempted for a request.

        Selection never mutates ``health``; only request outcomes do.

        Parameters
        ----------
        request : FetchRequest
            Request being served
        health : Mapping[str, ProviderHealth] | None
            Current health by provider name

        Returns
        -------
        list[Provider]
            Providers in the order they should be attempted

        Raises
        ------
        ProviderConfigurationError
            If the request is height-pinned and no provider supports it

        """
        if request.target_height is not None:
            archives = [p for p in self._providers if p.supports_height_query]
            if not archives:
                msg = f"No provider supports height queries (requested {request.path} at {request.target_height})"
                raise ProviderConfigurationError(msg)
            return archives

        candidates = self._general_providers()

        if request.prefer_secondary:
            if len(candidates) < 2:
                return candidates
            return [candidates[1], candidates[0], *candidates[2:]]

        health = health or {}
        healthy = [p for p in candidates if not (p.name in health and health[p.name].is_demoted)]
        demoted = [p for p in candidates if p not in healthy]
        return healthy + demoted

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self):
        return iter(self._providers)
