"""Error types raised by the failover fetch layer."""


class FetchError(Exception):
    """Base class for fetch layer errors."""


class ProviderConfigurationError(ValueError):
    """Raised when a provider registry cannot serve a request or is misconfigured."""


class ProviderError(FetchError):
    """
    A single provider failed to answer a request.

    Parameters
    ----------
    provider : str
        Name of the provider that failed
    path : str
        Request path
    message : str
        Human readable failure description

    """

    def __init__(self, provider: str, path: str, message: str) -> None:
        super().__init__(f"{provider}{path}: {message}")
        self.provider = provider
        self.path = path
        self.message = message


class ProviderTransportError(ProviderError):
    """Network failure or timeout reaching a provider."""


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(self, provider: str, path: str, status_code: int, reason: str = "") -> None:
        message = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        super().__init__(provider, path, message)
        self.status_code = status_code


class ProviderParseError(ProviderError):
    """Provider answered 2xx but the body could not be parsed."""


class AllProvidersFailedError(FetchError):
    """
    Every selected provider failed for a request.

    Parameters
    ----------
    path : str
        Request path
    errors : list[ProviderError]
        Per-provider failures in the order they were attempted

    """

    def __init__(self, path: str, errors: list[ProviderError]) -> None:
        self.path = path
        self.errors = list(errors)
        last = self.last_error.message if self.last_error else "no providers attempted"
        super().__init__(f"All providers failed for {path}: {last}")

    @property
    def last_error(self) -> ProviderError | None:
        """Return the failure of the last provider attempted."""
        return self.errors[-1] if self.errors else None


class PricingError(Exception):
    """Exception raised for spot-price API errors."""
