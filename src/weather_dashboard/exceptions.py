"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class ProviderError(Exception):
    """Raised when an upstream provider request or normalization fails."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class LocationProviderError(ProviderError):
    """Raised inside location providers; never escapes `LocationProvider.search`."""


class WeatherProviderError(ProviderError):
    """Raised when forecast requests or snapshot normalization fail."""


class CryptoError(Exception):
    """Raised when key material is malformed."""
