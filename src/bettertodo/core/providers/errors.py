from __future__ import annotations


class ProviderError(RuntimeError):
    """Base error for provider resolution and provider calls."""


class NoApiKeyAvailable(ProviderError):
    pass


class ProviderRequestFailed(ProviderError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoTextResponse(ProviderError):
    pass
