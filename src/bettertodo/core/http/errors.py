from __future__ import annotations


class BetterTodoHTTPError(RuntimeError):
    """Raised by the outbound HTTP layer used for provider calls."""


class BetterTodoHTTPStatusError(BetterTodoHTTPError):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.attempts = attempts

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500 and self.status_code != 429


class BetterTodoHTTPNetworkError(BetterTodoHTTPError):
    def __init__(self, message: str, attempts: int = 1) -> None:
        super().__init__(message)
        self.attempts = attempts
