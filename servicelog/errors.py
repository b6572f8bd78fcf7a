"""Errors raised by service stores."""

PERMISSION_DENIED = "PERMISSION_DENIED"
UNAVAILABLE = "UNAVAILABLE"


class StoreError(Exception):
    """A store read or write failed. ``code`` is the provider's error code."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message

    @property
    def permission_denied(self) -> bool:
        return self.code == PERMISSION_DENIED
