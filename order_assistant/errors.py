# order_assistant/errors.py
from __future__ import annotations


class OrderAssistantError(Exception):
    """Base for failures that stop a request before a reply can be produced.

    The HTTP layer renders these as ``{"error": message}`` with ``status_code``.
    """

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class RequestValidationFailed(OrderAssistantError):
    status_code = 400


class AuthorizationFailed(OrderAssistantError):
    status_code = 401


class CatalogFetchError(OrderAssistantError):
    status_code = 500


class HistoryFetchError(OrderAssistantError):
    """Order history could not be read. Logged by the context builder, never surfaced."""
