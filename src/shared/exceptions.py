"""Storefront exception types.

``ValidationError`` mirrors the field -> messages shape used across the
codebase so route handlers can render it without reformatting.
"""


class StorefrontError(Exception):
    """Base class for storefront errors."""


class ValidationError(StorefrontError):
    """A client-side precondition failed; no network call was made."""

    def __init__(self, messages: dict[str, list[str]]) -> None:
        self.messages = messages
        super().__init__(messages)

    @property
    def first_message(self) -> str:
        for errors in self.messages.values():
            if errors:
                return errors[0]
        return "Invalid input"

