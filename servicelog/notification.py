"""Notification messages shown to the user after load and save attempts."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Notification:
    """A titled message. Destructive notifications are rendered as errors."""

    title: str
    description: str
    variant: str = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"

    @property
    def category(self) -> str:
        """Flash category for the web layer."""
        return "error" if self.is_error else "success"

    def as_dict(self):
        return {"title": self.title, "description": self.description}


def success(description: str) -> Notification:
    return Notification("Success", description)


def error(description: str, title: str = "Error") -> Notification:
    return Notification(title, description, variant="destructive")
