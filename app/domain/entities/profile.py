"""Domain entities describing users reachable by notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

PROFILE_ROLE_OWNER = "owner"
PROFILE_ROLE_ADMIN = "admin"

COMPANY_ADMIN_ROLES = (PROFILE_ROLE_OWNER, PROFILE_ROLE_ADMIN)


@dataclass
class Profile:
    """User profile as stored by the booking platform."""

    id: str
    name: str
    email: str | None = None
    phone_number: str | None = None
    push_token: str | None = None
    company_id: str | None = None
    role: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Contact:
    """Channel destinations for one user."""

    user_id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    push_token: str | None = None

    def destination_for(self, channel: str) -> str | None:
        return {
            "email": self.email,
            "sms": self.phone,
            "push": self.push_token,
        }.get(channel)


def _default_type_preferences() -> dict[str, dict[str, bool]]:
    return {
        "booking": {"email": True, "sms": False, "push": True},
        "invoice": {"email": True, "sms": False, "push": True},
        "task": {"email": False, "sms": False, "push": True},
        "incident": {"email": True, "sms": True, "push": True},
        "system": {"email": True, "sms": False, "push": True},
    }


@dataclass
class NotificationPreference:
    """Per-user channel switches; defaults apply when nothing is stored."""

    user_id: str
    email_enabled: bool = True
    sms_enabled: bool = False
    push_enabled: bool = True
    type_preferences: dict[str, Any] = field(default_factory=_default_type_preferences)
    email_address: str | None = None
    phone_number: str | None = None

    def allows(self, channel: str, notification_type: str) -> bool:
        """Return whether ``channel`` is enabled for ``notification_type``."""

        if not getattr(self, f"{channel}_enabled", False):
            return False
        by_type = (self.type_preferences or {}).get(notification_type)
        if isinstance(by_type, dict) and by_type.get(channel) is False:
            return False
        return True

    def enabled_channels(self, requested: list[str], notification_type: str) -> list[str]:
        return [channel for channel in requested if self.allows(channel, notification_type)]


__all__ = [
    "COMPANY_ADMIN_ROLES",
    "PROFILE_ROLE_ADMIN",
    "PROFILE_ROLE_OWNER",
    "Contact",
    "NotificationPreference",
    "Profile",
]
