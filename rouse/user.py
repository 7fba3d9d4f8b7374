"""Users, their contact details and teams."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rouse.errors import InvalidPhoneFormat, TeamRequiresMember
from rouse.ids import TeamId, UserId

_DIGITS = frozenset("0123456789")


class Role(Enum):
    """What a user may do."""

    ADMIN = "Admin"
    USER = "User"
    VIEWER = "Viewer"


@dataclass(frozen=True)
class Phone:
    """A phone number in E.164 form: '+' then digits, 8 to 16 characters in all."""

    number: str

    def __post_init__(self) -> None:
        if not self._is_valid_e164(self.number):
            raise InvalidPhoneFormat()

    @staticmethod
    def _is_valid_e164(number: str) -> bool:
        if not 8 <= len(number.encode("utf-8")) <= 16:
            return False
        return number.startswith("+") and all(ch in _DIGITS for ch in number[1:])

    def __str__(self) -> str:
        return self.number


@dataclass
class User:
    """A person who can be notified."""

    username: str
    email: str
    role: Role
    id: UserId = field(default_factory=UserId.new)
    slack_id: str | None = None
    discord_id: str | None = None
    telegram_id: str | None = None
    whatsapp_id: str | None = None
    phone: Phone | None = None

    def can_be_on_call(self) -> bool:
        """Whether the user has at least one way of being reached."""
        return any(
            contact is not None
            for contact in (
                self.phone,
                self.slack_id,
                self.discord_id,
                self.telegram_id,
                self.whatsapp_id,
            )
        )


@dataclass
class Team:
    """A named set of users."""

    name: str
    members: list[UserId]
    id: TeamId = field(default_factory=TeamId.new)

    def __post_init__(self) -> None:
        self.members = list(self.members)
        if not self.members:
            raise TeamRequiresMember()