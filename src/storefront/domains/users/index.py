"""In-memory user index."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, field_validator


class User(BaseModel):
    id: str
    email: str
    name: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        text = value.strip()
        local, sep, domain = text.partition("@")
        if not sep or not local or not domain:
            raise ValueError(f"invalid email address: {value!r}")
        return text


DEFAULT_USERS: tuple[User, ...] = (
    User(id="usr_shopper1", email="shopper1@95729.com", name="Shopper One"),
    User(id="usr_shopper2", email="shopper2@95729.com", name="Shopper Two"),
    User(id="usr_shopper3", email="shopper3@95729.com", name="Shopper Three"),
)


def email_key(email: str) -> str:
    return email.strip().lower()


class UserIndex:
    """Read-only lookup of users by email (case-insensitive) and id."""

    __slots__ = ("_by_email", "_by_id")

    def __init__(self, users: Iterable[User]) -> None:
        by_email: dict[str, User] = {}
        by_id: dict[str, User] = {}
        for user in users:
            key = email_key(user.email)
            if key in by_email:
                raise ValueError(f"duplicate user email: {user.email}")
            if user.id in by_id:
                raise ValueError(f"duplicate user id: {user.id}")
            by_email[key] = user
            by_id[user.id] = user
        self._by_email: Mapping[str, User] = MappingProxyType(by_email)
        self._by_id: Mapping[str, User] = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[User]:
        return iter(self._by_id.values())

    def by_email(self, email: str) -> User | None:
        return self._by_email.get(email_key(email))

    def by_id(self, user_id: str) -> User | None:
        return self._by_id.get(user_id)
