# storefront/domain/owner.py
from dataclasses import dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class User:
    """Zalogowany uzytkownik jako wlasciciel koszyka."""

    id: str
    kind: ClassVar[str] = "user"

    @property
    def key(self) -> str:
        return self.id


@dataclass(frozen=True)
class Guest:
    """Anonimowa sesja goscia (cookie / naglowek X-Session-Id)."""

    session_id: str
    kind: ClassVar[str] = "guest"

    @property
    def key(self) -> str:
        return self.session_id


CartOwner = Union[User, Guest]


def describe(owner: CartOwner) -> str:
    return f"{owner.kind}:{owner.key}"
