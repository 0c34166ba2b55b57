"""Who is shopping: an anonymous device or an authenticated account."""

from dataclasses import dataclass
from enum import Enum


class OwnerKind(Enum):
    ANONYMOUS = "anonymous"
    USER = "user"


@dataclass(frozen=True)
class OwnerScope:
    """Ownership boundary for drafts and wishlist entries."""

    kind: OwnerKind
    owner_id: str

    @classmethod
    def anonymous(cls, device_id: str) -> "OwnerScope":
        return cls(OwnerKind.ANONYMOUS, str(device_id))

    @classmethod
    def user(cls, user_id: str) -> "OwnerScope":
        return cls(OwnerKind.USER, str(user_id))

    @property
    def is_anonymous(self) -> bool:
        return self.kind == OwnerKind.ANONYMOUS

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.owner_id}"


@dataclass(frozen=True)
class Anonymous:
    device_id: str

    @property
    def scope(self) -> OwnerScope:
        return OwnerScope.anonymous(self.device_id)

    @property
    def is_authenticated(self) -> bool:
        return False


@dataclass(frozen=True)
class Authenticated:
    user_id: str

    @property
    def scope(self) -> OwnerScope:
        return OwnerScope.user(self.user_id)

    @property
    def is_authenticated(self) -> bool:
        return True


Actor = Anonymous | Authenticated
