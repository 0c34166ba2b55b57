"""Identity transitions observed by other contexts."""

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class AnonymousToAuthenticated:
    """An anonymous device session signed in to an account."""

    device_id: str
    user_id: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
