"""Identity resolution for shoppers: anonymous devices and signed-in accounts."""

from identity.actor import Actor, Anonymous, Authenticated, OwnerKind, OwnerScope
from identity.events import AnonymousToAuthenticated
from identity.resolver import IdentityResolver, MigrationLedger

__all__ = [
    "Actor",
    "Anonymous",
    "AnonymousToAuthenticated",
    "Authenticated",
    "IdentityResolver",
    "MigrationLedger",
    "OwnerKind",
    "OwnerScope",
]
