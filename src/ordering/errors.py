"""Error taxonomy for bag, wishlist and migration operations.

Validation failures reuse Protean's ``ValidationError`` (field -> messages)
so forms can show them next to the offending selection. Storage failures are
plain exceptions carrying the underlying cause.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class InvalidQuantity(ValidationError):
    """Quantity must be a whole number of at least 1."""

    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__({"quantity": [f"Quantity must be a whole number of at least 1, got {quantity!r}"]})


class DraftSubmitted(ValidationError):
    """A submitted draft belongs to an order and can no longer change."""

    def __init__(self, draft_id):
        self.draft_id = draft_id
        super().__init__({"status": [f"Draft {draft_id} has been submitted and cannot be changed"]})


class DraftNotFound(ObjectNotFoundError):
    def __init__(self, draft_id, scope=None):
        self.draft_id = draft_id
        self.scope = scope
        super().__init__(f"Draft {draft_id} does not exist in {scope or 'the current scope'}")


class PersistenceError(Exception):
    """Device storage rejected a write or holds unreadable data."""

    def __init__(self, message, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class StorageQuotaExceeded(PersistenceError):
    def __init__(self, key: str, required: int, quota: int):
        super().__init__(f"Storing {key!r} needs {required} bytes, quota is {quota}")
        self.key = key
        self.required = required
        self.quota = quota


class DraftIdTaken(Exception):
    """The draft id is already used by a record in another owner's scope."""

    def __init__(self, draft_id):
        super().__init__(f"Draft {draft_id} is owned by another account")
        self.draft_id = draft_id


class RemoteUnavailable(Exception):
    """The remote document store could not complete the request."""

    def __init__(self, message, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class MigrationConflict(Exception):
    """An anonymous draft already exists in the user's scope.

    Migration resolves this by skipping the copy; the conflict is reported
    in the migration result rather than raised.
    """

    def __init__(self, draft_id, existing_id, reason: str):
        super().__init__(f"Draft {draft_id} conflicts with {existing_id}: {reason}")
        self.draft_id = draft_id
        self.existing_id = existing_id
        self.reason = reason


class AuthenticationRequired(Exception):
    def __init__(self, action: str):
        super().__init__(f"Sign in to {action}")
        self.action = action


class PaymentDeclined(Exception):
    def __init__(self, reason: str):
        super().__init__(f"Payment declined: {reason}")
        self.reason = reason
