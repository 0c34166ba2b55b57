"""Configurable failing remote stores for development and testing.

They behave exactly like the remote adapters until told to fail, which
makes rollback paths reproducible:

    store = FlakyRemoteDraftStore()
    store.configure(should_succeed=False, failure_reason="Network down")
    store.fail_after(2)                  # next two calls succeed, then fail
    store.configure(fail_operations={"put"})   # only writes fail
"""

from ordering.errors import RemoteUnavailable
from ordering.stores.remote_adapter import RemoteDraftStore, RemoteWishlistStore


class _Flaky:
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Remote store unavailable"
        self.fail_operations: set[str] | None = None
        self.calls: list[dict] = []
        self._successes_left: int | None = None

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Remote store unavailable",
        fail_operations: set[str] | None = None,
    ) -> None:
        """Configure store behaviour at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.fail_operations = set(fail_operations) if fail_operations else None
        self._successes_left = None
        if fail_operations:
            self.should_succeed = False

    def fail_after(self, successes: int, failure_reason: str = "Remote store unavailable") -> None:
        """Let the next ``successes`` calls through, then fail every call."""
        self.configure(should_succeed=True, failure_reason=failure_reason)
        self._successes_left = successes

    def _record(self, operation: str, **details) -> None:
        self.calls.append({"method": operation, **details})

        if self._successes_left is not None:
            if self._successes_left > 0:
                self._successes_left -= 1
                return
            raise RemoteUnavailable(self.failure_reason)

        if self.should_succeed:
            return
        if self.fail_operations is None or operation in self.fail_operations:
            raise RemoteUnavailable(self.failure_reason)


class FlakyRemoteDraftStore(_Flaky, RemoteDraftStore):
    def list(self, scope):
        self._record("list", scope=str(scope))
        return super().list(scope)

    def get(self, scope, draft_id):
        self._record("get", scope=str(scope), draft_id=str(draft_id))
        return super().get(scope, draft_id)

    def put(self, scope, draft):
        self._record("put", scope=str(scope), draft_id=str(draft.id))
        super().put(scope, draft)

    def delete(self, scope, draft_id):
        self._record("delete", scope=str(scope), draft_id=str(draft_id))
        super().delete(scope, draft_id)


class FlakyRemoteWishlistStore(_Flaky, RemoteWishlistStore):
    def list(self, scope):
        self._record("list", scope=str(scope))
        return super().list(scope)

    def contains(self, scope, design_id):
        self._record("contains", scope=str(scope), design_id=design_id)
        return super().contains(scope, design_id)

    def add(self, scope, design_id, saved_at=None):
        self._record("add", scope=str(scope), design_id=design_id)
        super().add(scope, design_id, saved_at)

    def remove(self, scope, design_id):
        self._record("remove", scope=str(scope), design_id=design_id)
        super().remove(scope, design_id)
