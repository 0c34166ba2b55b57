import pytest
from identity.actor import Anonymous, Authenticated
from identity.resolver import IdentityResolver


class FakeLedger:
    def __init__(self):
        self.complete: set[tuple[str, str]] = set()

    def is_complete(self, device_id, user_id):
        return (device_id, user_id) in self.complete


@pytest.fixture()
def ledger():
    return FakeLedger()


@pytest.fixture()
def resolver(ledger):
    return IdentityResolver("device-1", ledger)


@pytest.fixture()
def events(resolver):
    received = []
    resolver.subscribe(received.append)
    return received


def test_sessions_start_anonymous(resolver):
    assert resolver.current == Anonymous("device-1")


def test_sign_in_announces_the_transition(resolver, events):
    actor = resolver.sign_in("user-1")

    assert actor == Authenticated("user-1")
    [event] = events
    assert (event.device_id, event.user_id) == ("device-1", "user-1")
    assert event.occurred_at is not None


def test_sign_in_announces_once_per_session(resolver, events):
    resolver.sign_in("user-1")
    resolver.sign_out()
    resolver.sign_in("user-1")

    assert len(events) == 1


def test_token_refresh_does_not_announce(resolver, events):
    resolver.sign_in("user-1")
    events.clear()

    assert resolver.refresh() == Authenticated("user-1")
    assert events == []


def test_completed_ledger_suppresses_the_announcement(resolver, ledger, events):
    ledger.complete.add(("device-1", "user-1"))

    resolver.sign_in("user-1")

    assert events == []


def test_signing_in_while_authenticated_does_not_announce(resolver, events):
    resolver.sign_in("user-1")
    resolver.sign_in("user-2")

    assert len(events) == 1
    assert resolver.current == Authenticated("user-2")


def test_restore_reannounces_while_migration_is_pending(resolver, ledger, events):
    resolver.sign_in("user-1")
    resolver.restore("user-1")

    assert len(events) == 2

    ledger.complete.add(("device-1", "user-1"))
    resolver.restore("user-1")
    assert len(events) == 2


def test_sign_out_returns_to_the_device_scope(resolver):
    resolver.sign_in("user-1")

    assert resolver.sign_out() == Anonymous("device-1")


def test_unsubscribe(resolver):
    received = []
    unsubscribe = resolver.subscribe(received.append)
    unsubscribe()

    resolver.sign_in("user-1")
    assert received == []


class UnreachableLedger(FakeLedger):
    """Fails the next ``failures`` reads, then answers normally."""

    def __init__(self, failures=1):
        super().__init__()
        self.failures = failures

    def is_complete(self, device_id, user_id):
        if self.failures:
            self.failures -= 1
            raise ConnectionError("ledger unreachable")
        return super().is_complete(device_id, user_id)


def test_failed_ledger_read_keeps_the_session_anonymous():
    resolver = IdentityResolver("device-1", UnreachableLedger())
    events = []
    resolver.subscribe(events.append)

    with pytest.raises(ConnectionError):
        resolver.sign_in("user-1")

    assert resolver.current == Anonymous("device-1")
    assert events == []


def test_sign_in_retried_after_ledger_failure_announces():
    resolver = IdentityResolver("device-1", UnreachableLedger())
    events = []
    resolver.subscribe(events.append)

    with pytest.raises(ConnectionError):
        resolver.sign_in("user-1")
    resolver.sign_in("user-1")

    assert resolver.current == Authenticated("user-1")
    assert [(e.device_id, e.user_id) for e in events] == [("device-1", "user-1")]


def test_failed_restore_keeps_the_previous_actor():
    resolver = IdentityResolver("device-1", UnreachableLedger())

    with pytest.raises(ConnectionError):
        resolver.restore("user-1")

    assert resolver.current == Anonymous("device-1")
