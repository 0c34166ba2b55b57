import pytest
from ordering.draft.draft import DraftStatus
from ordering.errors import DraftNotFound, DraftSubmitted


@pytest.fixture()
def reconciler(session):
    return session.reconciler


@pytest.fixture()
def two_drafts(reconciler, cloth_selections, stitched_selections):
    first = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
    second = reconciler.add_draft("EmbroideryStitching", "rose-vine", stitched_selections, quantity=2)
    return first, second


def test_submitted_drafts_leave_the_bag(reconciler, two_drafts, guest_scope):
    first, second = two_drafts

    reconciler.mark_submitted([first.id, second.id], "order-1")

    assert reconciler.list_drafts() == []
    assert reconciler.bag_count == 0
    stored = reconciler.local_store.get(guest_scope, first.id)
    assert stored.status == DraftStatus.SUBMITTED.value
    assert stored.order_id == "order-1"


def test_resubmitting_to_the_same_order_is_a_no_op(reconciler, two_drafts):
    first, second = two_drafts
    reconciler.mark_submitted([first.id, second.id], "order-1")

    reconciler.mark_submitted([first.id, second.id], "order-1")


def test_submitting_to_another_order_is_rejected(reconciler, two_drafts):
    first, _ = two_drafts
    reconciler.mark_submitted([first.id], "order-1")

    with pytest.raises(DraftSubmitted):
        reconciler.mark_submitted([first.id], "order-2")


def test_unknown_id_aborts_before_any_write(reconciler, two_drafts, guest_scope):
    first, _ = two_drafts

    with pytest.raises(DraftNotFound):
        reconciler.mark_submitted([first.id, "missing"], "order-1")

    assert not reconciler.local_store.get(guest_scope, first.id).is_submitted


class TestSubmittedDraftsAreFrozen:
    def test_quantity(self, reconciler, two_drafts):
        first, _ = two_drafts
        reconciler.mark_submitted([first.id], "order-1")

        with pytest.raises(DraftSubmitted):
            reconciler.update_quantity(first.id, 5)

    def test_selections(self, reconciler, two_drafts):
        first, _ = two_drafts
        reconciler.mark_submitted([first.id], "order-1")

        with pytest.raises(DraftSubmitted):
            reconciler.update_selections(first.id, {"fabric_id": "cotton"})

    def test_remove(self, reconciler, two_drafts, guest_scope):
        first, _ = two_drafts
        reconciler.mark_submitted([first.id], "order-1")

        with pytest.raises(DraftSubmitted):
            reconciler.remove_draft(first.id)
        assert reconciler.local_store.get(guest_scope, first.id).is_submitted
