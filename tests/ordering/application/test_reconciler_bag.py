"""Tests for DraftReconciler bag operations in a guest session."""

from decimal import Decimal

import pytest
from catalogue.port import CatalogEntryNotFound
from ordering.draft.draft import DraftStatus
from ordering.errors import DraftNotFound, InvalidQuantity
from ordering.shared.money import Money
from ordering.stores.local_adapter import BAG_KEY
from protean.exceptions import ValidationError


@pytest.fixture()
def reconciler(session):
    return session.reconciler


class TestAddDraft:
    def test_add_prices_and_persists(self, reconciler, cloth_selections, guest_scope):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)

        assert draft.estimated_price == Money.of(2325).paise
        assert draft.status == DraftStatus.DRAFT.value
        stored = reconciler.local_store.get(guest_scope, draft.id)
        assert stored.estimated_price == draft.estimated_price

    def test_incomplete_selections_are_rejected_before_any_write(self, session, reconciler):
        with pytest.raises(ValidationError) as exc:
            reconciler.add_draft("EmbroideryStitching", "rose-vine", {"fabric_id": "cotton", "color_id": "red"})

        assert "garment_id" in exc.value.messages
        assert session.storage.get_item(BAG_KEY) is None
        assert reconciler.bag_count == 0

    def test_unknown_design_is_rejected(self, reconciler, cloth_selections):
        with pytest.raises(ValidationError) as exc:
            reconciler.add_draft("ClothOnly", "no-such-design", cloth_selections)
        assert "design_id" in exc.value.messages

    def test_unknown_service_type_is_rejected(self, reconciler, cloth_selections):
        with pytest.raises(ValidationError) as exc:
            reconciler.add_draft("Tailoring", "rose-vine", cloth_selections)
        assert "service_type" in exc.value.messages

    def test_invalid_quantity_is_rejected(self, reconciler, cloth_selections):
        with pytest.raises(InvalidQuantity):
            reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections, quantity=0)


class TestListDrafts:
    def test_drafts_are_freshly_priced(self, reconciler, stitched_selections):
        reconciler.add_draft("EmbroideryStitching", "rose-vine", stitched_selections)

        [priced] = reconciler.list_drafts()
        assert priced.unit_price == Money.of(5000)

    def test_stale_cached_price_is_never_shown(self, reconciler, cloth_selections, guest_scope):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        stored = reconciler.local_store.get(guest_scope, draft.id)
        stored.reprice(1)
        reconciler.local_store.put(guest_scope, stored)

        [priced] = reconciler.list_drafts()
        assert priced.unit_price == Money.of(2325)

    def test_catalog_price_changes_show_up(self, catalog, reconciler, cloth_selections):
        reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        catalog.add_fabric("silk", "Silk", 500)

        [priced] = reconciler.list_drafts()
        assert priced.unit_price == Money.of(2450)

    def test_newest_first(self, reconciler, cloth_selections, stitched_selections):
        first = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        second = reconciler.add_draft("EmbroideryStitching", "rose-vine", stitched_selections)

        assert [p.id for p in reconciler.list_drafts()] == [str(second.id), str(first.id)]

    def test_store_is_the_source_of_truth(self, reconciler, cloth_selections, guest_scope):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        reconciler.local_store.delete(guest_scope, draft.id)  # another tab removed it

        assert reconciler.list_drafts() == []
        assert reconciler.bag_count == 0

    def test_line_total_multiplies_by_quantity(self, reconciler, cloth_selections):
        reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections, quantity=2)

        [priced] = reconciler.list_drafts()
        assert priced.line_total == Money.of(4650)

    def test_missing_catalog_entry_surfaces(self, catalog, reconciler, cloth_selections):
        reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        del catalog.fabrics["silk"]

        with pytest.raises(CatalogEntryNotFound):
            reconciler.list_drafts()


class TestUpdateSelections:
    def test_editing_length_reprices_in_full(self, reconciler, cloth_selections):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)

        updated = reconciler.update_selections(draft.id, {"length_m": Decimal("4")})

        assert updated.estimated_price == Money.of(3000).paise
        [priced] = reconciler.list_drafts()
        assert priced.unit_price == Money.of(3000)
        assert priced.draft.estimated_price == Money.of(3000).paise

    def test_switching_fabric_never_keeps_the_old_total(self, reconciler, cloth_selections):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)

        updated = reconciler.update_selections(draft.id, {"fabric_id": "cotton"})
        assert updated.estimated_price == Money.of(2450).paise

    def test_invalid_edit_leaves_draft_unchanged(self, reconciler, cloth_selections, guest_scope):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)

        with pytest.raises(ValidationError):
            reconciler.update_selections(draft.id, {"length_m": Decimal("0")})

        stored = reconciler.local_store.get(guest_scope, draft.id)
        assert stored.length_m == 2.5
        assert stored.estimated_price == Money.of(2325).paise

    def test_missing_draft(self, reconciler):
        with pytest.raises(DraftNotFound):
            reconciler.update_selections("missing", {"length_m": Decimal("4")})


class TestUpdateQuantity:
    def test_update_quantity(self, reconciler, cloth_selections):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        reconciler.update_quantity(draft.id, 3)

        assert reconciler.bag_count == 3

    def test_same_quantity_twice_is_idempotent(self, session, reconciler, cloth_selections):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        reconciler.update_quantity(draft.id, 2)
        after_first = session.storage.get_item(BAG_KEY)

        reconciler.update_quantity(draft.id, 2)
        assert session.storage.get_item(BAG_KEY) == after_first

    @pytest.mark.parametrize("quantity", [0, -2, 1.5])
    def test_invalid_quantity(self, reconciler, cloth_selections, quantity):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)

        with pytest.raises(InvalidQuantity):
            reconciler.update_quantity(draft.id, quantity)
        assert reconciler.bag_count == 1

    def test_missing_draft(self, reconciler):
        with pytest.raises(DraftNotFound):
            reconciler.update_quantity("missing", 2)


class TestRemoveDraft:
    def test_remove_twice_is_harmless(self, reconciler, cloth_selections):
        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)

        reconciler.remove_draft(draft.id)
        reconciler.remove_draft(draft.id)

        assert reconciler.list_drafts() == []

    def test_removing_unknown_id_is_a_no_op(self, reconciler):
        reconciler.remove_draft("never-existed")


class TestBagCount:
    def test_count_is_sum_of_quantities(self, reconciler, cloth_selections, stitched_selections):
        reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections, quantity=2)
        reconciler.add_draft("EmbroideryStitching", "rose-vine", stitched_selections)

        assert reconciler.bag_count == 3

    def test_subscribers_see_every_settled_mutation(self, reconciler, cloth_selections):
        counts = []
        reconciler.subscribe(counts.append)

        draft = reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        reconciler.update_quantity(draft.id, 3)
        reconciler.remove_draft(draft.id)

        assert counts == [1, 3, 0]

    def test_unsubscribe(self, reconciler, cloth_selections):
        counts = []
        unsubscribe = reconciler.subscribe(counts.append)
        unsubscribe()

        reconciler.add_draft("ClothOnly", "rose-vine", cloth_selections)
        assert counts == []
