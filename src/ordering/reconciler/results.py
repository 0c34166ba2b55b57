"""Values returned by reconciler reads and migrations."""

from dataclasses import dataclass, field

from ordering.draft.draft import Draft
from ordering.errors import MigrationConflict
from ordering.pricing.engine import PriceBreakdown
from ordering.shared.money import Money


@dataclass(frozen=True)
class PricedDraft:
    """A bag line with a freshly computed unit price."""

    draft: Draft
    breakdown: PriceBreakdown

    @property
    def id(self) -> str:
        return str(self.draft.id)

    @property
    def quantity(self) -> int:
        return self.draft.quantity

    @property
    def unit_price(self) -> Money:
        return self.breakdown.total

    @property
    def line_total(self) -> Money:
        return self.breakdown.total.times(self.draft.quantity)


@dataclass
class MigrationResult:
    device_id: str
    user_id: str
    already_complete: bool = False
    migrated: list[str] = field(default_factory=list)
    conflicts: list[MigrationConflict] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> list[str]:
        return [conflict.draft_id for conflict in self.conflicts]
