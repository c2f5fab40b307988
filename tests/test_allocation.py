from collections.abc import Callable, Sequence

from realmforge.models.analysis import AllocationResult, Combo
from realmforge.models.card import Card, CardType
from realmforge.services.allocation import (
    DEFAULT_ALLOCATION,
    UTILITY_SHIFT_REASON,
    calculate_card_allocation,
    has_utility_combo,
    is_utility_artifact,
    sort_artifacts_with_utility_priority,
)

CardFactory = Callable[..., Card]


def _combo(name: str) -> Combo:
    return Combo(name=name, cards=[], synergy=10, description="")


def _no_score(_card: Card, _deck: Sequence[Card]) -> float:
    return 0.0


class TestCalculateCardAllocation:
    def test_default_budget(self) -> None:
        """Without combos the default budgets apply and sum to 55."""
        allocation = calculate_card_allocation([])

        assert allocation == DEFAULT_ALLOCATION
        assert allocation.total == 55
        assert allocation.reason is None

    def test_utility_shift(self) -> None:
        """A utility combo among three combos shifts slots to artifacts."""
        combos = [_combo("Cost Reduction Engine"), _combo("Swarm"), _combo("Disable Control")]

        allocation = calculate_card_allocation(combos)

        assert allocation.artifacts == 15
        assert allocation.minions == 21
        assert allocation.magics == 13
        assert allocation.auras == 6
        assert allocation.reason == UTILITY_SHIFT_REASON

    def test_needs_three_combos(self) -> None:
        combos = [_combo("Elemental Core Engine"), _combo("Swarm")]

        assert calculate_card_allocation(combos).artifacts == DEFAULT_ALLOCATION.artifacts

    def test_floors_and_caps(self) -> None:
        """Artifacts cap at 15; minions and magics floor at 20 and 12."""
        base = AllocationResult(minions=21, artifacts=13, auras=0, magics=13)
        combos = [_combo("Utility"), _combo("B"), _combo("C")]

        allocation = calculate_card_allocation(combos, base)

        assert allocation.artifacts == 15
        assert allocation.minions == 20
        assert allocation.magics == 12

    def test_never_negative(self) -> None:
        base = AllocationResult(minions=-1, artifacts=-2, auras=-3, magics=-4)

        allocation = calculate_card_allocation([], base)

        assert min(allocation.minions, allocation.artifacts, allocation.auras) >= 0
        assert allocation.magics >= 0


class TestUtilityArtifacts:
    def test_marker_detection(self) -> None:
        assert has_utility_combo([_combo("Mana/Threshold Acceleration Engine")])
        assert not has_utility_combo([_combo("Swarm Strategy")])

    def test_is_utility_artifact(self, make_card: CardFactory) -> None:
        assert is_utility_artifact(make_card("Ruby Core (Foil)", CardType.ARTIFACT))
        assert not is_utility_artifact(make_card("Iron Shield", CardType.ARTIFACT))

    def test_sort_order(self, make_card: CardFactory) -> None:
        """Utility artifacts, then combo pieces, then the rest; selected ones are skipped."""
        shield = make_card("Iron Shield", CardType.ARTIFACT)
        lock = make_card("Elemental Lock", CardType.ARTIFACT)
        core = make_card("Ruby Core", CardType.ARTIFACT)
        taken = make_card("Onyx Core", CardType.ARTIFACT)

        ordered = sort_artifacts_with_utility_priority(
            [shield, lock, core, taken],
            [taken],
            utility_combo=True,
            combo_pieces={"elemental lock"},
            score=_no_score,
        )

        assert ordered == [core, lock, shield]

    def test_no_utility_priority_outside_utility_decks(self, make_card: CardFactory) -> None:
        lock = make_card("Elemental Lock", CardType.ARTIFACT)
        core = make_card("Ruby Core", CardType.ARTIFACT)

        ordered = sort_artifacts_with_utility_priority(
            [core, lock], [], utility_combo=False, combo_pieces={"elemental lock"}, score=_no_score
        )

        assert ordered == [lock, core]
