"""Tests for combo detection and combo synergy."""

from collections.abc import Callable

from realmforge.analysis.combos import (
    COMBO_RULES,
    CardMatcher,
    KeywordComboRule,
    NamedComboRule,
    PairedComboRule,
    calculate_combo_contribution,
    calculate_combo_synergy,
    identify_card_combos,
    is_combo_piece,
)
from realmforge.models.card import Card, CardType, Element

CardFactory = Callable[..., Card]


class TestCatalog:
    def test_rule_names_unique(self) -> None:
        """Each catalog entry is reported under its own name."""
        names = [rule.name for rule in COMBO_RULES]
        assert len(names) == len(set(names))

    def test_single_underground_network_rule(self) -> None:
        """Both tunnel piece lists are covered by one rule."""
        rules = [rule for rule in COMBO_RULES if rule.name == "Underground Network"]

        assert len(rules) == 1
        assert isinstance(rules[0], NamedComboRule)
        assert "Secret Tunnel" in rules[0].pieces
        assert "Tunnel System" in rules[0].pieces


class TestIdentifyCardCombos:
    def test_named_combo(self, make_card: CardFactory) -> None:
        """Two Elemental Lock pieces form the engine."""
        cards = [
            make_card("Elemental Lock", CardType.ARTIFACT),
            make_card("Mana Drain", CardType.MAGIC),
            make_card("Imp"),
        ]

        combos = identify_card_combos(cards)
        lock = next(combo for combo in combos if combo.name == "Elemental Lock Engine")

        assert lock.cards == ["Elemental Lock", "Mana Drain"]
        assert lock.synergy == 30

    def test_named_combo_below_threshold(self, make_card: CardFactory) -> None:
        combos = identify_card_combos([make_card("Elemental Lock", CardType.ARTIFACT)])

        assert all(combo.name != "Elemental Lock Engine" for combo in combos)

    def test_name_match_ignores_case_and_printing(self, make_card: CardFactory) -> None:
        """Pieces are found by base name, whatever the printing suffix."""
        cards = [
            make_card("elemental lock (Foil)", CardType.ARTIFACT),
            make_card("MANA DRAIN", CardType.MAGIC),
        ]

        names = [combo.name for combo in identify_card_combos(cards)]

        assert "Elemental Lock Engine" in names

    def test_duplicates_count_once(self, make_card: CardFactory) -> None:
        """Extra copies do not inflate keyword combos."""
        hexer = make_card("Hexer", text="Curse target minion.")
        cards = [hexer, hexer, hexer]

        assert all(combo.name != "Curse Affliction" for combo in identify_card_combos(cards))

    def test_order_independent(self, make_card: CardFactory) -> None:
        """The same cards in any order give the same combos."""
        cards = [
            make_card("Elemental Lock", CardType.ARTIFACT),
            make_card("Mana Drain", CardType.MAGIC),
            make_card("Sleeper", text="Target minion is disabled."),
            make_card("Dozer", text="Put a minion to sleep."),
            make_card("Hexer", text="Curse target minion."),
            make_card("Witch", text="Hex an enemy."),
        ]

        forward = identify_card_combos(cards)
        backward = identify_card_combos(list(reversed(cards)))

        assert forward == backward
        assert {combo.name for combo in forward} >= {
            "Elemental Lock Engine",
            "Disable Control",
            "Curse Affliction",
        }

    def test_paired_rule_needs_both_groups(self, make_card: CardFactory) -> None:
        """Auras alone do not make the control matrix; a dispel completes it."""
        auras = [make_card(f"Ward {i}", CardType.AURA) for i in range(3)]

        without = identify_card_combos(auras)
        with_dispel = identify_card_combos([*auras, make_card("Cleanse", text="Dispel an aura.")])

        assert all(combo.name != "Aura Control Matrix" for combo in without)
        matrix = next(combo for combo in with_dispel if combo.name == "Aura Control Matrix")
        assert len(matrix.cards) == 4
        assert matrix.synergy == 48

    def test_custom_rules(self, make_card: CardFactory) -> None:
        """A rule list can replace the catalog."""
        rule = KeywordComboRule(
            "Pyromancy",
            CardMatcher(text_terms=("burn",)),
            2,
            5,
            "Burn everything",
        )
        cards = [make_card("A", text="Burn"), make_card("B", text="burn it"), make_card("C")]

        combos = identify_card_combos(cards, rules=[rule])

        assert len(combos) == 1
        assert combos[0].synergy == 10

    def test_primary_alone(self, make_card: CardFactory) -> None:
        rule = PairedComboRule(
            "Test Pair",
            primary=CardMatcher(text_terms=("curse",)),
            primary_min=1,
            secondary=CardMatcher(text_terms=("enemy avatar",)),
            secondary_min=2,
            weight=1,
            description="",
            primary_alone=2,
        )
        cards = [make_card("A", text="curse"), make_card("B", text="curse")]

        assert len(identify_card_combos(cards, rules=[rule])) == 1

    def test_empty(self) -> None:
        assert identify_card_combos([]) == []

    def test_is_combo_piece(self, make_card: CardFactory) -> None:
        lock = make_card("Elemental Lock", CardType.ARTIFACT)
        combos = identify_card_combos([lock, make_card("Mana Drain", CardType.MAGIC)])

        assert is_combo_piece(lock, combos)
        assert not is_combo_piece(make_card("Imp"), combos)


class TestComboSynergy:
    def test_single_card(self, make_card: CardFactory) -> None:
        assert calculate_combo_synergy([make_card("Imp")]) == 0.0

    def test_structural_bonuses(self, make_card: CardFactory) -> None:
        """Size, single element, shared type and smooth costs all add up."""
        cards = [
            make_card("A", elements=(Element.FIRE,), mana_cost=1),
            make_card("B", elements=(Element.FIRE,), mana_cost=2),
            make_card("C", elements=(Element.FIRE,), mana_cost=6),
        ]

        # 2*5 size + 10 one element + 8 one type + 3 for the 1->2 step
        assert calculate_combo_synergy(cards) == 31.0

    def test_two_elements_worth_more(self, make_card: CardFactory) -> None:
        cards = [
            make_card("A", CardType.MINION, (Element.FIRE,), 1),
            make_card("B", CardType.MAGIC, (Element.WATER,), 5),
        ]

        assert calculate_combo_synergy(cards) == 5 + 15


class TestComboContribution:
    def test_completing_a_combo(self, make_card: CardFactory) -> None:
        """The card that completes a combo earns 30% of its synergy."""
        deck = [make_card("Elemental Lock", CardType.ARTIFACT), make_card("Imp")]
        drain = make_card("Mana Drain", CardType.MAGIC)

        assert calculate_combo_contribution(drain, deck) == 30 * 0.3

    def test_extending_a_combo(self, make_card: CardFactory) -> None:
        """Growing an existing combo by one earns 10%."""
        deck = [
            make_card("Elemental Lock", CardType.ARTIFACT),
            make_card("Mana Drain", CardType.MAGIC),
        ]
        prism = make_card("Prismatic Lock", CardType.ARTIFACT)

        assert calculate_combo_contribution(prism, deck) == 45 * 0.1

    def test_empty_deck(self, make_card: CardFactory) -> None:
        assert calculate_combo_contribution(make_card("Mana Drain"), []) == 0.0
