"""
Deck playability analysis.

Estimates whether a spellbook has enough to do at each stage of the game:
cheap plays, mid-game and late-game cards, removal, card advantage and
threats, plus how spread out its elements are. Observational only; nothing
here changes a deck.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from realmforge.models.card import Card

EMPTY_DECK_ISSUE = "Empty or invalid deck"

# Costs at or above this share one bucket
MAX_COST_BUCKET = 7

PHASE_WEIGHTS: dict[str, float] = {
    "early_game": 0.25,
    "mid_game": 0.20,
    "late_game": 0.15,
    "removal": 0.15,
    "card_advantage": 0.10,
    "threats": 0.10,
    "elemental_balance": 0.05,
}

REMOVAL_TERMS = ("destroy", "banish", "damage", "remove")
CARD_ADVANTAGE_TERMS = ("draw", "search", "return", "cycle")
THREAT_TERMS = ("win", "lose")
THREAT_POWER = 4


@dataclass
class PhaseAnalysis:
    cards: int
    recommended: int
    score: float = 0.0

    def rescore(self) -> None:
        self.score = min(100.0, self.cards / self.recommended * 100)


@dataclass
class ElementalBalance:
    primary: str = ""
    secondary: str = ""
    diversity: int = 0
    score: float = 0.0


@dataclass
class PlayabilityAnalysis:
    """Playability score (0-100) with the per-phase figures behind it."""

    playability_score: int = 0
    issues: list[str] = field(default_factory=list)
    mana_curve: dict[int, int] = field(default_factory=dict)
    early_game: PhaseAnalysis = field(default_factory=lambda: PhaseAnalysis(0, 12))
    mid_game: PhaseAnalysis = field(default_factory=lambda: PhaseAnalysis(0, 10))
    late_game: PhaseAnalysis = field(default_factory=lambda: PhaseAnalysis(0, 6))
    removal: PhaseAnalysis = field(default_factory=lambda: PhaseAnalysis(0, 8))
    card_advantage: PhaseAnalysis = field(default_factory=lambda: PhaseAnalysis(0, 6))
    threats: PhaseAnalysis = field(default_factory=lambda: PhaseAnalysis(0, 10))
    elemental_balance: ElementalBalance = field(default_factory=ElementalBalance)


@dataclass(frozen=True, slots=True)
class PlayabilityRecommendation:
    category: str
    priority: str  # High, Medium or Low
    issue: str
    suggestion: str
    target_cards: list[str] = field(default_factory=list)


def _has_any(text: str, terms: Sequence[str]) -> bool:
    return any(term in text for term in terms)


def _score_elemental_balance(diversity: int) -> float:
    """One to three elements is ideal; each extra element costs 15 points."""
    if diversity <= 3:
        return 80.0 + (3 - diversity) * 10
    return max(0.0, 80.0 - (diversity - 3) * 15)


def analyze_deck_playability(deck: Sequence[Card]) -> PlayabilityAnalysis:
    """
    Analyze a spellbook's playability.

    An empty deck is not an error: it scores 0 with an explicit issue.

    Args:
        deck: Spellbook cards, copies included

    Returns:
        PlayabilityAnalysis with a weighted 0-100 score and issue list
    """
    analysis = PlayabilityAnalysis()
    if not deck:
        analysis.issues.append(EMPTY_DECK_ISSUE)
        return analysis

    curve = {cost: 0 for cost in range(MAX_COST_BUCKET + 1)}
    for card in deck:
        curve[min(card.mana_cost, MAX_COST_BUCKET)] += 1
    analysis.mana_curve = curve

    analysis.early_game.cards = curve[0] + curve[1] + curve[2]
    analysis.mid_game.cards = curve[3] + curve[4]
    analysis.late_game.cards = curve[5] + curve[6] + curve[7]

    for card in deck:
        text = (card.text or "").lower()
        if _has_any(text, REMOVAL_TERMS):
            analysis.removal.cards += 1
        if _has_any(text, CARD_ADVANTAGE_TERMS):
            analysis.card_advantage.cards += 1
        if (card.power or 0) >= THREAT_POWER or _has_any(text, THREAT_TERMS):
            analysis.threats.cards += 1

    ranked = Counter(element.value for card in deck for element in card.elements).most_common()
    balance = analysis.elemental_balance
    balance.diversity = len(ranked)
    if ranked:
        balance.primary = ranked[0][0]
    if len(ranked) > 1:
        balance.secondary = ranked[1][0]
    balance.score = _score_elemental_balance(balance.diversity)

    phases = (
        analysis.early_game,
        analysis.mid_game,
        analysis.late_game,
        analysis.removal,
        analysis.card_advantage,
        analysis.threats,
    )
    for phase in phases:
        phase.rescore()

    analysis.playability_score = round(
        sum(
            getattr(analysis, name).score * weight
            for name, weight in PHASE_WEIGHTS.items()
        )
    )
    analysis.issues.extend(_identify_issues(analysis))
    return analysis


def _identify_issues(analysis: PlayabilityAnalysis) -> list[str]:
    issues: list[str] = []
    if analysis.early_game.score < 70:
        issues.append("Insufficient early game presence - add more 1-3 mana cards")
    if analysis.mid_game.score < 60:
        issues.append("Weak mid-game - consider more 4-5 mana threats")
    if analysis.removal.score < 50:
        issues.append("Limited removal options - add more interaction spells")
    if analysis.card_advantage.score < 40:
        issues.append("Poor card advantage - include more draw/search effects")
    if analysis.threats.score < 60:
        issues.append("Insufficient win conditions - add more powerful threats")
    if analysis.elemental_balance.diversity > 4:
        issues.append("Too many elements - focus on 2-3 elements for consistency")
    return issues


def get_playability_recommendations(deck: Sequence[Card]) -> list[PlayabilityRecommendation]:
    """Concrete suggestions for each weak area of the deck."""
    analysis = analyze_deck_playability(deck)
    recommendations: list[PlayabilityRecommendation] = []

    def shortfall(phase: PhaseAnalysis) -> int:
        return max(0, phase.recommended - phase.cards)

    if analysis.early_game.score < 70:
        recommendations.append(
            PlayabilityRecommendation(
                "Early Game",
                "High",
                "Insufficient early game cards",
                f"Add {shortfall(analysis.early_game)} more 1-3 mana cards "
                "for better opening hands",
                ["1-cost minions", "2-cost removal", "3-cost threats"],
            )
        )
    if analysis.mid_game.score < 60:
        recommendations.append(
            PlayabilityRecommendation(
                "Mid Game",
                "Medium",
                "Weak mid-game presence",
                f"Add {shortfall(analysis.mid_game)} more 4-5 mana cards for board control",
                ["4-cost minions", "5-cost bombs"],
            )
        )
    if analysis.removal.score < 50:
        recommendations.append(
            PlayabilityRecommendation(
                "Interaction",
                "High",
                "Limited removal options",
                f"Add {shortfall(analysis.removal)} more removal/interaction spells",
                ["Damage spells", "Destroy effects", "Banish spells"],
            )
        )
    if analysis.card_advantage.score < 40:
        recommendations.append(
            PlayabilityRecommendation(
                "Card Advantage",
                "Medium",
                "Poor card advantage engines",
                f"Add {shortfall(analysis.card_advantage)} more draw/search effects",
                ["Draw spells", "Search effects", "Cycling cards"],
            )
        )
    if analysis.threats.score < 60:
        recommendations.append(
            PlayabilityRecommendation(
                "Win Conditions",
                "High",
                "Insufficient win conditions",
                f"Add {shortfall(analysis.threats)} more powerful threats",
                ["High-power minions", "Game-ending effects"],
            )
        )
    balance = analysis.elemental_balance
    if balance.diversity > 4:
        recommendations.append(
            PlayabilityRecommendation(
                "Mana Base",
                "Medium",
                "Too many elements",
                "Focus on 2-3 elements maximum for better consistency",
                [f"{balance.primary} cards", f"{balance.secondary} cards"],
            )
        )
    return recommendations


def calculate_card_playability_score(card: Card, deck: Sequence[Card]) -> int:
    """Standalone 0-100 value of a card in the context of a deck."""
    score = 50
    cost = card.mana_cost
    text = (card.text or "").lower()

    if cost <= 2:
        score += 15
    elif cost <= 4:
        score += 10
    elif cost >= 6:
        score -= 5

    if card.power and card.life:
        stat_total = card.power + card.life
        if stat_total >= cost * 2.5:
            score += 10
        elif stat_total < cost * 1.5:
            score -= 10

    # Draw, search and cycle are credited twice: once as abilities, once as card advantage
    ability_bonuses = (
        ("draw", 12),
        ("search", 8),
        ("destroy", 10),
        ("damage", 8),
        ("draw", 7),
        ("search", 5),
        ("cycle", 3),
    )
    score += sum(bonus for term, bonus in ability_bonuses if term in text)
    if "protection" in text or "ward" in text:
        score += 6
    if "flying" in text or "unblockable" in text:
        score += 5

    ranked = [
        element for element, _ in Counter(e for c in deck for e in c.elements).most_common()
    ]
    if ranked and ranked[0] in card.elements:
        score += 10
    if len(ranked) > 1 and ranked[1] in card.elements:
        score += 5

    return max(0, min(100, score))
