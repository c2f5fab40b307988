"""
Deck API endpoints.

Builds decks over HTTP with the same options as the command line.
"""

import asyncio
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from realmforge.config import settings
from realmforge.models.deck import BuildOptions
from realmforge.services.card_database import load_card_pool
from realmforge.services.deck_exporter import ExportedDeck, to_exported_deck
from realmforge.services.deck_report import format_rules_summary
from realmforge.services.pipeline import build_complete_deck

router = APIRouter(prefix="/api", tags=["decks"])


def get_data_dir() -> Path:
    """Directory holding the set CSVs."""
    return settings.data_dir


class BuildDeckRequest(BaseModel):
    """Request model for building a deck."""

    model_config = ConfigDict(populate_by_name=True)

    element: str | None = Field(default=None, description="Preferred element", examples=["Fire"])
    archetype: str | None = Field(
        default=None, description="Preferred archetype", examples=["Aggro"]
    )
    card_set: str | None = Field(
        default=None,
        alias="cardSet",
        description="Single set to build from; the default sets when omitted",
    )
    export_json: bool = Field(
        default=False,
        alias="exportJson",
        description="Include the exported deck in the response",
    )
    show_rules: bool = Field(
        default=False,
        alias="showRules",
        description="Include the construction rules summary",
    )
    weighting: str = Field(default="standard", description="Elemental synergy weighting")


class ValidationResponse(BaseModel):
    """Response model for deck validation."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    total_cards: int = 0
    spellbook_size: int = 0
    site_count: int = 0


class BuildDeckResponse(BaseModel):
    """Response model for a built deck."""

    name: str
    description: str
    avatar: str | None = None
    dominant_element: str
    total_synergy: float
    playability_score: int
    report: str
    validation: ValidationResponse
    notes: list[str] = Field(default_factory=list)
    deck: ExportedDeck | None = None
    rules: str | None = None


@router.post("/build-deck", response_model=BuildDeckResponse)
async def build_deck(
    request: BuildDeckRequest,
    data_dir: Annotated[Path, Depends(get_data_dir)],
) -> BuildDeckResponse:
    """
    Build a deck.

    Rule violations do not fail the request; they are listed under
    `validation`. Missing card data is a 404.
    """
    options = BuildOptions(
        data_sets=[request.card_set] if request.card_set else list(settings.default_data_sets),
        preferred_element=request.element,
        preferred_archetype=request.archetype,
        export_json=request.export_json,
        show_rules=request.show_rules,
        synergy_weighting=request.weighting,
    )
    pool = await load_card_pool(options.data_sets, data_dir)
    result = await asyncio.to_thread(build_complete_deck, pool, options)

    deck = result.deck
    validation = result.validation
    return BuildDeckResponse(
        name=deck.metadata.name,
        description=deck.metadata.description,
        avatar=deck.avatar.name if deck.avatar else None,
        dominant_element=result.dominant_element.value,
        total_synergy=deck.metadata.total_synergy,
        playability_score=deck.metadata.playability_score,
        report=result.report,
        validation=ValidationResponse(
            is_valid=validation.is_valid,
            errors=validation.errors,
            warnings=validation.warnings,
            total_cards=validation.total_cards,
            spellbook_size=validation.spellbook_size,
            site_count=validation.site_count,
        ),
        notes=result.notes,
        deck=to_exported_deck(deck) if options.export_json else None,
        rules=format_rules_summary() if options.show_rules else None,
    )
