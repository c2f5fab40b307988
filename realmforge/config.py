from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "RealmForge"
    debug: bool = False

    # Directory holding <SetName>ProductsAndPrices.csv files
    data_dir: Path = Path(__file__).parent / "data"

    default_data_sets: list[str] = ["Beta", "ArthurianLegends"]

    # Elemental synergy variant: "standard" or "fire_weighted"
    synergy_weighting: str = "standard"

    # TCGplayer price export mirror used by the download job
    tcgcsv_base_url: str = "https://tcgcsv.com/tcgplayer"
    tcgcsv_category_id: int = 77
    # Set name -> TCGplayer group id, e.g. {"Beta": 12345}
    tcgcsv_group_ids: dict[str, int] = {}


settings = Settings()


# =============================================================================
# DECK SIZE RULES
# =============================================================================

# Spellbook and atlas are sized independently; the avatar counts toward neither
SPELLBOOK_SIZE = 50
ATLAS_SIZE = 30

# Builder overshoots the spellbook before the optimizer trims it to size
SPELLBOOK_BUILD_TARGET = 55

# Threshold balancer stops inserting past this many spells
SPELLBOOK_SOFT_CEILING = 60

# Piles larger than this are impractical to shuffle
SHUFFLE_WARNING_SIZE = 100


# =============================================================================
# ANALYSIS CACHE
# =============================================================================

ANALYSIS_CACHE_SIZE = 10
