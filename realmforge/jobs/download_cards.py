"""
Download card data from TCGCSV.

Fetches the TCGplayer "ProductsAndPrices" CSV for each configured set into
the data directory, where the card loader expects it.
"""

import argparse
import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

import httpx

from realmforge.config import settings
from realmforge.models.failure import FailureKind, KnownError
from realmforge.services.card_database import set_file_path

logger = logging.getLogger(__name__)


def products_csv_url(group_id: int) -> str:
    return (
        f"{settings.tcgcsv_base_url}/{settings.tcgcsv_category_id}/{group_id}"
        "/ProductsAndPrices.csv"
    )


def resolve_group_id(set_name: str) -> int:
    """
    TCGplayer group id for a set, from settings.tcgcsv_group_ids.

    Raises:
        KnownError: If the set has no configured group id
    """
    group_id = settings.tcgcsv_group_ids.get(set_name)
    if group_id is None:
        raise KnownError(
            FailureKind.INVALID_INPUT,
            f"No TCGplayer group id configured for set: {set_name}",
            detail=f"Configured: {sorted(settings.tcgcsv_group_ids)}",
        )
    return group_id


async def download_set_csv(
    set_name: str,
    client: httpx.AsyncClient,
    data_dir: Path | None = None,
) -> Path:
    """
    Download one set's CSV.

    Args:
        set_name: Set to download, e.g. "Beta"
        client: HTTP client for the request
        data_dir: Target directory, defaults to settings.data_dir

    Returns:
        Path to the written file

    Raises:
        KnownError: If the set has no configured group id
        httpx.HTTPError: If the download fails
    """
    url = products_csv_url(resolve_group_id(set_name))
    output_path = set_file_path(set_name, data_dir)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    async with client.stream("GET", url) as response:
        response.raise_for_status()
        with open(output_path, "wb") as f:
            async for chunk in response.aiter_bytes(8192):
                f.write(chunk)

    return output_path


async def run_download(
    data_sets: Iterable[str] | None = None,
    data_dir: Path | None = None,
) -> dict[str, Path | None]:
    """
    Download every requested set, continuing past failures.

    Returns:
        Set name -> written path, or None where the download failed
    """
    sets = list(data_sets) if data_sets else list(settings.default_data_sets)
    results: dict[str, Path | None] = {}

    async with httpx.AsyncClient(
        headers={"User-Agent": "RealmForge/1.0"},
        follow_redirects=True,
        timeout=60.0,
    ) as client:
        for set_name in sets:
            logger.info("Downloading card data for %s...", set_name)
            try:
                path = await download_set_csv(set_name, client, data_dir)
                logger.info("Downloaded %s to %s", set_name, path)
                results[set_name] = path
            except httpx.HTTPError as e:
                logger.error("HTTP error downloading %s: %s", set_name, e)
                results[set_name] = None
            except KnownError as e:
                logger.error("Skipping %s: %s", set_name, e.message)
                results[set_name] = None

    return results


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Download Sorcery card data from TCGCSV")
    parser.add_argument("--set", dest="data_sets", action="append", help="Set to download")
    parser.add_argument("--data-dir", type=Path, default=None, help="Output directory")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    results = asyncio.run(run_download(args.data_sets, args.data_dir))
    if not any(results.values()):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
