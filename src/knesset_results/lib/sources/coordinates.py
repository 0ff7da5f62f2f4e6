"""Settlement coordinates from the CBS settlement registry.

The bundled table of verified coordinates is authoritative; the registry,
when requested, only fills codes the table does not cover.  Registry rows outside
Israel's bounding box are ignored.
"""

from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger

from knesset_results.lib.reference.types import Coordinates
from knesset_results.lib.sources.ckan import fetch_page
from knesset_results.lib.sources.errors import FetchError

REGISTRY_PAGE_SIZE = 2000

# Exclusive (lat, lng) bounds
LAT_BOUNDS = (29.0, 34.0)
LNG_BOUNDS = (34.0, 36.0)

_CODE_COLUMN = "סמל_ישוב"


def _parse_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_registry_row(row: Mapping[str, Any]) -> tuple[str, Coordinates] | None:
    """Extract ``(code, coordinates)`` from a registry row, or None if unusable."""
    code = str(row.get(_CODE_COLUMN) or "").strip()
    lat = _parse_float(row.get("Y") or row.get("y"))
    lng = _parse_float(row.get("X") or row.get("x"))
    if not code or lat is None or lng is None:
        return None
    if not (LAT_BOUNDS[0] < lat < LAT_BOUNDS[1] and LNG_BOUNDS[0] < lng < LNG_BOUNDS[1]):
        return None
    return code, Coordinates(lat=lat, lng=lng)


def merge_coordinates(
    bundled: Mapping[str, Coordinates],
    registry_rows: list[dict[str, Any]],
) -> dict[str, Coordinates]:
    """Combine bundled coordinates with registry rows; bundled entries take priority."""
    merged = dict(bundled)
    for row in registry_rows:
        parsed = parse_registry_row(row)
        if parsed is not None:
            merged.setdefault(*parsed)
    return merged


def fetch_settlement_coords(
    bundled: Mapping[str, Coordinates],
    resource_id: str,
    *,
    api_url: str,
    client: httpx.Client,
) -> dict[str, Coordinates]:
    """Return bundled coordinates supplemented by the registry.

    A registry failure is not fatal: the bundled coordinates are returned
    unchanged and a warning is logged.
    """
    if not resource_id:
        return dict(bundled)

    logger.info("Fetching settlement coordinates from resource {}", resource_id)
    try:
        rows, _total = fetch_page(client, resource_id, api_url=api_url, limit=REGISTRY_PAGE_SIZE)
    except FetchError as e:
        logger.warning("Could not fetch settlement coordinates, using bundled data: {}", e)
        return dict(bundled)

    merged = merge_coordinates(bundled, rows)
    logger.info("Total coordinates: {} ({} bundled)", len(merged), len(bundled))
    return merged
