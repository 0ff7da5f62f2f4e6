"""CKAN ``datastore_search`` client.

Fetches every record of a datastore resource using offset/limit pagination.
Uses a synchronous httpx client; the caller may pass a shared client so one
connection pool serves a whole pipeline run.
"""

from typing import Any

import httpx
from loguru import logger

from knesset_results.lib.sources.errors import FetchError


def _parse_envelope(payload: Any, resource_id: str) -> tuple[list[dict[str, Any]], int]:
    """Validate a ``datastore_search`` response envelope.

    Returns:
        The page's records and the resource's total record count.

    Raises:
        FetchError: If the envelope reports failure or is missing fields.
    """
    if not isinstance(payload, dict) or not payload.get("success"):
        msg = f"API reported failure for resource {resource_id}"
        raise FetchError(msg)

    result = payload.get("result")
    if not isinstance(result, dict):
        msg = f"Malformed response for resource {resource_id}: missing 'result'"
        raise FetchError(msg)

    records = result.get("records")
    total = result.get("total")
    if not isinstance(records, list) or not isinstance(total, int):
        msg = f"Malformed response for resource {resource_id}: missing 'records' or 'total'"
        raise FetchError(msg)

    return records, total


def fetch_page(
    client: httpx.Client,
    resource_id: str,
    *,
    api_url: str,
    limit: int,
    offset: int = 0,
) -> tuple[list[dict[str, Any]], int]:
    """Fetch a single page of a datastore resource.

    Args:
        client: HTTP client to issue the request with.
        resource_id: CKAN resource identifier.
        api_url: The ``datastore_search`` endpoint.
        limit: Page size.
        offset: Index of the first record of the page.

    Returns:
        Tuple of (records, total).

    Raises:
        FetchError: On transport errors, non-2xx responses, invalid JSON, or
            a malformed envelope.
    """
    params = {"resource_id": resource_id, "limit": limit, "offset": offset}
    try:
        response = client.get(api_url, params=params)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        msg = f"Timeout fetching resource {resource_id} at offset {offset}"
        logger.error(msg)
        raise FetchError(msg) from exc
    except httpx.HTTPStatusError as exc:
        msg = f"HTTP {exc.response.status_code} fetching resource {resource_id}"
        logger.error(msg)
        raise FetchError(msg, status_code=exc.response.status_code) from exc
    except httpx.HTTPError as exc:
        msg = f"HTTP error fetching resource {resource_id}: {exc}"
        logger.error(msg)
        raise FetchError(msg) from exc

    try:
        payload = response.json()
    except ValueError as exc:
        msg = f"Invalid JSON response for resource {resource_id}"
        logger.error(msg)
        raise FetchError(msg) from exc

    return _parse_envelope(payload, resource_id)


def fetch_all_records(
    resource_id: str,
    *,
    api_url: str,
    page_size: int = 10000,
    timeout: float = 60.0,
    client: httpx.Client | None = None,
) -> list[dict[str, Any]]:
    """Fetch every record of a datastore resource.

    Pages are requested sequentially until the reported total is reached or
    a page comes back shorter than ``page_size``.

    Args:
        resource_id: CKAN resource identifier.
        api_url: The ``datastore_search`` endpoint.
        page_size: Records per request.
        timeout: Request timeout in seconds (only used when no client is given).
        client: Optional shared HTTP client.

    Returns:
        All records in upstream order.

    Raises:
        FetchError: If any page fails; no partial result is returned.
    """
    if client is None:
        with httpx.Client(timeout=timeout) as own_client:
            return fetch_all_records(resource_id, api_url=api_url, page_size=page_size, client=own_client)

    records: list[dict[str, Any]] = []
    offset = 0
    while True:
        page, total = fetch_page(client, resource_id, api_url=api_url, limit=page_size, offset=offset)
        records.extend(page)
        offset += len(page)
        logger.debug("Fetched {}/{} records of {}", offset, total, resource_id)
        if offset >= total or len(page) < page_size:
            break

    logger.info("Fetched {} records from resource {}", len(records), resource_id)
    return records
