"""Shared test fixtures: settings, reference data, and a fake CKAN API."""

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import httpx
import pytest

from knesset_results.core.config import Settings
from knesset_results.lib.reference import FieldVocabulary, ReferenceData, load_reference_data

CKAN_URL = "https://ckan.test/api/3/action/datastore_search"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Test pipeline settings writing into a temporary directory."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        ckan_api_url=CKAN_URL,
        ckan_page_size=2,
        output_dir=tmp_path / "out",
        legacy_spreadsheet_path=tmp_path / "legacy.xlsx",
        coordinates_resource_id="",
    )


@pytest.fixture(scope="session")
def reference() -> ReferenceData:
    """The bundled reference data."""
    return load_reference_data()


@pytest.fixture
def vocabulary(reference: ReferenceData) -> FieldVocabulary:
    """The bundled field vocabulary."""
    return reference.fields


def ckan_handler(
    resources: Mapping[str, list[dict[str, Any]]],
    failing: Iterable[str] = (),
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a MockTransport handler serving ``datastore_search`` pages.

    Unknown resources answer ``success: false``; resources in ``failing``
    answer HTTP 500.
    """
    failing = set(failing)

    def handler(request: httpx.Request) -> httpx.Response:
        resource_id = request.url.params["resource_id"]
        if resource_id in failing:
            return httpx.Response(500, json={"success": False})
        if resource_id not in resources:
            return httpx.Response(200, json={"success": False, "error": {"message": "Not found"}})

        limit = int(request.url.params["limit"])
        offset = int(request.url.params.get("offset", "0"))
        records = resources[resource_id]
        return httpx.Response(
            200,
            json={
                "success": True,
                "result": {"records": records[offset : offset + limit], "total": len(records)},
            },
        )

    return handler


@pytest.fixture
def make_ckan_client() -> Callable[..., httpx.Client]:
    """Factory for an httpx.Client backed by a fake CKAN API."""

    def _make(
        resources: Mapping[str, list[dict[str, Any]]],
        failing: Iterable[str] = (),
    ) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(ckan_handler(resources, failing)))

    return _make
