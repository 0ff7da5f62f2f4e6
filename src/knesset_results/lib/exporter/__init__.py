"""Exporter library — public API for artifact writing.

Writes the per-round city and ballot-box documents as a pair and the
consolidated ``meta.json``, each atomically.
"""

from knesset_results.lib.exporter.artifacts import (
    build_meta_document,
    round_ballot_boxes_document,
    round_ballot_boxes_path,
    round_cities_document,
    round_cities_path,
    write_meta,
    write_round,
)
from knesset_results.lib.exporter.json_writer import dumps_document, write_json, write_json_documents

__all__ = [
    "build_meta_document",
    "dumps_document",
    "round_ballot_boxes_document",
    "round_ballot_boxes_path",
    "round_cities_document",
    "round_cities_path",
    "write_json",
    "write_json_documents",
    "write_meta",
    "write_round",
]
