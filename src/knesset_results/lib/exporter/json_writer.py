"""Atomic JSON document writer."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any


def dumps_document(document: Any) -> str:
    """Serialize a document compactly with non-ASCII text kept as-is."""
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


def write_json_documents(documents: Mapping[Path, Any]) -> int:
    """Write a set of JSON documents that must stay consistent with each other.

    Every document is first written to a ``.part`` file next to its target;
    targets are only replaced once all parts exist.  If staging fails, the
    parts are removed and every target keeps its previous content.  If a
    rename fails part way, the targets already replaced are removed as well,
    so the set on disk is never a mix of old and new documents.

    Args:
        documents: Mapping of final path to JSON-serializable document.

    Returns:
        Total number of bytes written.
    """
    staged: list[tuple[Path, Path]] = []
    replaced: list[Path] = []
    total = 0

    try:
        for output_path, document in documents.items():
            output_path.parent.mkdir(parents=True, exist_ok=True)
            part_path = output_path.with_suffix(output_path.suffix + ".part")
            payload = dumps_document(document).encode("utf-8")
            staged.append((part_path, output_path))
            part_path.write_bytes(payload)
            total += len(payload)

        for part_path, output_path in staged:
            part_path.replace(output_path)
            replaced.append(output_path)
    except OSError:
        for part_path, _ in staged:
            part_path.unlink(missing_ok=True)
        for output_path in replaced:
            output_path.unlink(missing_ok=True)
        raise

    return total


def write_json(output_path: Path, document: Any) -> int:
    """Write a single JSON document atomically.

    A failed write never leaves a truncated artifact; the previous file, if
    any, is kept.

    Returns:
        Number of bytes written.
    """
    return write_json_documents({output_path: document})
