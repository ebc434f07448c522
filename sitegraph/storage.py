"""Export of a finished crawl to JSON or YAML.

This writes the final link graph only; there is no crawl state to resume from.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

import yaml  # type: ignore

from .constants import JSON_INDENT, SUPPORTED_CONFIG_SUFFIXES
from .engine import CrawlResult
from .types import JSONDict


def result_to_json(result: CrawlResult, *, include_failures: bool = True) -> JSONDict:
    """Serialize a crawl result with stable ordering."""

    payload: JSONDict = {
        "root": result.root,
        "pages": result.pages,
    }
    if include_failures:
        payload["failures"] = {
            url: failure.to_json() for url, failure in sorted(result.failures.items())
        }
    payload["warnings"] = list(result.warnings)
    payload["stats"] = result.stats
    return payload


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def save_result(
    result: CrawlResult,
    path: str | Path,
    *,
    include_failures: bool = True,
) -> Path:
    """Write a crawl result as JSON or YAML based on file extension."""

    out_path = Path(path)
    suffix = out_path.suffix.lower()
    payload = result_to_json(result, include_failures=include_failures)

    if suffix == ".json":
        _atomic_write_text(out_path, json.dumps(payload, indent=JSON_INDENT, sort_keys=True) + "\n")
    elif suffix in {".yaml", ".yml"}:
        _atomic_write_text(out_path, yaml.safe_dump(payload, sort_keys=False))
    else:
        raise ValueError(
            f"Unsupported output suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )
    return out_path


__all__ = [
    "result_to_json",
    "save_result",
]
