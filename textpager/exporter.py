from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path

from .job import JobPaths
from .tokens import normalize_text
from .utils import load_json, read_text


@dataclass
class ExportStats:
    pages_seen: int = 0
    pages_exported: int = 0
    pages_invalid: int = 0


def export_csv(*, job_dir: str | Path, out_path: str | Path, normalized: bool = False) -> ExportStats:
    """Export pages to CSV, one row per page in page order.

    CSV columns:
    - page_index
    - page_id
    - start / end (half-open offsets into input/document.txt)
    - forced
    - text (exact slice, or single-spaced when normalized=True)
    """
    paths = JobPaths.for_job_dir(job_dir)
    out_path = Path(out_path)

    stats = ExportStats()
    result = load_json(paths.pages_json)
    document = read_text(paths.document_txt)
    pages = result.get("pages", []) if isinstance(result, dict) else []

    rows: list[dict[str, str]] = []
    for p in pages:
        stats.pages_seen += 1
        if not isinstance(p, dict):
            stats.pages_invalid += 1
            continue
        try:
            start, end = int(p["start"]), int(p["end"])
        except (KeyError, TypeError, ValueError):
            stats.pages_invalid += 1
            continue
        if not 0 <= start <= end <= len(document):
            stats.pages_invalid += 1
            continue

        text = document[start:end]
        rows.append(
            {
                "page_index": str(p.get("page_index", "")),
                "page_id": str(p.get("page_id") or ""),
                "start": str(start),
                "end": str(end),
                "forced": "1" if p.get("forced") else "0",
                "text": normalize_text(text) if normalized else text,
            }
        )

    if not rows:
        raise RuntimeError("No exportable pages")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["page_index", "page_id", "start", "end", "forced", "text"])
        writer.writeheader()
        for r in rows:
            writer.writerow(r)
            stats.pages_exported += 1

    return stats
