from __future__ import annotations

from pathlib import Path
from typing import Any

from .tokens import is_space
from .types import Page
from .utils import ensure_job_relative_path, load_json, read_text


def check_pages(document: str, pages: list[Page]) -> list[str]:
    """Partition, round-trip and word-boundary checks for a page list."""
    errors: list[str] = []
    if not pages:
        return ["no pages"]

    if not document:
        if len(pages) != 1 or (pages[0].start, pages[0].end) != (0, 0):
            errors.append("empty document must yield exactly one page (0, 0)")
        return errors

    if pages[0].start != 0:
        errors.append(f"page[0] starts at {pages[0].start}, not 0")
    if pages[-1].end != len(document):
        errors.append(f"last page ends at {pages[-1].end}, document length is {len(document)}")

    for idx, p in enumerate(pages):
        if p.start >= p.end:
            errors.append(f"page[{idx}] is empty: [{p.start}, {p.end})")
        if idx > 0 and pages[idx - 1].end != p.start:
            errors.append(f"page[{idx}] not contiguous: previous end {pages[idx - 1].end}, start {p.start}")
        if 0 < p.end < len(document):
            before, after = document[p.end - 1], document[p.end]
            if not is_space(before) and not is_space(after) and not p.forced:
                errors.append(f"page[{idx}] splits a word at offset {p.end}")

    if "".join(document[p.start : p.end] for p in pages) != document:
        errors.append("pages do not reassemble the document")
    return errors


def _pages_from_json(obj: Any, errors: list[str]) -> list[Page]:
    items = (obj or {}).get("pages", []) if isinstance(obj, dict) else []
    pages: list[Page] = []
    for idx, it in enumerate(items):
        if not isinstance(it, dict):
            errors.append(f"pages.json: invalid page[{idx}]: not an object")
            continue
        missing = [k for k in ("page_index", "page_id", "start", "end", "forced") if k not in it]
        if missing:
            errors.append(f"pages.json: invalid page[{idx}]: missing fields {','.join(missing)}")
            continue
        if it.get("page_index") != idx:
            errors.append(f"pages.json: page[{idx}] has page_index={it.get('page_index')}")
        try:
            pages.append(Page(start=int(it["start"]), end=int(it["end"]), forced=bool(it["forced"])))
        except (TypeError, ValueError):
            errors.append(f"pages.json: invalid page[{idx}]: start/end must be ints")
    return pages


def _validate_image_refs(job_dir: Path, obj: Any, errors: list[str]) -> int:
    items = (obj or {}).get("pages", []) if isinstance(obj, dict) else []
    missing = 0
    for it in items:
        if not isinstance(it, dict):
            continue
        rel = it.get("image_path")
        if not rel:
            continue
        try:
            p = ensure_job_relative_path(job_dir, str(rel), field="image_path")
        except Exception as e:
            errors.append(f"unsafe image_path: page_id={it.get('page_id')} path={rel} error={e}")
            missing += 1
            continue
        if not p.exists():
            errors.append(f"missing page image: page_id={it.get('page_id')} path={rel}")
            missing += 1
    return missing


def validate_job(job_dir: str | Path) -> tuple[bool, dict[str, Any]]:
    """Validate the output contract of a pagination job.

    Rules:
    - pages.json, metrics.json, errors.jsonl and input/document.txt exist
    - metrics.json marks the job finished
    - pages partition input/document.txt and reassemble it exactly
    - referenced page images stay inside the job dir and exist
    """
    job_dir = Path(job_dir)
    errors: list[str] = []

    missing_contract_files = 0
    missing_images = 0
    page_errors = 0

    for f in ("pages.json", "metrics.json", "errors.jsonl", "input/document.txt"):
        p = job_dir / f
        if not p.exists():
            missing_contract_files += 1
            errors.append(f"missing: {p}")

    try:
        metrics = load_json(job_dir / "metrics.json")
        if not isinstance(metrics, dict):
            errors.append("metrics.json: must be an object")
        elif metrics.get("finished") is not True:
            errors.append("metrics.json: job not finished (finished!=true)")
    except Exception as e:
        errors.append(f"failed to read metrics.json: {e}")

    try:
        result = load_json(job_dir / "pages.json")
        pages = _pages_from_json(result, errors)
        document = read_text(job_dir / "input" / "document.txt")
        problems = check_pages(document, pages)
        page_errors += len(problems)
        errors.extend(f"pages.json: {m}" for m in problems)
        missing_images += _validate_image_refs(job_dir, result, errors)
    except Exception as e:
        errors.append(f"failed to check pages: {e}")
        page_errors += 1

    summary: dict[str, Any] = {
        "missing_contract_files": missing_contract_files,
        "missing_images": missing_images,
        "page_errors": page_errors,
        "errors": errors,
    }
    return not errors, summary
