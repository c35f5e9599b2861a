from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .utils import append_jsonl, ensure_dir, utc_now_iso, write_json, write_text


@dataclass
class JobPaths:
    job_dir: Path
    input_dir: Path
    pages_dir: Path
    document_txt: Path  # snapshot of the paginated text
    pages_json: Path
    metrics_json: Path
    errors_jsonl: Path

    @classmethod
    def for_job_dir(cls, job_dir: str | Path) -> "JobPaths":
        job_dir = Path(job_dir)
        return cls(
            job_dir=job_dir,
            input_dir=job_dir / "input",
            pages_dir=job_dir / "pages",
            document_txt=job_dir / "input" / "document.txt",
            pages_json=job_dir / "pages.json",
            metrics_json=job_dir / "metrics.json",
            errors_jsonl=job_dir / "errors.jsonl",
        )


def create_job_dirs(workspace: str | Path, job_id: str) -> JobPaths:
    paths = JobPaths.for_job_dir(Path(workspace) / "jobs" / job_id)
    for p in [paths.input_dir, paths.pages_dir]:
        ensure_dir(p)
    return paths


def new_job_id() -> str:
    """Timeline job id: YYYY-MM-DD/HH-MM-SS__<shortid>."""
    now = datetime.now(timezone.utc)
    return f"{now.strftime('%Y-%m-%d')}/{now.strftime('%H-%M-%S')}__{uuid.uuid4().hex[:8]}"


def record_error(paths: JobPaths, page_id: str, stage: str, message: str) -> None:
    append_jsonl(paths.errors_jsonl, {"page_id": page_id, "stage": stage, "message": message})


def init_job_outputs(paths: JobPaths) -> None:
    # Always create output files, even if empty.
    write_json(paths.pages_json, {"job": {}, "pages": []})
    write_json(
        paths.metrics_json,
        {
            "created_at": utc_now_iso(),
            "finished": False,
            "completed_at": None,
            "pages_total": 0,
            "forced_pages": 0,
            "characters_total": 0,
            "pages_rendered": 0,
            "render_failures": 0,
            "fill_ratio_mean": None,
        },
    )
    paths.errors_jsonl.parent.mkdir(parents=True, exist_ok=True)
    paths.errors_jsonl.touch(exist_ok=True)


def snapshot_input(paths: JobPaths, text: str) -> None:
    write_text(paths.document_txt, text)
