from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

from textpager.utils import load_json


def run_cmd(args: list[str], *, cwd: Path) -> str:
    p = subprocess.run(args, cwd=str(cwd), text=True, capture_output=True)
    out = (p.stdout or "") + (p.stderr or "")
    if p.returncode != 0:
        raise RuntimeError(f"command_failed rc={p.returncode}: {' '.join(args)}\n{out}")
    return p.stdout.strip()


def run_job(repo: Path, workspace: Path, style: str) -> Path:
    out = run_cmd(
        [
            sys.executable,
            "-m",
            "textpager",
            "run",
            "--input",
            str(repo / "samples" / "smoke" / "sample.txt"),
            "--workspace",
            str(workspace),
            "--style",
            style,
        ],
        cwd=repo,
    )
    job_path = Path(out.splitlines()[-1])
    if not job_path.exists():
        raise RuntimeError(f"job_dir_not_found: {job_path}")
    return job_path


def page_ranges(job_path: Path) -> list[tuple[int, int]]:
    return [(p["start"], p["end"]) for p in load_json(job_path / "pages.json")["pages"]]


def main() -> int:
    repo = Path(__file__).resolve().parents[2]
    workspace = repo / "workspace" / "smoke_idempotency"

    if workspace.exists():
        shutil.rmtree(workspace)
    workspace.mkdir(parents=True, exist_ok=True)

    # 1) same text, same style, twice: identical pages
    first = run_job(repo, workspace, "large")
    second = run_job(repo, workspace, "large")
    if page_ranges(first) != page_ranges(second):
        raise RuntimeError(f"pages differ between runs:\n{page_ranges(first)}\n{page_ranges(second)}")

    # 2) both jobs pass the output contract
    for job_path in (first, second):
        run_cmd([sys.executable, "-m", "textpager", "validate", "--job-dir", str(job_path)], cwd=repo)

    # 3) smaller font never needs more pages
    small = run_job(repo, workspace, "small")
    if len(page_ranges(small)) > len(page_ranges(first)):
        raise RuntimeError(f"small style produced more pages: {len(page_ranges(small))} > {len(page_ranges(first))}")

    print("OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
