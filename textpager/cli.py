from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import load_config
from .exporter import export_csv
from .job import JobPaths, create_job_dirs, init_job_outputs, new_job_id
from .paginator import render_content_for
from .pipeline import PaginationPipeline, RunOptions
from .types import Page
from .utils import load_json, read_text
from .validator import validate_job

DEFAULT_CONFIG = Path("config") / "default.json"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="textpager")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Paginate a text file into a job directory")
    run.add_argument("--input", required=True, help="UTF-8 text file to paginate")
    run.add_argument("--style", default=None, help="Style name from config (default: config default_style)")
    run.add_argument("--workspace", default="./workspace", help="Workspace root")
    run.add_argument("--config", default=None, help="Config path (default: config/default.json when present)")
    run.add_argument("--no-images", action="store_true", help="Skip rendering page images")

    validate = sub.add_parser("validate", help="Validate output contract + page partition")
    validate.add_argument("--job-dir", required=True, help="Job directory (workspace/jobs/<job_id>)")

    show = sub.add_parser("show", help="Print the normalized content of one page")
    show.add_argument("--job-dir", required=True, help="Job directory (workspace/jobs/<job_id>)")
    show.add_argument("--page", required=True, type=int, help="1-based page number")

    export = sub.add_parser("export", help="Export pages from a completed job")
    export.add_argument("--job-dir", required=True, help="Job directory (workspace/jobs/<job_id>)")
    export.add_argument("--format", required=True, choices=["csv"], help="Export format")
    export.add_argument("--out", required=True, help="Output file path")
    export.add_argument("--normalized", action="store_true", help="Export single-spaced page text")

    return p


def cmd_run(args: argparse.Namespace) -> int:
    if args.config is None:
        # built-in defaults only when no config was asked for
        config_path = DEFAULT_CONFIG if DEFAULT_CONFIG.exists() else None
    else:
        config_path = Path(args.config)
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print(f"run_failed: config {config_path}: {e}")
        return 1

    job_id = new_job_id()
    paths = create_job_dirs(args.workspace, job_id)
    init_job_outputs(paths)

    opts = RunOptions(input_path=args.input, style=args.style, render_images=not args.no_images)
    try:
        pages = PaginationPipeline(paths=paths, cfg=cfg, opts=opts).run(job_id=job_id)
    except Exception as e:
        print(f"run_failed: {e}")
        return 1
    print(f"pages={len(pages)} forced={sum(1 for p in pages if p.forced)}")
    print(str(paths.job_dir))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    ok, summary = validate_job(args.job_dir)
    print(f"missing_contract_files={summary['missing_contract_files']}")
    print(f"missing_images={summary['missing_images']}")
    print(f"page_errors={summary['page_errors']}")

    if not ok:
        for m in summary["errors"]:
            print(m)
        return 1

    print("OK")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    paths = JobPaths.for_job_dir(args.job_dir)
    try:
        result = load_json(paths.pages_json)
        document = read_text(paths.document_txt)
        pages = [Page(start=int(p["start"]), end=int(p["end"]), forced=bool(p.get("forced"))) for p in result.get("pages", [])]
        tokens = render_content_for(pages, args.page - 1, document)
    except Exception as e:
        print(f"show_failed: {e}")
        return 1
    print("".join(tokens))
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    if args.format != "csv":
        raise SystemExit(2)
    try:
        stats = export_csv(job_dir=args.job_dir, out_path=args.out, normalized=bool(args.normalized))
        print(f"exported={stats.pages_exported} invalid={stats.pages_invalid}")
        return 0
    except Exception as e:
        print(f"export_failed: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "run":
        return cmd_run(args)

    if args.command == "validate":
        return cmd_validate(args)

    if args.command == "show":
        return cmd_show(args)

    if args.command == "export":
        return cmd_export(args)

    raise SystemExit(2)


if __name__ == "__main__":
    raise SystemExit(main())
