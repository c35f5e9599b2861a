from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
from PIL import Image

from .config import EngineConfig
from .job import JobPaths, record_error, snapshot_input
from .renderer import MeasurementUnavailable, PillowRenderer
from .session import PaginationSession
from .types import Page, Style
from .utils import page_id_for, read_text, utc_now_iso
from .writer import JobWriter

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    input_path: str
    style: str | None = None
    render_images: bool = True


def build_renderer(cfg: EngineConfig, style: Style) -> PillowRenderer:
    render_cfg = cfg.render
    return PillowRenderer(
        width=int(cfg.container.get("width", 0)),
        height=int(cfg.container.get("height", 0)),
        style=style,
        font_path=render_cfg.get("font_path"),
        reference_unit=str(render_cfg.get("reference_unit") or "i"),
        margin=int(cfg.container.get("margin", 0)),
        background=str(render_cfg.get("background", "white")),
        foreground=str(render_cfg.get("foreground", "black")),
    )


def compute_fill_ratio(image: Image.Image, *, margin: int = 0, ink_threshold: float = 64.0) -> float:
    """Fraction of the content area height that is covered by text.

    Ink is any pixel that differs from the background (taken from the
    top-left corner) by more than ink_threshold grey levels. The ratio runs
    from the top of the content area to the lowest inked row.
    """
    arr = np.array(image.convert("L"), dtype=np.float32)
    h, w = arr.shape
    content = arr[margin : max(margin, h - margin), margin : max(margin, w - margin)]
    if content.size == 0:
        return 0.0

    background = arr[0, 0]
    ink_rows = np.where((np.abs(content - background) > ink_threshold).any(axis=1))[0]
    if ink_rows.size == 0:
        return 0.0
    return float(ink_rows[-1] + 1) / float(content.shape[0])


class PaginationPipeline:
    def __init__(self, paths: JobPaths, cfg: EngineConfig, opts: RunOptions):
        self.paths = paths
        self.cfg = cfg
        self.opts = opts

        self.style = cfg.style(opts.style)
        self.renderer = build_renderer(cfg, self.style)
        self.session = PaginationSession(self.renderer, self.style)
        self.writer = JobWriter(paths=paths)

    def run(self, job_id: str) -> list[Page]:
        try:
            text = read_text(self.opts.input_path)
            snapshot_input(self.paths, text)
        except Exception as e:
            record_error(self.paths, page_id="", stage="input", message=str(e))
            raise

        metrics: dict[str, Any] = {
            "created_at": utc_now_iso(),
            "pages_total": 0,
            "forced_pages": 0,
            "characters_total": len(text),
            "pages_rendered": 0,
            "render_failures": 0,
            "fill_ratio_mean": None,
        }

        job_meta = {
            "job_id": job_id,
            "input": {"path": self.opts.input_path, "characters": len(text)},
            "style": {"name": self.style.name, "font_size": self.style.font_size, "line_spacing": self.style.line_spacing},
            "container": {"width": self.renderer.width, "height": self.renderer.height},
            "created_at": metrics["created_at"],
        }

        try:
            state = self.session.submit(text)
        except MeasurementUnavailable as e:
            # No partial page list is published.
            record_error(self.paths, page_id="", stage="measure", message=str(e))
            raise
        except Exception as e:
            record_error(self.paths, page_id="", stage="paginate", message=str(e))
            raise

        entries: list[dict[str, Any]] = []
        fill_ratios: list[float] = []
        for i, page in enumerate(state.pages):
            page_id = page_id_for(i)
            entry: dict[str, Any] = {"page_index": i, "page_id": page_id, **page.to_dict(), "image_path": None}
            try:
                if self.opts.render_images:
                    view = self.session.select_page(i)
                    rel_path = f"pages/{page_id}.png"
                    abs_path = self.paths.job_dir / rel_path
                    abs_path.parent.mkdir(parents=True, exist_ok=True)
                    view.output.save(abs_path, format="PNG")
                    entry["image_path"] = rel_path
                    entry["token_count"] = len(view.tokens)
                    fill_ratios.append(compute_fill_ratio(view.output, margin=self.renderer.margin))
                    metrics["pages_rendered"] += 1
                else:
                    entry["token_count"] = len(self.session.view(i))
            except Exception as e:
                record_error(self.paths, page_id=page_id, stage="render", message=str(e))
                metrics["render_failures"] += 1
                # continue
            entries.append(entry)

        metrics["pages_total"] = len(entries)
        metrics["forced_pages"] = sum(1 for p in state.pages if p.forced)
        if fill_ratios:
            metrics["fill_ratio_mean"] = round(float(np.mean(fill_ratios)), 4)

        self.writer.write_final(job_meta=job_meta, pages=entries, metrics=metrics)
        logger.info("job %s: %d pages written", job_id, len(entries))
        return list(state.pages)
