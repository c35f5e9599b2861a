from __future__ import annotations

from typing import Any

import pytest

from textpager.measurer import CapacityMeasurer
from textpager.paginator import Paginator
from textpager.renderer import Renderer
from textpager.tokens import is_space
from textpager.types import Box, Style


class GridRenderer(Renderer):
    """Monospace fake: every character is one cell, the page is cols x rows.

    Wraps like the Pillow renderer: words never break, trailing spaces hang,
    a word longer than a line overflows on a line of its own.
    """

    def __init__(
        self,
        cols: int,
        rows: int,
        *,
        unit_width: float = 1.0,
        grids: dict[str, tuple[int, int]] | None = None,
    ):
        self.cols = cols
        self.rows = rows
        self.unit_width = unit_width
        self.grids = grids or {}
        self.style: Style | None = None
        self.broken = False
        self.projection: list[str] = []
        self.project_calls = 0
        self.clear_calls = 0
        self.rendered: list[list[str]] = []

    def set_style(self, style: Style) -> None:
        self.style = style
        if style.name in self.grids:
            self.cols, self.rows = self.grids[style.name]
        self.broken = style.name == "broken"

    def measure_reference_unit_box(self) -> Box:
        if self.broken:
            return Box(width=0.0, height=0.0)
        return Box(width=self.unit_width, height=1.0)

    def container_box(self) -> Box:
        return Box(width=float(self.cols), height=float(self.rows))

    def line_count(self, tokens: list[str]) -> int:
        lines = 0
        x = 0
        pending_space = False
        for tok in tokens:
            if is_space(tok):
                pending_space = x > 0
                continue
            gap = 1 if pending_space else 0
            if lines == 0:
                lines, x = 1, len(tok)
            elif x + gap + len(tok) > self.cols:
                lines, x = lines + 1, len(tok)
            else:
                x += gap + len(tok)
            pending_space = False
        return lines

    def project_tokens(self, tokens: list[str]) -> None:
        self.project_calls += 1
        self.projection = list(tokens)

    def projected_box(self) -> Box:
        return Box(width=float(self.cols), height=float(self.line_count(self.projection)))

    def clear_projection(self) -> None:
        self.clear_calls += 1
        self.projection = []

    def render_page(self, tokens: list[str]) -> Any:
        self.rendered.append(list(tokens))
        return "".join(tokens)


@pytest.fixture
def grid_paginator():
    """Factory: grid_paginator(cols, rows, **kw) -> (Paginator, GridRenderer)."""

    def make(cols: int, rows: int, **kwargs: Any) -> tuple[Paginator, GridRenderer]:
        renderer = GridRenderer(cols, rows, **kwargs)
        return Paginator(CapacityMeasurer(renderer)), renderer

    return make


@pytest.fixture
def make_grid():
    """Factory for bare GridRenderer instances."""
    return GridRenderer
