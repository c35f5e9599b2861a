from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from .measurer import CapacityMeasurer
from .paginator import Paginator, page_index_for_offset, render_content_for
from .renderer import Renderer
from .types import Page, Style

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    document: str
    style: Style
    pages: tuple[Page, ...]
    current_page: int = 0


@dataclass(frozen=True)
class PageView:
    index: int
    page: Page
    tokens: list[str]
    output: Any  # whatever the renderer produced for this page


class PaginationSession:
    """Owns the document, style and page list for one reader.

    State is an immutable snapshot that is swapped wholesale; a failed
    recompute (e.g. MeasurementUnavailable) leaves the previous snapshot.
    """

    def __init__(self, renderer: Renderer, style: Style):
        self.renderer = renderer
        self.paginator = Paginator(CapacityMeasurer(renderer))
        self.renderer.set_style(style)
        self._style = style
        self.state: SessionState | None = None

    @property
    def pages(self) -> list[Page]:
        return list(self.state.pages) if self.state else []

    def submit(self, text: str) -> SessionState:
        pages = self.paginator.paginate(text)
        self.state = SessionState(document=text, style=self._style, pages=tuple(pages))
        return self.state

    def set_style(self, style: Style) -> SessionState | None:
        previous = self._style
        self.renderer.set_style(style)
        if self.state is None:
            self._style = style
            return None

        try:
            pages = self.paginator.paginate(self.state.document)
        except Exception:
            self.renderer.set_style(previous)
            raise

        # Keep the reader on the text they were looking at.
        anchor = self.state.pages[self.state.current_page].start
        self._style = style
        self.state = SessionState(
            document=self.state.document,
            style=style,
            pages=tuple(pages),
            current_page=page_index_for_offset(pages, anchor),
        )
        logger.debug("restyled to %s: %d pages, current=%d", style.name, len(pages), self.state.current_page)
        return self.state

    def view(self, index: int) -> list[str]:
        if self.state is None:
            raise RuntimeError("no document submitted")
        return render_content_for(list(self.state.pages), index, self.state.document)

    def select_page(self, index: int) -> PageView:
        tokens = self.view(index)
        output = self.renderer.render_page(tokens)
        self.state = replace(self.state, current_page=index)
        return PageView(index=index, page=self.state.pages[index], tokens=tokens, output=output)
