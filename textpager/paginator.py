from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass

from .measurer import CapacityMeasurer
from .tokens import drop_partial_word, is_space, normalize_chunk, normalize_text, space_end, split_tokens, word_end
from .types import Page

logger = logging.getLogger(__name__)


@dataclass
class Paginator:
    """Splits a document into pages that each fill one container.

    Every page is a half-open range over the original text. Pages are
    contiguous and together cover the whole document, so slicing and
    joining them gives back the exact input.
    """

    measurer: CapacityMeasurer

    def paginate(self, document: str) -> list[Page]:
        if not document:
            return [Page(start=0, end=0)]

        capacity = self.measurer.capacity_units()
        pages: list[Page] = []
        start = 0
        while start < len(document):
            page = self._next_page(document, start, capacity)
            if page.end <= start:
                raise RuntimeError(f"pagination stalled at offset {start}")
            pages.append(page)
            start = page.end

        logger.info(
            "paginated %d chars into %d pages (capacity=%d, forced=%d)",
            len(document),
            len(pages),
            capacity,
            sum(1 for p in pages if p.forced),
        )
        return pages

    def _next_page(self, document: str, start: int, capacity: int) -> Page:
        body = space_end(document, start)
        if body >= len(document):
            # whitespace-only document
            return Page(start=start, end=len(document))

        # Rough slice: characters, not tokens, so the real fit point usually
        # lies inside. Whitespace runs shrink under normalization, so when the
        # whole slice fits and text remains, widen it and measure again.
        span = capacity
        while True:
            limit = body + span
            chunk = document[start:limit]
            if limit < len(document) and not is_space(chunk[-1]) and not is_space(document[limit]):
                chunk = drop_partial_word(chunk)

            normalized = normalize_chunk(chunk)
            if not normalized.tokens:
                words = 0
                break
            words = self.measurer.fit_count(normalized.tokens)
            if words < len(normalized.tokens) or limit >= len(document):
                break
            span += capacity

        if words == 0:
            # Nothing fits: the first word alone overflows the page.
            end = word_end(document, body)
            forced = True
            logger.warning("oversized word at offset %d (%d chars); forcing a page", body, end - body)
        else:
            end = start + normalized.consumed_length(words)
            forced = False

        # The whitespace after the last word hangs at the end of this page.
        return Page(start=start, end=space_end(document, end), forced=forced)


def render_content_for(pages: list[Page], index: int, document: str) -> list[str]:
    """Normalized word/space tokens of one page, ready for drawing."""
    if not 0 <= index < len(pages):
        raise IndexError(f"page index out of range: {index} (pages={len(pages)})")
    page = pages[index]
    return split_tokens(normalize_text(document[page.start : page.end]))


def page_index_for_offset(pages: list[Page], offset: int) -> int:
    """Index of the page containing offset (clamped to the last page)."""
    if not pages:
        raise IndexError("no pages")
    starts = [p.start for p in pages]
    return max(0, min(len(pages) - 1, bisect.bisect_right(starts, offset) - 1))
