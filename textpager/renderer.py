from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from PIL import Image, ImageDraw, ImageFont

from .tokens import is_space
from .types import Box, Style

logger = logging.getLogger(__name__)


class MeasurementUnavailable(RuntimeError):
    """The renderer cannot report a usable box at the current style."""


class Renderer:
    """Rendering capability the pagination engine measures against.

    The projection is off-screen scratch state: `project_tokens` replaces
    whatever was projected before, `clear_projection` empties it.
    """

    def set_style(self, style: Style) -> None:
        raise NotImplementedError

    def measure_reference_unit_box(self) -> Box:
        raise NotImplementedError

    def container_box(self) -> Box:
        raise NotImplementedError

    def project_tokens(self, tokens: list[str]) -> None:
        raise NotImplementedError

    def projected_box(self) -> Box:
        raise NotImplementedError

    def clear_projection(self) -> None:
        raise NotImplementedError

    def render_page(self, tokens: list[str]) -> Any:
        raise NotImplementedError


def _get_font(font_path: str | None, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load the configured font, falling back to common system fonts."""
    candidates = [font_path] if font_path else []
    candidates += ["DejaVuSans.ttf", "arial.ttf", "Arial.ttf", "FreeSans.ttf"]
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default(size=size)


@dataclass
class PillowRenderer(Renderer):
    """Renderer backed by Pillow fonts.

    Lines wrap greedily at word boundaries. Spaces at the end of a line hang
    (they take no room), and a word wider than the container overflows on a
    line of its own.
    """

    width: int  # container content width, px
    height: int  # container content height, px
    style: Style
    font_path: str | None = None
    reference_unit: str = "i"
    margin: int = 0
    background: str = "white"
    foreground: str = "black"
    _font: Any = field(default=None, init=False, repr=False)
    _widths: dict[str, float] = field(default_factory=dict, init=False, repr=False)
    _projection: list[str] = field(default_factory=list, init=False, repr=False)
    _marks: list[tuple[int, float]] = field(default_factory=list, init=False, repr=False)
    _projected: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"container must be positive: {self.width}x{self.height}")
        self.set_style(self.style)

    def set_style(self, style: Style) -> None:
        if style.font_size <= 0:
            raise ValueError(f"font_size must be positive: {style.font_size}")
        self.style = style
        self._font = _get_font(self.font_path, style.font_size)
        self._widths = {}
        self.clear_projection()
        logger.debug("style set: %s (%spx)", style.name, style.font_size)

    # --- metrics -----------------------------------------------------------

    def _text_width(self, text: str) -> float:
        w = self._widths.get(text)
        if w is None:
            w = float(self._font.getlength(text))
            self._widths[text] = w
        return w

    def line_height(self) -> float:
        try:
            ascent, descent = self._font.getmetrics()
            base = ascent + descent
        except AttributeError:
            # bitmap fonts have no metrics; use the ink box of tall glyphs
            x0, y0, x1, y1 = self._font.getbbox("Ag")
            base = y1 - y0
        return float(base) * float(self.style.line_spacing)

    def measure_reference_unit_box(self) -> Box:
        w = self._text_width(self.reference_unit)
        h = self.line_height()
        if w <= 0 or h <= 0:
            raise MeasurementUnavailable(f"reference unit {self.reference_unit!r} has no size: {w}x{h}")
        return Box(width=w, height=h)

    def container_box(self) -> Box:
        return Box(width=float(self.width), height=float(self.height))

    # --- layout ------------------------------------------------------------

    def layout_lines(
        self, tokens: list[str], marks: list[tuple[int, float]] | None = None
    ) -> list[list[str]]:
        """Wrap tokens into lines of words; space tokens only separate words.

        When `marks` is given, it receives one `(lines, widest)` entry per
        token: the line count and widest line width after laying out the
        prefix ending at that token. Greedy wrapping never revisits earlier
        lines, so entry k-1 is also the layout of `tokens[:k]`.
        """
        lines: list[list[str]] = []
        line: list[str] = []
        x = 0.0
        widest = 0.0
        space_w = self._text_width(" ")
        pending_space = False
        for tok in tokens:
            if is_space(tok):
                pending_space = bool(line)
            else:
                w = self._text_width(tok)
                gap = space_w if pending_space else 0.0
                if line and x + gap + w > self.width:
                    lines.append(line)
                    line = [tok]
                    x = w
                else:
                    line.append(tok)
                    x += gap + w
                pending_space = False
                widest = max(widest, x)
            if marks is not None:
                marks.append((len(lines) + (1 if line else 0), widest))
        if line:
            lines.append(line)
        return lines

    # --- projection --------------------------------------------------------

    def project_tokens(self, tokens: list[str]) -> None:
        tokens = list(tokens)
        n = len(tokens)
        if n <= len(self._projection) and tokens == self._projection[:n]:
            # a prefix of the laid-out projection: reuse its marks
            self._projected = n
            return
        marks: list[tuple[int, float]] = []
        self.layout_lines(tokens, marks)
        self._projection = tokens
        self._marks = marks
        self._projected = n

    def projected_box(self) -> Box:
        if self._projected == 0:
            return Box(width=0.0, height=0.0)
        lines, widest = self._marks[self._projected - 1]
        return Box(width=widest, height=lines * self.line_height())

    def clear_projection(self) -> None:
        self._projection = []
        self._marks = []
        self._projected = 0

    # --- drawing -----------------------------------------------------------

    def render_page(self, tokens: list[str]) -> Image.Image:
        size = (self.width + 2 * self.margin, self.height + 2 * self.margin)
        img = Image.new("RGB", size, color=self.background)
        draw = ImageDraw.Draw(img)
        lh = self.line_height()
        for i, words in enumerate(self.layout_lines(tokens)):
            y = self.margin + i * lh
            draw.text((self.margin, y), " ".join(words), fill=self.foreground, font=self._font)
        return img
