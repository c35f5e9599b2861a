from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Box:
    width: float
    height: float


@dataclass(frozen=True)
class Page:
    start: int  # inclusive offset into the original text
    end: int  # exclusive
    forced: bool = False  # oversized: a single word wider than the page

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict[str, object]:
        return {"start": self.start, "end": self.end, "forced": self.forced}


@dataclass(frozen=True)
class Style:
    name: str
    font_size: int  # px
    line_spacing: float = 1.2
