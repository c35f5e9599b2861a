from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .types import Style
from .utils import load_json

DEFAULT_STYLES: dict[str, dict[str, Any]] = {
    "small": {"font_size": 14, "line_spacing": 1.2},
    "medium": {"font_size": 18, "line_spacing": 1.2},
    "large": {"font_size": 24, "line_spacing": 1.25},
}


@dataclass(frozen=True)
class EngineConfig:
    container: dict[str, Any] = field(default_factory=lambda: {"width": 600, "height": 800, "margin": 24})
    styles: dict[str, dict[str, Any]] = field(default_factory=lambda: dict(DEFAULT_STYLES))
    render: dict[str, Any] = field(default_factory=dict)
    default_style: str = "medium"

    def style(self, name: str | None = None) -> Style:
        name = name or self.default_style
        entry = self.styles.get(name)
        if entry is None:
            raise ValueError(f"unknown style: {name} (known: {', '.join(sorted(self.styles))})")
        font_size = int(entry.get("font_size", 0))
        if font_size <= 0:
            raise ValueError(f"style {name}: font_size must be positive")
        return Style(name=name, font_size=font_size, line_spacing=float(entry.get("line_spacing", 1.2)))


def load_config(config_path: str | Path | None) -> EngineConfig:
    if config_path is None:
        return EngineConfig()
    data = load_json(config_path)
    defaults = EngineConfig()
    return EngineConfig(
        container={**defaults.container, **data.get("container", {})},
        styles=data.get("styles", defaults.styles),
        render=data.get("render", {}),
        default_style=data.get("default_style", defaults.default_style),
    )
