from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .renderer import MeasurementUnavailable, Renderer

logger = logging.getLogger(__name__)


@dataclass
class CapacityMeasurer:
    """Answers how much content fits one page under the renderer's current style."""

    renderer: Renderer

    def capacity_units(self) -> int:
        """Coarse upper bound on units per page: cells of one reference unit.

        Overshoots on purpose; `fit_count` trims the excess.
        """
        unit = self.renderer.measure_reference_unit_box()
        container = self.renderer.container_box()
        if unit.width <= 0 or unit.height <= 0:
            raise MeasurementUnavailable(f"reference unit not laid out: {unit.width}x{unit.height}")
        if container.width <= 0 or container.height <= 0:
            raise MeasurementUnavailable(f"container not laid out: {container.width}x{container.height}")

        per_line = math.ceil(container.width / unit.width)
        per_column = math.ceil(container.height / unit.height)
        return per_line * per_column

    def fit_count(self, tokens: list[str]) -> int:
        """Number of leading tokens that render inside the container."""
        limit = self.capacity_units()
        count = min(len(tokens), limit)
        container_height = self.renderer.container_box().height
        try:
            self.renderer.project_tokens(tokens[:count])
            while count > 0 and self.renderer.projected_box().height > container_height:
                count -= 1
                self.renderer.project_tokens(tokens[:count])
        finally:
            self.renderer.clear_projection()

        logger.debug("fit_count: %d of %d tokens (limit=%d)", count, len(tokens), limit)
        return count
