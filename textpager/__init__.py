"""Text pagination engine.

Splits free-form text into pages that fill a fixed container at the
current style, measured empirically through a renderer:
- pages.json (half-open character ranges over the original text)
- optional page images
- metrics.json / errors.jsonl

Hyphenation, justification and bidirectional text are out of scope.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
