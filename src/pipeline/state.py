# src/pipeline/state.py — v2
"""Pipeline state passed from stage to stage.

Stages never mutate a state in place; each returns an updated copy.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from jekyllbuild.cache.models import CacheKeyState
from jekyllbuild.core.models import ResolvedLocations, RunConfiguration


class PipelineState(BaseModel):
    """Accumulated results of one build run."""

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    config: RunConfiguration

    # === RESOLVE ===
    locations: ResolvedLocations | None = None

    # === CACHE ===
    cache: CacheKeyState | None = None

    # === INSTALL ===
    install_failed: bool = False

    def require_locations(self) -> ResolvedLocations:
        """Locations, which every stage after resolution depends on."""
        if self.locations is None:
            raise RuntimeError("Locations have not been resolved")
        return self.locations
