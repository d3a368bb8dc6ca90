"""Structured trace events emitted by the layout engine."""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger("layout")

# Event kinds
DANGLING_RELATIONSHIP = "dangling_relationship"
FALLBACK_ROOT = "fallback_root"
UNREACHED_PERSON = "unreached_person"
GENERATIONS_BUILT = "generations_built"
FAMILY_UNIT_RESOLVED = "family_unit_resolved"
DESCENDANT_WIDTH = "descendant_width"
GENERATION_STARTED = "generation_started"
POSITION_ASSIGNED = "position_assigned"
POSITION_REASSIGNED = "position_reassigned"
OVERLAP_ADJUSTED = "overlap_adjusted"
ORPHANS_PLACED = "orphans_placed"
LAYOUT_CENTERED = "layout_centered"
EMPTY_INPUT = "empty_input"


@dataclass(frozen=True)
class TraceEvent:
    kind: str
    severity: int
    fields: dict = field(default_factory=dict)


class LayoutObserver:
    """Default observer: forwards every event to the ``layout`` logger."""

    def emit(self, kind: str, severity: int = logging.DEBUG, **fields) -> None:
        if logger.isEnabledFor(severity):
            details = ", ".join(f"{k}={v!r}" for k, v in fields.items())
            logger.log(severity, "%s: %s", kind, details)


class RecordingObserver(LayoutObserver):
    """Keeps events in memory so callers can inspect what the engine did."""

    def __init__(self):
        self.events: list[TraceEvent] = []

    def emit(self, kind: str, severity: int = logging.DEBUG, **fields) -> None:
        self.events.append(TraceEvent(kind, severity, fields))
        super().emit(kind, severity, **fields)

    def of_kind(self, kind: str) -> list[TraceEvent]:
        return [e for e in self.events if e.kind == kind]
