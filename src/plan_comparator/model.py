"""Domain models for plan roster reconciliation.

These dataclasses represent the entities shared throughout the tool: plans
entered for each source, the per-section comparison outcome, and the workbook
model handed to the spreadsheet serializer.
"""

from __future__ import annotations  # Postponed evaluation of annotations (PEP 563)

from dataclasses import dataclass, field  # Dataclass utilities
from typing import Literal, Mapping  # Constrained string types for clarity

SectionKey = Literal["customerOnly", "invoiceOnly", "unreconciled", "reconciled"]
StatusLabel = Literal["Exact match", "Partial overlap", "No overlap", "Empty on both"]

# Display order used by the text report
SECTION_KEYS: tuple[SectionKey, ...] = (
    "customerOnly",
    "invoiceOnly",
    "unreconciled",
    "reconciled",
)
SECTION_TITLES: dict[str, str] = {
    "customerOnly": "Customer Only",
    "invoiceOnly": "Invoice Only",
    "unreconciled": "Unreconciled",
    "reconciled": "Reconciled",
}


@dataclass(frozen=True, slots=True)
class SideLabels:
    """Display names of the two sources being reconciled."""

    left: str = "OneKonnect"
    right: str = "Puzzle"

    @property
    def only_left(self) -> str:
        return f"Only {self.left}"

    @property
    def only_right(self) -> str:
        return f"Only {self.right}"


@dataclass(frozen=True, slots=True)
class Plan:
    """A named plan with its raw names per section for one source."""

    name: str  # Plan name as entered (e.g., "Dental")
    sections: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def names(self, key: str) -> tuple[str, ...]:
        """Return the raw names for ``key``; absent sections read as empty."""
        return tuple(self.sections.get(key, ()))


@dataclass(frozen=True, slots=True)
class SectionComparison:
    """Outcome of reconciling one section of one plan."""

    in_both: tuple[str, ...] = ()  # Left representative spellings
    only_left: tuple[str, ...] = ()
    only_right: tuple[str, ...] = ()
    exact_same: bool = False

    @property
    def status(self) -> StatusLabel:
        if self.exact_same:
            return "Exact match"
        if self.in_both:
            return "Partial overlap"
        if self.only_left or self.only_right:
            return "No overlap"
        return "Empty on both"


@dataclass(frozen=True, slots=True)
class PlanComparison:
    """Per-section comparisons for one plan name seen on either side."""

    plan_name: str
    sections: Mapping[str, SectionComparison] = field(default_factory=dict)


@dataclass(slots=True)
class Sheet:
    """A named worksheet built from a grid of strings."""

    name: str
    grid: list[list[str]] = field(default_factory=list)


Workbook = list[Sheet]  # Ordered sheets, prior to binary serialization


__all__ = [
    "Plan",
    "PlanComparison",
    "SECTION_KEYS",
    "SECTION_TITLES",
    "SectionComparison",
    "SectionKey",
    "Sheet",
    "SideLabels",
    "StatusLabel",
    "Workbook",
]
