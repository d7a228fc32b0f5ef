"""Plan roster comparator.

Exposes the high-level ``run_plan_audit`` API and the comparison core for
programmatic use.
"""

from .compare import compare_name_sets, compare_sides, normalize_name
from .runner import AuditSession, run_plan_audit  # Public API for audits

__all__ = [
    "AuditSession",
    "compare_name_sets",
    "compare_sides",
    "normalize_name",
    "run_plan_audit",
]
