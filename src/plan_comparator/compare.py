from __future__ import annotations

import re
from typing import Dict, Iterable, Sequence

from plan_comparator.model import SECTION_KEYS, Plan, PlanComparison, SectionComparison

_NON_NAME_CHARS = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_name(raw: str | None) -> str:
    """Return the comparison key for ``raw``.

    Drops everything except ASCII letters, digits and whitespace, collapses
    whitespace runs to one space and lowercases. An empty result means the
    input is not a name.
    """

    if not raw:
        return ""
    cleaned = _NON_NAME_CHARS.sub("", raw.strip())
    # Trim again: stripped punctuation can expose leading/trailing whitespace
    return _WHITESPACE_RUN.sub(" ", cleaned).strip().lower()


def _sort_key(name: str) -> tuple[str, str]:
    # Ties between case variants put lowercase first
    return (name.casefold(), name.swapcase())


def _representatives(names: Iterable[str]) -> Dict[str, str]:
    """Map each normalized key to the first raw spelling seen, in input order."""

    first_seen: Dict[str, str] = {}
    for name in names:
        key = normalize_name(name)
        if key and key not in first_seen:
            first_seen[key] = name
    return first_seen


def compare_name_sets(
    left_names: Sequence[str],
    right_names: Sequence[str],
) -> SectionComparison:
    """Classify names as present on both sides, left only or right only."""

    left_by_key = _representatives(left_names)
    right_by_key = _representatives(right_names)

    in_both = [
        left_by_key.get(key, key) for key in left_by_key if key in right_by_key
    ]
    only_left = [
        left_by_key.get(key, key) for key in left_by_key if key not in right_by_key
    ]
    only_right = [
        right_by_key.get(key, key) for key in right_by_key if key not in left_by_key
    ]

    exact_same = len(left_by_key) == len(right_by_key) and len(in_both) == len(
        left_by_key
    )

    return SectionComparison(
        in_both=tuple(sorted(in_both, key=_sort_key)),
        only_left=tuple(sorted(only_left, key=_sort_key)),
        only_right=tuple(sorted(only_right, key=_sort_key)),
        exact_same=exact_same,
    )


def _plans_by_name(plans: Iterable[Plan]) -> Dict[str, Plan]:
    by_name: Dict[str, Plan] = {}
    for plan in plans:
        name = plan.name.strip()
        if not name:
            continue  # Unnamed plans are treated as absent
        by_name[name] = plan  # Later duplicates replace earlier ones
    return by_name


def compare_sides(
    left_plans: Iterable[Plan],
    right_plans: Iterable[Plan],
) -> list[PlanComparison]:
    """Match plans by exact trimmed name and reconcile every section.

    Returns one comparison per plan name found on either side, sorted
    case-insensitively. A plan missing on one side compares against empty
    sections.
    """

    left_by_name = _plans_by_name(left_plans)
    right_by_name = _plans_by_name(right_plans)
    all_names = left_by_name.keys() | right_by_name.keys()

    empty = Plan(name="")
    results: list[PlanComparison] = []
    for name in sorted(all_names, key=_sort_key):
        left = left_by_name.get(name, empty)
        right = right_by_name.get(name, empty)
        sections = {
            key: compare_name_sets(left.names(key), right.names(key))
            for key in SECTION_KEYS
        }
        results.append(PlanComparison(plan_name=name, sections=sections))
    return results


__all__ = ["compare_name_sets", "compare_sides", "normalize_name"]
