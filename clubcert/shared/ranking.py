from __future__ import annotations

import logging
from typing import Iterable, NamedTuple

from ..models import CompetitionRegistration

logger = logging.getLogger("clubcert.ranking")


class RankedEntry(NamedTuple):
    registration: CompetitionRegistration
    rank: int
    score: float
    category_label: str


def ordinal_suffix(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def ordinal(n: int) -> str:
    return f"{n}{ordinal_suffix(n)}"


def category_label(registration: CompetitionRegistration) -> str:
    category = registration.category
    if category is None:
        return "General"
    return category.display_label


def _score(registration: CompetitionRegistration) -> float:
    return registration.qualification_score or 0


def rank_by_category(
    registrations: Iterable[CompetitionRegistration],
) -> dict[str, list[RankedEntry]]:
    """Group registrations by category label and rank each group by score.

    Categories that resolve to the same label share one ranking. Equal scores
    keep their incoming relative order (the sort is stable), so callers must
    pass registrations in a reproducible order.
    """
    groups: dict[str, list[CompetitionRegistration]] = {}
    category_ids: dict[str, set] = {}
    for registration in registrations:
        label = category_label(registration)
        groups.setdefault(label, []).append(registration)
        category_ids.setdefault(label, set()).add(registration.category_id)

    ranked: dict[str, list[RankedEntry]] = {}
    for label, members in groups.items():
        ids = category_ids[label]
        if len(ids) > 1:
            logger.warning(
                "[CERT-RANK] merged categories label=%r category_ids=%s",
                label,
                sorted(ids),
            )
        ordered = sorted(members, key=_score, reverse=True)
        ranked[label] = [
            RankedEntry(registration, position, _score(registration), label)
            for position, registration in enumerate(ordered, start=1)
        ]
    return ranked
