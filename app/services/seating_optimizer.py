"""
Greedy seating optimizer

Guests with the most preferences are placed first. Each guest goes to the
open table with the highest score:

    +10 per preferred guest already at the table
    -20 per avoided guest already at the table
    +1  per guest already at the table (fills partial tables first)

Ties go to the earlier table. A guest whose best score is negative, or who
finds every table full, lands in the unassigned pool. The bonus and penalty
are not capped per table.
"""

import logging
from typing import Dict, List, Optional, Sequence

from app.schemas.seating import (
    GuestRef,
    SeatedGuest,
    SeatingArrangement,
    SeatingPreferenceIn,
    SeatingTable,
)
from app.services.seating_model import can_accommodate

logger = logging.getLogger(__name__)

PREFER_BONUS = 10
AVOID_PENALTY = 20


def constraint_density(preference: Optional[SeatingPreferenceIn]) -> int:
    if preference is None:
        return 0
    return len(preference.prefer_with) + len(preference.avoid_with)


def score_table(table: SeatingTable, preference: Optional[SeatingPreferenceIn]) -> int:
    seated_ids = {guest.id for guest in table.guests}
    score = 0
    if preference is not None:
        score += PREFER_BONUS * sum(1 for guest_id in preference.prefer_with if guest_id in seated_ids)
        score -= AVOID_PENALTY * sum(1 for guest_id in preference.avoid_with if guest_id in seated_ids)
    return score + table.occupancy


def optimize_seating(
    tables: Sequence[SeatingTable],
    guests: Sequence[GuestRef],
    preferences: Optional[Sequence[SeatingPreferenceIn]] = None,
) -> SeatingArrangement:
    """Build a complete arrangement from scratch

    Input order matters: it breaks ties between equally constrained guests and
    between equally scored tables, so identical inputs give identical output.
    """
    placed = [table.model_copy(update={"guests": []}, deep=True) for table in tables]
    unassigned: List[GuestRef] = []
    preference_map: Dict[str, SeatingPreferenceIn] = {p.guest_id: p for p in preferences or []}

    # sorted() is stable, so equal densities keep input order
    ordered = sorted(guests, key=lambda g: constraint_density(preference_map.get(g.id)), reverse=True)

    for guest in ordered:
        preference = preference_map.get(guest.id)
        best_table = None
        best_score = None

        for table in placed:
            if not can_accommodate(table):
                continue
            score = score_table(table, preference)
            if best_score is None or score > best_score:
                best_score = score
                best_table = table

        if best_table is not None and best_score >= 0:
            best_table.guests.append(
                SeatedGuest(id=guest.id, name=guest.name, seat_number=best_table.occupancy + 1)
            )
        else:
            unassigned.append(GuestRef(id=guest.id, name=guest.name))

    arrangement = SeatingArrangement(tables=placed, unassigned_guests=unassigned)
    seated = sum(table.occupancy for table in placed)
    logger.info(
        f"Optimized seating for {len(guests)} guests across {len(placed)} tables: "
        f"{seated} seated, {len(unassigned)} unassigned"
    )
    return arrangement
