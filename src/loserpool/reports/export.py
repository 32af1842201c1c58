"""CSV export of every pick and its weekly tokens."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Iterable, Sequence

from loserpool.config.weeks import WEEK_SLOTS
from loserpool.persistence import PickRecord


BASE_HEADERS = ("UserId", "Pick", "Status")


def export_picks_to_csv(picks: Sequence[PickRecord], *, slots: Iterable[str] | None = None) -> str:
    """One row per pick with one column per week slot holding the encoded token.

    Only slots that at least one pick has used are included unless ``slots``
    is given.
    """

    if slots is None:
        used = {slot for pick in picks for slot in pick.allocations}
        columns = tuple(slot for slot in WEEK_SLOTS if slot in used)
    else:
        columns = tuple(slots)

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow((*BASE_HEADERS, *columns))
    for pick in picks:
        row = [pick.user_id, pick.display_name, pick.status]
        for slot in columns:
            token = pick.token_for(slot)
            row.append(token.encode() if token else "")
        writer.writerow(row)
    return buffer.getvalue()
