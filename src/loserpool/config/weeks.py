"""Season phases and the allow-listed week slots picks are stored under."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from loserpool.errors import ValidationError


class Phase(str, Enum):
    PRE = "PRE"
    REG = "REG"
    POST = "POST"


@dataclass(frozen=True)
class PhaseRules:
    phase: Phase
    weeks: int
    slot_prefix: str
    display: str


_PHASE_RULES: Dict[Phase, PhaseRules] = {
    Phase.PRE: PhaseRules(phase=Phase.PRE, weeks=3, slot_prefix="pre", display="Pre Season"),
    Phase.REG: PhaseRules(phase=Phase.REG, weeks=18, slot_prefix="reg", display="Regular Season"),
    Phase.POST: PhaseRules(phase=Phase.POST, weeks=4, slot_prefix="post", display="Post Season"),
}

PHASE_ORDER: Tuple[Phase, ...] = (Phase.PRE, Phase.REG, Phase.POST)

# Every slot name that may ever be written. Nothing outside this tuple is
# accepted by the resolver or by the allocations table CHECK constraint.
WEEK_SLOTS: Tuple[str, ...] = tuple(
    f"{_PHASE_RULES[phase].slot_prefix}{week}"
    for phase in PHASE_ORDER
    for week in range(1, _PHASE_RULES[phase].weeks + 1)
)

_LABEL_RE = re.compile(r"^(PRE|REG|POST)(\d{1,2})$")


def get_phase(value: Union[str, Phase]) -> Phase:
    """Coerce ``value`` into a :class:`Phase`, raising ValidationError if unknown."""

    if isinstance(value, Phase):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"phase must be a string, got {type(value).__name__}")
    try:
        return Phase(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown season phase {value!r}") from None


def phase_rules(phase: Union[str, Phase]) -> PhaseRules:
    return _PHASE_RULES[get_phase(phase)]


def _check_week(phase: Phase, week: object) -> int:
    if isinstance(week, bool) or not isinstance(week, int):
        raise ValidationError(f"week must be an integer, got {week!r}")
    limit = _PHASE_RULES[phase].weeks
    if week < 1 or week > limit:
        raise ValidationError(f"{phase.value} week {week} is out of range (1-{limit})")
    return week


def slot_for(phase: Union[str, Phase], week: int) -> str:
    """Map (phase, week) to its week slot, e.g. ``("REG", 7) -> "reg7"``."""

    resolved = get_phase(phase)
    number = _check_week(resolved, week)
    slot = f"{_PHASE_RULES[resolved].slot_prefix}{number}"
    if slot not in WEEK_SLOTS:  # pragma: no cover - guarded by _check_week
        raise ValidationError(f"Week slot {slot!r} is not allow-listed")
    return slot


def slot_for_participant(phase: Union[str, Phase], week: int, *, is_tester: bool) -> str:
    """Resolve the slot for a participant.

    Preseason is only open to testers; everyone else is parked on REG1 until
    the regular season starts.
    """

    resolved = get_phase(phase)
    if resolved is Phase.PRE and not is_tester:
        _check_week(resolved, week)
        return slot_for(Phase.REG, 1)
    return slot_for(resolved, week)


def label_for(phase: Union[str, Phase], week: int) -> str:
    resolved = get_phase(phase)
    return f"{resolved.value}{_check_week(resolved, week)}"


def parse_label(label: str) -> Tuple[Phase, int]:
    """Split a season label such as ``"REG7"`` into ``(Phase.REG, 7)``."""

    if not isinstance(label, str):
        raise ValidationError(f"season label must be a string, got {label!r}")
    match = _LABEL_RE.match(label.strip().upper())
    if match is None:
        raise ValidationError(f"Season label must look like 'REG7', got {label!r}")
    phase = Phase(match.group(1))
    return phase, _check_week(phase, int(match.group(2)))


def slot_for_label(label: str) -> str:
    phase, week = parse_label(label)
    return slot_for(phase, week)


def display_name(phase: Union[str, Phase], week: int) -> str:
    resolved = get_phase(phase)
    return f"{_PHASE_RULES[resolved].display} : Week {_check_week(resolved, week)}"


def season_week_index(phase: Union[str, Phase], week: int) -> int:
    """Zero-based position of (phase, week) across the whole season."""

    resolved = get_phase(phase)
    offset = 0
    for candidate in PHASE_ORDER:
        if candidate is resolved:
            return offset + _check_week(resolved, week) - 1
        offset += _PHASE_RULES[candidate].weeks
    raise ValidationError(f"Unknown season phase {phase!r}")  # pragma: no cover


def from_season_week_index(index: int) -> Tuple[Phase, int]:
    """Inverse of :func:`season_week_index`, clamped to the season bounds."""

    index = max(0, min(index, len(WEEK_SLOTS) - 1))
    for phase in PHASE_ORDER:
        weeks = _PHASE_RULES[phase].weeks
        if index < weeks:
            return phase, index + 1
        index -= weeks
    raise AssertionError("unreachable")  # pragma: no cover
