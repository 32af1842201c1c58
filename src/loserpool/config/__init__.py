"""Configuration helpers for season phases and week slots."""

from .weeks import (
    PHASE_ORDER,
    WEEK_SLOTS,
    Phase,
    PhaseRules,
    display_name,
    get_phase,
    label_for,
    parse_label,
    phase_rules,
    slot_for,
    slot_for_label,
    slot_for_participant,
)

__all__ = [
    "PHASE_ORDER",
    "WEEK_SLOTS",
    "Phase",
    "PhaseRules",
    "display_name",
    "get_phase",
    "label_for",
    "parse_label",
    "phase_rules",
    "slot_for",
    "slot_for_label",
    "slot_for_participant",
]
