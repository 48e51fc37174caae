"""Orchestration layer - prerequisite gate state machine and session registries."""

from src.orchestration.prerequisite_gate import (
    GateState,
    PrerequisiteGate,
    can_transition,
    valid_transitions,
)
from src.orchestration.registry import GateRegistry, PracticeSessionRegistry, Registry

__all__ = [
    "GateState",
    "PrerequisiteGate",
    "can_transition",
    "valid_transitions",
    "GateRegistry",
    "PracticeSessionRegistry",
    "Registry",
]
