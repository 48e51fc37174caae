"""
Kernel layer

Foundational pieces the engines build on:
- Data models for progress, topics and the audit log
- Append-only event store
- Error taxonomy

Invariants:
- Progression decisions that change stored state are logged before commit
- Event log rows are never updated or deleted
"""

from src.kernel.models import EventLog, EventType
from src.kernel.errors import (
    CollaboratorError,
    ConfigurationError,
    GateBusyError,
    GenerationError,
    GradingError,
    InvalidTransitionError,
    PrerequisiteLookupError,
    ProgressionError,
)

__all__ = [
    "EventLog",
    "EventType",
    "CollaboratorError",
    "ConfigurationError",
    "GateBusyError",
    "GenerationError",
    "GradingError",
    "InvalidTransitionError",
    "PrerequisiteLookupError",
    "ProgressionError",
]
