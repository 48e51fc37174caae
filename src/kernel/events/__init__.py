"""
Event log infrastructure.

Append-only audit of progression decisions.
"""

from src.kernel.events.event_store import EventStore

__all__ = ["EventStore"]
