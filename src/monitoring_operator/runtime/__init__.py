"""
Runtime package - process lifecycle for the monitoring operator.

Contains:
- group.py: shared-fate orchestration of concurrently running actors
- actors.py: the signal watcher, server and reconciler actors
"""

from .actors import ReconcilerActor, ServingActor, SignalWatcher
from .group import Actor, Group

__all__ = [
    "Actor",
    "Group",
    "ReconcilerActor",
    "ServingActor",
    "SignalWatcher",
]
