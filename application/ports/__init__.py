"""
Repository Interfaces (Ports) for the plan engine service.

This package defines abstract interfaces that decouple domain logic from
infrastructure (database, external services). Implementations are provided
in the infrastructure layer.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the domain needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import PlanSnapshotProvider

    class NavigationService:
        def __init__(self, snapshots: PlanSnapshotProvider):
            self.snapshots = snapshots
"""

# Structural snapshots (read side)
from application.ports.plan_snapshot_provider import PlanSnapshotProvider

# Block/variant persistence (write side)
from application.ports.block_repository import BlockRepository

__all__ = [
    "PlanSnapshotProvider",
    "BlockRepository",
]
