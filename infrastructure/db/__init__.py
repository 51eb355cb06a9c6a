"""
Infrastructure Database Layer.

This package provides Supabase-backed implementations of the repository
interfaces defined in application.ports. These implementations can be
injected into use cases and routers for clean separation of concerns and
testability.

Usage:
    from supabase import create_client
    from infrastructure.db import (
        SupabasePlanSnapshotRepository,
        SupabaseBlockRepository,
    )

    # Create Supabase client
    client = create_client(SUPABASE_URL, SUPABASE_KEY)

    # Instantiate repositories with injected client
    snapshots = SupabasePlanSnapshotRepository(client)
    blocks = SupabaseBlockRepository(client)
"""

from infrastructure.db.block_repository import SupabaseBlockRepository
from infrastructure.db.plan_snapshot_repository import SupabasePlanSnapshotRepository

__all__ = [
    # Structure snapshots
    "SupabasePlanSnapshotRepository",
    # Block/variant persistence
    "SupabaseBlockRepository",
]
