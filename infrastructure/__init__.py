"""
Infrastructure Layer for the plan engine service.

This package contains concrete implementations of repository interfaces:
- db/: Supabase database implementations
"""

# Re-export database repositories for convenient access
from infrastructure.db import (
    SupabaseBlockRepository,
    SupabasePlanSnapshotRepository,
)

__all__ = [
    "SupabasePlanSnapshotRepository",
    "SupabaseBlockRepository",
]
