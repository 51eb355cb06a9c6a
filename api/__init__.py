"""
API package for the plan engine service.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_supabase_client,
    get_supabase_client_required,
    get_snapshot_provider,
    get_block_repo,
    get_resolve_navigation_use_case,
    get_manage_variants_use_case,
    get_current_user,
    get_optional_user,
)

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Repositories
    "get_snapshot_provider",
    "get_block_repo",
    # Use cases
    "get_resolve_navigation_use_case",
    "get_manage_variants_use_case",
    # Authentication
    "get_current_user",
    "get_optional_user",
]
