"""
FastAPI Dependency Providers for the plan engine API.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations. This
enables clean separation of concerns and easy testing with fake implementations.

Architecture:
- Settings and Supabase client are cached per-process (lru_cache)
- Repository and use case providers create new instances per-request
- Auth providers wrap backend.auth

Usage in routers:
    from api.deps import get_resolve_navigation_use_case, get_current_user

    @router.get("/workouts/{workout_id}/navigation/start")
    def start(
        workout_id: str,
        user_id: str = Depends(get_current_user),
        use_case: ResolveNavigationUseCase = Depends(get_resolve_navigation_use_case),
    ):
        return use_case.start(workout_id, user_id)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_snapshot_provider] = lambda: FakePlanSnapshotProvider()
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException
from supabase import Client, create_client

from application.ports import BlockRepository, PlanSnapshotProvider
from application.use_cases import ManageVariantsUseCase, ResolveNavigationUseCase
from backend.auth import (
    get_current_user as _get_current_user,
    get_optional_user as _get_optional_user,
)
from backend.settings import Settings, get_settings as _get_settings
from infrastructure import SupabaseBlockRepository, SupabasePlanSnapshotRepository


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Creates a Supabase client using credentials from settings.
    Returns None if credentials are not configured.
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase_client_required() -> Client:
    """
    Get Supabase client instance, raising if not configured.

    Raises:
        HTTPException: 503 if Supabase is not configured
    """
    client = get_supabase_client()
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Database not available. Supabase credentials not configured.",
        )
    return client


# =============================================================================
# Repository Providers
# =============================================================================


def get_snapshot_provider(
    client: Client = Depends(get_supabase_client_required),
) -> PlanSnapshotProvider:
    """
    Get PlanSnapshotProvider implementation.

    Returns a SupabasePlanSnapshotRepository instance with injected client.
    The return type is the Protocol to enable easy faking.
    """
    return SupabasePlanSnapshotRepository(client)


def get_block_repo(
    client: Client = Depends(get_supabase_client_required),
) -> BlockRepository:
    """Get BlockRepository implementation backed by Supabase."""
    return SupabaseBlockRepository(client)


# =============================================================================
# Use Case Providers
# =============================================================================


def get_resolve_navigation_use_case(
    snapshot_provider: PlanSnapshotProvider = Depends(get_snapshot_provider),
) -> ResolveNavigationUseCase:
    """Get ResolveNavigationUseCase with its snapshot provider."""
    return ResolveNavigationUseCase(snapshot_provider=snapshot_provider)


def get_manage_variants_use_case(
    block_repo: BlockRepository = Depends(get_block_repo),
    settings: Settings = Depends(get_settings),
) -> ManageVariantsUseCase:
    """Get ManageVariantsUseCase bounded by the configured session limit."""
    return ManageVariantsUseCase(
        block_repo=block_repo,
        max_sessions=settings.max_session_count,
    )


# =============================================================================
# Authentication Providers
# =============================================================================


async def get_current_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> str:
    """
    Get the current authenticated user ID.

    Wraps backend.auth.get_current_user for dependency injection.

    Raises:
        HTTPException: 401 if authentication fails
    """
    return await _get_current_user(authorization=authorization, x_api_key=x_api_key)


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> Optional[str]:
    """Get the current user ID if authenticated, None otherwise."""
    return await _get_optional_user(authorization=authorization, x_api_key=x_api_key)


# =============================================================================
# Exports
# =============================================================================

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
