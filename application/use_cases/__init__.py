"""
Application Use Cases for the plan engine service.

This package contains application-level use cases that orchestrate domain
services and coordinate between ports/adapters. Use cases are the entry
points for business operations.

Architecture follows Clean Architecture / Hexagonal pattern:
- Use cases orchestrate domain objects and repository ports
- Dependencies are injected via constructors for testability
- Use cases return result dataclasses, not API responses

Usage:
    from application.use_cases import (
        ResolveNavigationUseCase,
        ManageVariantsUseCase,
    )

    # Athlete navigation
    navigation = ResolveNavigationUseCase(snapshot_provider=provider)
    result = navigation.resolve(cursor, user_id="user-123")

    # Coach edits
    variants = ManageVariantsUseCase(block_repo=block_repo)
    result = variants.delete_variant("b1", "v1", user_id="coach-1", active_label="A")
"""

from application.use_cases.manage_variants import (
    BlockMutationResult,
    ManageVariantsUseCase,
    ScheduleResult,
    VariantMutationResult,
)
from application.use_cases.resolve_navigation import (
    PlanOverviewResult,
    ResolveNavigationResult,
    ResolveNavigationUseCase,
)

__all__ = [
    # ResolveNavigation
    "ResolveNavigationUseCase",
    "ResolveNavigationResult",
    "PlanOverviewResult",
    # ManageVariants
    "ManageVariantsUseCase",
    "VariantMutationResult",
    "BlockMutationResult",
    "ScheduleResult",
]
