"""
Fake Repository Implementations for Testing.

This package provides in-memory fake implementations of the plan engine
ports for fast, isolated testing. No database or external dependencies
required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Snapshot builders and common workouts for test scenarios

Usage:
    from tests.fakes import FakePlanSnapshotProvider, circuit_workout

    provider = FakePlanSnapshotProvider()
    provider.seed([circuit_workout()])
"""
from typing import Optional, Sequence, Tuple

from domain.models import Block, Variant, VariantItem
from tests.fakes.block_repository import FakeBlockRepository
from tests.fakes.plan_snapshot_provider import FakePlanSnapshotProvider
from tests.fakes.snapshots import (
    SnapshotBuilder,
    circuit_workout,
    empty_workout,
    rest_only_workout,
    two_variant_workout,
)


# =============================================================================
# Factory Functions
# =============================================================================


def create_snapshot_provider(*snapshots) -> FakePlanSnapshotProvider:
    """
    Create a FakePlanSnapshotProvider seeded with the given snapshots.

    Defaults to the common test workouts when none are given.
    """
    provider = FakePlanSnapshotProvider()
    provider.seed(
        list(snapshots)
        or [circuit_workout(), two_variant_workout(), rest_only_workout(), empty_workout()]
    )
    return provider


def create_block_repo(
    *,
    block_id: str = "b1",
    labels: Sequence[str] = ("A",),
    items_per_variant: int = 2,
    name: Optional[str] = "Circuit",
    coach_id: Optional[str] = "coach-1",
) -> Tuple[FakeBlockRepository, Block]:
    """
    Create a FakeBlockRepository holding one block with labelled variants,
    owned by `coach_id`.

    Variant ids are "<block_id>-<label>"; item ids "<variant_id>-<n>".

    Returns:
        Tuple of (repository, block)
    """
    repo = FakeBlockRepository()
    block = Block(id=block_id, name=name, coach_id=coach_id)
    variants = []
    items = []
    for order, label in enumerate(labels):
        variant = Variant(
            id=f"{block_id}-{label}",
            block_id=block_id,
            variant_label=label,
            name=f"Variant {label}",
            sort_order=order,
        )
        variants.append(variant)
        for n in range(items_per_variant):
            items.append(
                VariantItem(
                    id=f"{variant.id}-{n}",
                    variant_id=variant.id,
                    exercise_id=f"ex-{label.lower()}{n}",
                    protocol_id="pr1",
                    sort_order=n,
                )
            )
    repo.seed_block(block, variants, items)
    return repo, block


__all__ = [
    # Fakes
    "FakePlanSnapshotProvider",
    "FakeBlockRepository",
    # Snapshot builders
    "SnapshotBuilder",
    "circuit_workout",
    "two_variant_workout",
    "rest_only_workout",
    "empty_workout",
    # Factories
    "create_snapshot_provider",
    "create_block_repo",
]
