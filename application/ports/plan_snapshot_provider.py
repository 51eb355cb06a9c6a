"""
Plan Snapshot Provider Interface (Port).

Defines how the application obtains one consistent structural snapshot of a
workout. Entitlement is checked by the provider (or the access-control
collaborator behind it); the engine never validates the principal itself.
Retrying transient fetch failures is the provider's responsibility.
"""
from typing import Protocol

from domain.models import WorkoutSnapshot


class PlanSnapshotProvider(Protocol):
    """
    Abstract interface for reading workout structure snapshots.

    Implementations raise typed domain errors instead of returning None:
    - NotFoundError if the workout or plan item does not exist
    - UnauthorizedAccessError if the principal lacks entitlement
    """

    def get_snapshot(
        self,
        workout_id: str,
        profile_id: str,
    ) -> WorkoutSnapshot:
        """
        Get the full structural tree of a workout.

        Args:
            workout_id: Workout UUID
            profile_id: Caller's principal (opaque to the engine)

        Returns:
            WorkoutSnapshot with plan items, blocks, variants, items and
            the exercise/protocol reference data they use
        """
        ...

    def get_snapshot_for_plan_item(
        self,
        plan_item_id: str,
        profile_id: str,
    ) -> WorkoutSnapshot:
        """
        Get the snapshot of the workout that owns a plan item.

        Args:
            plan_item_id: Plan item UUID
            profile_id: Caller's principal (opaque to the engine)

        Returns:
            WorkoutSnapshot of the parent workout
        """
        ...
