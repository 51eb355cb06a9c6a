"""
Supabase implementation of PlanSnapshotProvider.

Reads the full structure of one workout (plan items, blocks, variants,
variant items, session schedules and the exercise/protocol rows they
reference) and assembles it into a WorkoutSnapshot. Entitlement of the
calling profile is checked through the `can_profile_access_workout` RPC
before any structure is read. The client runs with the service-role key,
so the profile id is passed explicitly rather than taken from auth.uid().
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client

from domain.converters import db_rows_to_snapshot
from domain.exceptions import NotFoundError, UnauthorizedAccessError
from domain.models import WorkoutSnapshot

logger = logging.getLogger(__name__)

WORKOUT_COLUMNS = "id, title, short_description, cover_image_url, is_archived"
EXERCISE_COLUMNS = "id, title, short_description, long_description, cover_image_url, youtube_url"
PROTOCOL_COLUMNS = "id, name, description, sets, repetitions, intensity_value, intensity_type"
ACCESS_RPC = "can_profile_access_workout"


class SupabasePlanSnapshotRepository:
    """
    Supabase implementation of PlanSnapshotProvider protocol.

    All Supabase query logic for structure snapshots is encapsulated here.
    The client is injected via constructor for testability.
    """

    def __init__(self, client: Client, *, check_access: bool = True):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected, not global)
            check_access: Whether to call the access-control RPC
        """
        self._client = client
        self._check_access = check_access

    # =========================================================================
    # PlanSnapshotProvider Protocol Methods
    # =========================================================================

    def get_snapshot(self, workout_id: str, profile_id: str) -> WorkoutSnapshot:
        """Get the full structural tree of a workout."""
        try:
            result = (
                self._client.table("workouts")
                .select(WORKOUT_COLUMNS)
                .eq("id", workout_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to get workout {workout_id}: {e}")
            raise

        if not result.data:
            raise NotFoundError(f"Workout '{workout_id}' not found")
        workout_row = result.data[0]

        self._ensure_access(workout_id, profile_id)

        try:
            plan_item_rows = self._select_in("workout_plan_items", "*", "workout_id", [workout_id], order="sort_order")

            block_ids = self._ids(row.get("item_id") for row in plan_item_rows if row.get("item_type") == "block")
            block_rows = self._select_in("blocks", "*", "id", block_ids)
            variant_rows = self._select_in("block_variants", "*", "block_id", block_ids, order="sort_order")

            variant_ids = self._ids(row.get("id") for row in variant_rows)
            item_rows = self._select_in("block_items", "*", "variant_id", variant_ids, order="sort_order")
            schedule_rows = self._select_in("session_schedules", "*", "block_id", block_ids, order="session_number")

            exercise_ids = self._ids(
                [row.get("item_id") for row in plan_item_rows if row.get("item_type") == "exercise"]
                + [row.get("exercise_id") for row in item_rows]
            )
            protocol_ids = self._ids(row.get("protocol_id") for row in item_rows)
            exercise_rows = self._select_in("exercises", EXERCISE_COLUMNS, "id", exercise_ids)
            protocol_rows = self._select_in("protocols", PROTOCOL_COLUMNS, "id", protocol_ids)
        except Exception as e:
            logger.error(f"Failed to read structure of workout {workout_id}: {e}")
            raise

        logger.debug(
            f"Snapshot for workout {workout_id}: {len(plan_item_rows)} plan items, "
            f"{len(block_rows)} blocks, {len(variant_rows)} variants, {len(item_rows)} items"
        )
        return db_rows_to_snapshot(
            workout_row,
            plan_item_rows,
            block_rows=block_rows,
            variant_rows=variant_rows,
            item_rows=item_rows,
            exercise_rows=exercise_rows,
            protocol_rows=protocol_rows,
            schedule_rows=schedule_rows,
        )

    def get_snapshot_for_plan_item(self, plan_item_id: str, profile_id: str) -> WorkoutSnapshot:
        """Get the snapshot of the workout that owns a plan item."""
        try:
            result = (
                self._client.table("workout_plan_items")
                .select("id, workout_id")
                .eq("id", plan_item_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to get plan item {plan_item_id}: {e}")
            raise

        if not result.data:
            raise NotFoundError(f"Plan item '{plan_item_id}' not found")
        return self.get_snapshot(str(result.data[0]["workout_id"]), profile_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _ensure_access(self, workout_id: str, profile_id: str) -> None:
        """Ask the access-control RPC whether `profile_id` may read the workout."""
        if not self._check_access:
            return
        try:
            result = self._client.rpc(
                ACCESS_RPC,
                {"workout_id_param": workout_id, "user_id_param": profile_id},
            ).execute()
        except Exception as e:
            logger.error(f"Access check failed for workout {workout_id}: {e}")
            raise

        if not result.data:
            logger.warning(f"Profile {profile_id} may not access workout {workout_id}")
            raise UnauthorizedAccessError(f"No access to workout '{workout_id}'")

    def _select_in(
        self,
        table: str,
        columns: str,
        column: str,
        values: Sequence[str],
        *,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Select rows whose `column` is one of `values` (no query when empty)."""
        if not values:
            return []
        query = self._client.table(table).select(columns).in_(column, list(values))
        if order:
            query = query.order(order)
        result = query.execute()
        return result.data or []

    @staticmethod
    def _ids(values) -> List[str]:
        """Deduplicate ids, dropping NULLs, keeping first-seen order."""
        seen: Dict[str, None] = {}
        for value in values:
            if value is not None:
                seen.setdefault(str(value), None)
        return list(seen)
