"""
ResolveNavigation Use Case.

Answers "where am I and what comes next?" for an athlete working through a
workout.

Workflow:
1. Fetch one consistent snapshot via the snapshot provider
2. Load and validate it as a PlanTree
3. Resolve the cursor with the NavigationResolver
4. Return a typed result (never a partially computed navigation)

Typed domain errors are converted to result codes here; nothing is retried.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from application.ports import PlanSnapshotProvider
from domain.exceptions import ErrorCode, PlanEngineError
from domain.models import NavigationCursor, NavigationResult, PlanItem
from domain.plan_tree import PlanTree
from domain.services import NavigationResolver

logger = logging.getLogger(__name__)


@dataclass
class ResolveNavigationResult:
    """Result of resolving a navigation cursor."""

    success: bool
    navigation: Optional[NavigationResult] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    validation_errors: List[str] = field(default_factory=list)

    @property
    def is_empty_workout(self) -> bool:
        return self.navigation is not None and self.navigation.is_empty


@dataclass
class PlanOverviewResult:
    """Result of reading a workout's ordered plan for display."""

    success: bool
    workout: Optional[Dict[str, Any]] = None
    plan_items: List[PlanItem] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    validation_errors: List[str] = field(default_factory=list)


class ResolveNavigationUseCase:
    """
    Use case for athlete-facing workout navigation.

    Usage:
        >>> use_case = ResolveNavigationUseCase(snapshot_provider=provider)
        >>> result = use_case.resolve(
        ...     NavigationCursor(plan_item_id="p2", exercise_id="e1", protocol_id="pr1"),
        ...     user_id="user-123",
        ... )
        >>> if result.success:
        ...     print(result.navigation.next)
    """

    def __init__(self, snapshot_provider: PlanSnapshotProvider) -> None:
        """
        Initialize with required dependencies.

        Args:
            snapshot_provider: Source of workout structure snapshots
        """
        self._snapshots = snapshot_provider

    def resolve(self, cursor: NavigationCursor, user_id: str) -> ResolveNavigationResult:
        """
        Resolve a cursor into the current context and next/previous steps.

        Args:
            cursor: Caller-supplied position
            user_id: Current user ID (passed to the snapshot provider)

        Returns:
            ResolveNavigationResult with navigation data or a typed error
        """
        try:
            snapshot = self._snapshots.get_snapshot_for_plan_item(cursor.plan_item_id, user_id)
            resolver = NavigationResolver(PlanTree.load(snapshot))
            navigation = resolver.resolve(cursor)
        except PlanEngineError as e:
            return self._failure(e, cursor.plan_item_id)

        return ResolveNavigationResult(success=True, navigation=navigation)

    def start(
        self,
        workout_id: str,
        user_id: str,
        *,
        program_id: Optional[str] = None,
        session_number: Optional[int] = None,
    ) -> ResolveNavigationResult:
        """
        Resolve the first actionable step of a workout.

        Args:
            workout_id: ID of the workout to start
            user_id: Current user ID
            program_id: Optional program context
            session_number: Optional session number for variant scheduling

        Returns:
            ResolveNavigationResult; an EMPTY_WORKOUT navigation status when
            nothing is actionable
        """
        try:
            snapshot = self._snapshots.get_snapshot(workout_id, user_id)
            resolver = NavigationResolver(PlanTree.load(snapshot))
            navigation = resolver.resolve_start(
                program_id=program_id, session_number=session_number
            )
        except PlanEngineError as e:
            return self._failure(e, workout_id)

        return ResolveNavigationResult(success=True, navigation=navigation)

    def plan_overview(self, workout_id: str, user_id: str) -> PlanOverviewResult:
        """
        Get a workout's plan items in display order (rest/info included).

        Args:
            workout_id: ID of the workout
            user_id: Current user ID

        Returns:
            PlanOverviewResult with ordered plan items
        """
        try:
            snapshot = self._snapshots.get_snapshot(workout_id, user_id)
            tree = PlanTree.load(snapshot)
        except PlanEngineError as e:
            logger.warning(f"Plan overview failed for {workout_id}: {e.code.value} {e.message}")
            return PlanOverviewResult(
                success=False,
                error=e.message,
                error_code=e.code,
                validation_errors=e.errors,
            )

        return PlanOverviewResult(
            success=True,
            workout=tree.workout.model_dump(),
            plan_items=list(tree.ordered_plan_items()),
        )

    @staticmethod
    def _failure(error: PlanEngineError, reference: str) -> ResolveNavigationResult:
        logger.warning(f"Navigation failed for {reference}: {error.code.value} {error.message}")
        return ResolveNavigationResult(
            success=False,
            error=error.message,
            error_code=error.code,
            validation_errors=error.errors,
        )
