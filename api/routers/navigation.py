"""
Navigation router for athlete-facing workout playback.

This router provides:
- The ordered plan of a workout for display
- The first actionable step of a workout
- Resolution of a cursor into current/next/previous positions
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from api.deps import get_current_user, get_resolve_navigation_use_case
from api.errors import raise_for_error
from application.use_cases import ResolveNavigationUseCase
from domain.exceptions import ErrorCode
from domain.models import NavigationCursor, NavigationResult

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Navigation"],
)


# =============================================================================
# Response Models
# =============================================================================


class PlanOverviewResponse(BaseModel):
    """Ordered plan of a workout, rest and info items included."""
    workout: Dict[str, Any]
    plan_items: List[Dict[str, Any]]


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/workouts/{workout_id}/plan", response_model=PlanOverviewResponse)
def get_workout_plan(
    workout_id: str,
    user_id: str = Depends(get_current_user),
    use_case: ResolveNavigationUseCase = Depends(get_resolve_navigation_use_case),
) -> PlanOverviewResponse:
    """Get a workout's plan items in display order."""
    result = use_case.plan_overview(workout_id, user_id)
    if not result.success:
        raise_for_error(result.error_code, result.error, result.validation_errors)

    return PlanOverviewResponse(
        workout=result.workout,
        plan_items=[item.model_dump(mode="json") for item in result.plan_items],
    )


@router.get("/workouts/{workout_id}/navigation/start", response_model=NavigationResult)
def start_workout(
    workout_id: str,
    program_id: Optional[str] = Query(None),
    session_number: Optional[int] = Query(None, ge=1),
    user_id: str = Depends(get_current_user),
    use_case: ResolveNavigationUseCase = Depends(get_resolve_navigation_use_case),
) -> NavigationResult:
    """
    Get the first actionable step of a workout.

    A workout without exercises or blocks returns status EMPTY_WORKOUT
    rather than an error.
    """
    result = use_case.start(
        workout_id,
        user_id,
        program_id=program_id,
        session_number=session_number,
    )
    if not result.success:
        raise_for_error(result.error_code, result.error, result.validation_errors)
    return result.navigation


@router.get("/plan-items/{plan_item_id}/navigation", response_model=NavigationResult)
def resolve_navigation(
    plan_item_id: str,
    exercise_id: Optional[str] = Query(None),
    protocol_id: Optional[str] = Query(None),
    program_id: Optional[str] = Query(None),
    variant_label: Optional[str] = Query(None),
    variant_pin: Optional[List[str]] = Query(None, description="Pinned variants as plan_item_id:label"),
    session_number: Optional[int] = Query(None, ge=1),
    sort_order: Optional[int] = Query(None),
    user_id: str = Depends(get_current_user),
    use_case: ResolveNavigationUseCase = Depends(get_resolve_navigation_use_case),
) -> NavigationResult:
    """
    Resolve a cursor into the current context and next/previous steps.

    `exercise_id` and `protocol_id` locate a position inside a block's
    active variant and must be given together. `variant_pin` echoes the
    `variant_pins` of a returned position.
    """
    cursor = NavigationCursor(
        plan_item_id=plan_item_id,
        exercise_id=exercise_id,
        protocol_id=protocol_id,
        program_id=program_id,
        variant_label=variant_label,
        variant_pins=_parse_pins(variant_pin),
        session_number=session_number,
        sort_order=sort_order,
    )
    result = use_case.resolve(cursor, user_id)
    if not result.success:
        logger.info(f"Navigation for plan item {plan_item_id} failed: {result.error_code}")
        raise_for_error(result.error_code, result.error, result.validation_errors)
    return result.navigation


def _parse_pins(raw: Optional[List[str]]) -> Dict[str, str]:
    pins: Dict[str, str] = {}
    for entry in raw or []:
        plan_item_id, sep, label = entry.rpartition(":")
        if not sep or not plan_item_id or not label:
            raise_for_error(
                ErrorCode.INVALID_PARAMETERS,
                f"variant_pin must look like plan_item_id:label, got '{entry}'",
            )
        pins[plan_item_id] = label
    return pins
