"""
Converters: Database rows <-> domain plan models.

Database schema (relevant tables):
- workouts: id, title, short_description, cover_image_url, is_archived, ...
- workout_plan_items: id, workout_id, item_type, item_id, content,
  sort_order, video_url, show_video
- blocks: id, name, description, rounds, is_archived
- block_variants: id, block_id, variant_label, name, notes, sort_order
- block_items: id, variant_id, exercise_id, protocol_id, sort_order
- session_schedules: block_id, session_number, variant_label

`workout_plan_items.item_id` is polymorphic: it references an exercise for
item_type 'exercise' and a block for item_type 'block'. It is NULL for
rest/info items.
"""

from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter

from domain.models import (
    Block,
    ExerciseRef,
    PlanItem,
    PlanItemType,
    ProtocolRef,
    SessionScheduleEntry,
    Variant,
    VariantItem,
    Workout,
    WorkoutSnapshot,
)

_plan_item_adapter: TypeAdapter = TypeAdapter(PlanItem)


def _str_id(value: Any) -> Optional[str]:
    """Normalize UUIDs and other ids to strings."""
    if value is None:
        return None
    return str(value)


def db_row_to_plan_item(row: Dict[str, Any]) -> PlanItem:
    """
    Convert a workout_plan_items row to the tagged PlanItem union.

    Args:
        row: Dictionary representing a row from workout_plan_items.

    Returns:
        ExercisePlanItem, BlockPlanItem, RestPlanItem or InfoPlanItem.

    Raises:
        pydantic.ValidationError: If the row's item_type is unknown or its
            payload does not match the tag.

    Examples:
        >>> item = db_row_to_plan_item({
        ...     "id": "p1", "workout_id": "w1", "item_type": "block",
        ...     "item_id": "b1", "sort_order": 2,
        ... })
        >>> item.block_id
        'b1'
    """
    item_type = row.get("item_type")
    data: Dict[str, Any] = {
        "id": _str_id(row.get("id")),
        "workout_id": _str_id(row.get("workout_id")),
        "item_type": item_type,
        "sort_order": row.get("sort_order"),
        "video_url": row.get("video_url"),
        "show_video": bool(row.get("show_video") or False),
    }
    if item_type == PlanItemType.EXERCISE.value:
        data["exercise_id"] = _str_id(row.get("item_id"))
    elif item_type == PlanItemType.BLOCK.value:
        data["block_id"] = _str_id(row.get("item_id"))
    else:
        data["content"] = row.get("content")
    return _plan_item_adapter.validate_python(data)


def plan_item_to_db_row(item: PlanItem) -> Dict[str, Any]:
    """Convert a PlanItem back to a workout_plan_items row."""
    row: Dict[str, Any] = {
        "id": item.id,
        "workout_id": item.workout_id,
        "item_type": item.item_type,
        "sort_order": item.sort_order,
        "video_url": item.video_url,
        "show_video": item.show_video,
        "item_id": None,
        "content": None,
    }
    if item.item_type == PlanItemType.EXERCISE.value:
        row["item_id"] = item.exercise_id
    elif item.item_type == PlanItemType.BLOCK.value:
        row["item_id"] = item.block_id
    else:
        row["content"] = item.content
    return row


def db_row_to_block(row: Dict[str, Any]) -> Block:
    return Block(
        id=_str_id(row.get("id")),
        name=row.get("name") or "Untitled block",
        description=row.get("description"),
        rounds=row.get("rounds"),
        is_archived=bool(row.get("is_archived") or False),
        coach_id=_str_id(row.get("coach_id")),
    )


def db_row_to_variant(row: Dict[str, Any]) -> Variant:
    return Variant(
        id=_str_id(row.get("id")),
        block_id=_str_id(row.get("block_id")),
        variant_label=row.get("variant_label"),
        name=row.get("name"),
        notes=row.get("notes"),
        sort_order=row.get("sort_order", 0),
    )


def variant_to_db_row(variant: Variant) -> Dict[str, Any]:
    return {
        "id": variant.id,
        "block_id": variant.block_id,
        "variant_label": variant.variant_label,
        "name": variant.name,
        "notes": variant.notes,
        "sort_order": variant.sort_order,
    }


def db_row_to_variant_item(row: Dict[str, Any]) -> VariantItem:
    return VariantItem(
        id=_str_id(row.get("id")),
        variant_id=_str_id(row.get("variant_id")),
        exercise_id=_str_id(row.get("exercise_id")),
        protocol_id=_str_id(row.get("protocol_id")),
        sort_order=row.get("sort_order", 0),
    )


def variant_item_to_db_row(item: VariantItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "variant_id": item.variant_id,
        "exercise_id": item.exercise_id,
        "protocol_id": item.protocol_id,
        "sort_order": item.sort_order,
    }


def db_row_to_schedule_entry(row: Dict[str, Any]) -> SessionScheduleEntry:
    return SessionScheduleEntry(
        block_id=_str_id(row.get("block_id")),
        session_number=row.get("session_number"),
        variant_label=row.get("variant_label"),
    )


def db_rows_to_snapshot(
    workout_row: Dict[str, Any],
    plan_item_rows: List[Dict[str, Any]],
    *,
    block_rows: Optional[List[Dict[str, Any]]] = None,
    variant_rows: Optional[List[Dict[str, Any]]] = None,
    item_rows: Optional[List[Dict[str, Any]]] = None,
    exercise_rows: Optional[List[Dict[str, Any]]] = None,
    protocol_rows: Optional[List[Dict[str, Any]]] = None,
    schedule_rows: Optional[List[Dict[str, Any]]] = None,
) -> WorkoutSnapshot:
    """
    Assemble a WorkoutSnapshot from raw table rows.

    Exercise and protocol rows are validated leniently: rows without a
    title/name are skipped, since they only enrich navigation output.
    """
    workout = Workout(
        id=_str_id(workout_row.get("id")),
        title=workout_row.get("title") or "Untitled workout",
        short_description=workout_row.get("short_description"),
        cover_image_url=workout_row.get("cover_image_url"),
        is_archived=bool(workout_row.get("is_archived") or False),
    )
    exercises = [
        ExerciseRef(
            id=_str_id(row["id"]),
            title=row["title"],
            short_description=row.get("short_description"),
            long_description=row.get("long_description"),
            cover_image_url=row.get("cover_image_url"),
            youtube_url=row.get("youtube_url"),
        )
        for row in exercise_rows or []
        if row.get("id") and row.get("title")
    ]
    protocols = [
        ProtocolRef(
            id=_str_id(row["id"]),
            name=row["name"],
            description=row.get("description"),
            sets=row.get("sets"),
            repetitions=row.get("repetitions"),
            intensity_value=row.get("intensity_value"),
            intensity_type=row.get("intensity_type"),
        )
        for row in protocol_rows or []
        if row.get("id") and row.get("name")
    ]
    return WorkoutSnapshot(
        workout=workout,
        plan_items=[db_row_to_plan_item(row) for row in plan_item_rows],
        blocks=[db_row_to_block(row) for row in block_rows or []],
        variants=[db_row_to_variant(row) for row in variant_rows or []],
        variant_items=[db_row_to_variant_item(row) for row in item_rows or []],
        exercises=exercises,
        protocols=protocols,
        session_schedules=[db_row_to_schedule_entry(row) for row in schedule_rows or []],
    )
