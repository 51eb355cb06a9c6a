"""
Converters between database rows and domain plan models.
"""

from domain.converters.db_converters import (
    db_row_to_block,
    db_row_to_plan_item,
    db_row_to_schedule_entry,
    db_row_to_variant,
    db_row_to_variant_item,
    db_rows_to_snapshot,
    plan_item_to_db_row,
    variant_item_to_db_row,
    variant_to_db_row,
)

__all__ = [
    "db_row_to_plan_item",
    "plan_item_to_db_row",
    "db_row_to_block",
    "db_row_to_variant",
    "variant_to_db_row",
    "db_row_to_variant_item",
    "variant_item_to_db_row",
    "db_row_to_schedule_entry",
    "db_rows_to_snapshot",
]
