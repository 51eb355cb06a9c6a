"""
Supabase implementation of BlockRepository.

Persists block structure edits computed by the variant manager:
blocks, block_variants, block_items and session_schedules.
"""
import json
import logging
from typing import Dict, List, Optional, Sequence

from supabase import Client

from domain.converters import (
    db_row_to_block,
    db_row_to_schedule_entry,
    db_row_to_variant,
    db_row_to_variant_item,
    variant_item_to_db_row,
    variant_to_db_row,
)
from domain.exceptions import BlockCreationError
from domain.models import Block, SessionScheduleEntry, Variant, VariantItem
from domain.services import ItemOrderChange

logger = logging.getLogger(__name__)


class SupabaseBlockRepository:
    """
    Supabase implementation of BlockRepository protocol.

    The client is injected via constructor for testability.
    """

    def __init__(self, client: Client):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected, not global)
        """
        self._client = client

    # =========================================================================
    # Reads
    # =========================================================================

    def get_block(self, block_id: str) -> Optional[Block]:
        """Get a block by ID."""
        try:
            result = self._client.table("blocks").select("*").eq("id", block_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to get block {block_id}: {e}")
            return None
        if not result.data:
            return None
        return db_row_to_block(result.data[0])

    def list_variants(self, block_id: str) -> List[Variant]:
        """Get the variants of a block, ordered by sort_order."""
        result = (
            self._client.table("block_variants")
            .select("*")
            .eq("block_id", block_id)
            .order("sort_order")
            .execute()
        )
        return [db_row_to_variant(row) for row in result.data or []]

    def list_variant_items(self, variant_id: str) -> List[VariantItem]:
        """Get the items of a variant, ordered by sort_order."""
        result = (
            self._client.table("block_items")
            .select("*")
            .eq("variant_id", variant_id)
            .order("sort_order")
            .execute()
        )
        return [db_row_to_variant_item(row) for row in result.data or []]

    def get_schedule(self, block_id: str) -> List[SessionScheduleEntry]:
        """Get the session schedule of a block."""
        result = (
            self._client.table("session_schedules")
            .select("*")
            .eq("block_id", block_id)
            .order("session_number")
            .execute()
        )
        return [db_row_to_schedule_entry(row) for row in result.data or []]

    # =========================================================================
    # Writes
    # =========================================================================

    def create_block_with_default_variant(self, block: Block, default_variant: Variant) -> Block:
        """
        Create a block and its default variant atomically.

        Uses a PostgreSQL stored procedure so that both inserts happen in a
        single transaction. A block can never be observed without a variant.

        Raises:
            BlockCreationError: If the RPC call fails
        """
        block_row = {
            "id": block.id,
            "name": block.name,
            "description": block.description,
            "rounds": block.rounds,
            "coach_id": block.coach_id,
        }
        try:
            response = self._client.rpc(
                "create_block_with_default_variant",
                {
                    "p_block": json.dumps(block_row),
                    "p_variant": json.dumps(variant_to_db_row(default_variant)),
                },
            ).execute()

            if response.data is None:
                raise BlockCreationError("RPC returned no data")
        except Exception as e:
            if isinstance(e, BlockCreationError):
                raise
            raise BlockCreationError(f"Atomic block creation failed: {e}") from e

        logger.info(f"Block {block.id} created with default variant {default_variant.variant_label}")
        return block

    def insert_variant(self, variant: Variant, items: Sequence[VariantItem] = ()) -> Variant:
        """
        Insert a variant and its items.

        If the items cannot be inserted, the variant row is removed again so
        that no empty copy is left behind.
        """
        result = self._client.table("block_variants").insert(variant_to_db_row(variant)).execute()
        if not result.data:
            raise RuntimeError(f"Insert of variant {variant.id} returned no data")
        stored = db_row_to_variant(result.data[0])

        if items:
            try:
                self._client.table("block_items").insert(
                    [variant_item_to_db_row(item) for item in items]
                ).execute()
            except Exception as e:
                logger.error(f"Failed to copy items into variant {stored.id}, removing it: {e}")
                self._client.table("block_variants").delete().eq("id", stored.id).execute()
                raise

        logger.info(f"Variant {stored.variant_label} stored for block {stored.block_id} ({len(items)} items)")
        return stored

    def delete_variant(self, variant_id: str) -> bool:
        """Delete a variant; block_items cascade in the database."""
        result = self._client.table("block_variants").delete().eq("id", variant_id).execute()
        deleted_count = len(result.data) if result.data else 0
        if deleted_count == 0:
            logger.warning(f"No variant found with id {variant_id} (0 rows deleted)")
            return False
        return True

    def update_variant(self, variant_id: str, changes: dict) -> Optional[Variant]:
        """Apply display changes to a variant."""
        try:
            result = self._client.table("block_variants").update(changes).eq("id", variant_id).execute()
        except Exception as e:
            logger.error(f"Failed to update variant {variant_id}: {e}")
            return None
        if not result.data:
            return None
        return db_row_to_variant(result.data[0])

    def insert_item(self, item: VariantItem) -> VariantItem:
        """Insert one item into a variant."""
        result = self._client.table("block_items").insert(variant_item_to_db_row(item)).execute()
        if not result.data:
            raise RuntimeError(f"Insert of item {item.id} returned no data")
        stored = db_row_to_variant_item(result.data[0])
        logger.info(f"Item {stored.id} added to variant {stored.variant_id} at {stored.sort_order}")
        return stored

    def delete_item(self, item_id: str) -> bool:
        """Delete one variant item."""
        result = self._client.table("block_items").delete().eq("id", item_id).execute()
        if not result.data:
            logger.warning(f"No item found with id {item_id} (0 rows deleted)")
            return False
        return True

    def update_item_orders(self, changes: Sequence[ItemOrderChange]) -> None:
        """
        Apply new sort_order values, one row at a time.

        The current orders are read first. If an update fails, the rows
        already renumbered are set back so that the variant never mixes
        old and new positions.
        """
        if not changes:
            return
        ids = [change.id for change in changes]
        current = (
            self._client.table("block_items")
            .select("id, sort_order")
            .in_("id", ids)
            .execute()
        )
        previous = {str(row["id"]): row["sort_order"] for row in current.data or []}

        applied: List[str] = []
        try:
            for change in changes:
                self._client.table("block_items").update(
                    {"sort_order": change.sort_order}
                ).eq("id", change.id).execute()
                applied.append(change.id)
        except Exception as e:
            logger.error(f"Reorder failed after {len(applied)} of {len(changes)} items, restoring: {e}")
            self._restore_item_orders(applied, previous)
            raise

    def _restore_item_orders(self, item_ids: Sequence[str], previous: Dict[str, int]) -> None:
        for item_id in reversed(item_ids):
            if item_id not in previous:
                continue
            try:
                self._client.table("block_items").update(
                    {"sort_order": previous[item_id]}
                ).eq("id", item_id).execute()
            except Exception as e:
                logger.error(f"Could not restore sort_order of item {item_id}: {e}")

    def replace_schedule(
        self,
        block_id: str,
        entries: Sequence[SessionScheduleEntry],
    ) -> List[SessionScheduleEntry]:
        """Replace the session schedule: delete existing rows, insert new ones."""
        self._client.table("session_schedules").delete().eq("block_id", block_id).execute()
        if not entries:
            return []
        result = self._client.table("session_schedules").insert(
            [
                {
                    "block_id": entry.block_id,
                    "session_number": entry.session_number,
                    "variant_label": entry.variant_label,
                }
                for entry in entries
            ]
        ).execute()
        return [db_row_to_schedule_entry(row) for row in result.data or []]
