"""
Block Repository Interface (Port).

Defines persistence for blocks, their variants, variant items and session
schedules. The variant manager computes legal mutation plans; this port
applies them to the store.
"""
from typing import List, Optional, Protocol, Sequence

from domain.models import Block, SessionScheduleEntry, Variant, VariantItem
from domain.services import ItemOrderChange


class BlockRepository(Protocol):
    """
    Abstract interface for block structure persistence.

    Read methods return None / empty lists for missing rows. Write methods
    raise on store failures; they never partially apply a plan silently.
    """

    def get_block(self, block_id: str) -> Optional[Block]:
        """Get a block by ID, or None if it does not exist."""
        ...

    def list_variants(self, block_id: str) -> List[Variant]:
        """Get the variants of a block, ordered by sort_order."""
        ...

    def list_variant_items(self, variant_id: str) -> List[VariantItem]:
        """Get the items of a variant, ordered by sort_order."""
        ...

    def get_schedule(self, block_id: str) -> List[SessionScheduleEntry]:
        """Get the session schedule of a block, ordered by session_number."""
        ...

    def create_block_with_default_variant(
        self,
        block: Block,
        default_variant: Variant,
    ) -> Block:
        """
        Create a block and its default variant in one atomic operation.

        Raises:
            BlockCreationError: If either row could not be committed
        """
        ...

    def insert_variant(
        self,
        variant: Variant,
        items: Sequence[VariantItem] = (),
    ) -> Variant:
        """Insert a variant together with its (optional) items."""
        ...

    def delete_variant(self, variant_id: str) -> bool:
        """
        Delete a variant and, by cascade, its items.

        Returns:
            True if a row was deleted
        """
        ...

    def update_variant(self, variant_id: str, changes: dict) -> Optional[Variant]:
        """Apply display changes (name, notes) to a variant."""
        ...

    def insert_item(self, item: VariantItem) -> VariantItem:
        """Insert one item into a variant."""
        ...

    def delete_item(self, item_id: str) -> bool:
        """
        Delete one variant item.

        Returns:
            True if a row was deleted
        """
        ...

    def update_item_orders(self, changes: Sequence[ItemOrderChange]) -> None:
        """
        Apply new sort_order values to variant items.

        Either every change is applied or the previous orders are restored
        before the error is re-raised.
        """
        ...

    def replace_schedule(
        self,
        block_id: str,
        entries: Sequence[SessionScheduleEntry],
    ) -> List[SessionScheduleEntry]:
        """Replace the whole session schedule of a block."""
        ...
