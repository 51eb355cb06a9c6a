"""
Blocks router for coach-side structure editing.

This router provides:
- Block creation (always together with Variant A)
- Variant create / delete / duplicate / rename
- Item add / remove inside a variant
- Item reordering inside a variant
- Session schedule replacement
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from api.deps import get_current_user, get_manage_variants_use_case
from api.errors import raise_for_error
from application.use_cases import ManageVariantsUseCase, VariantMutationResult
from domain.models import Block, SessionScheduleEntry, Variant, VariantItem
from domain.services import VariantDeletionPlan

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/blocks",
    tags=["Blocks"],
)


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateBlockRequest(BaseModel):
    """Request model for creating a block."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    rounds: Optional[int] = Field(None, ge=1)


class CreateBlockResponse(BaseModel):
    block: Block
    default_variant: Variant


class ItemRequest(BaseModel):
    """One exercise/protocol pairing."""
    exercise_id: str = Field(..., min_length=1)
    protocol_id: str = Field(..., min_length=1)


class CreateVariantRequest(BaseModel):
    """Request model for adding a variant. The label is always assigned."""
    name: Optional[str] = Field(None, max_length=200)
    items: List[ItemRequest] = Field(
        default_factory=list, description="Initial items of the new variant, in order"
    )


class UpdateVariantRequest(BaseModel):
    """Display fields of a variant. An empty name resets it to the default."""
    name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None


class ReorderItemsRequest(BaseModel):
    item_ids: List[str] = Field(..., description="All item ids of the variant, in the new order")


class ScheduleRequest(BaseModel):
    session_count: int = Field(..., ge=1)
    pattern: Optional[List[str]] = Field(
        None, description="Label rotation; defaults to A A B A B B A B"
    )


class VariantResponse(BaseModel):
    variant: Optional[Variant] = None
    items: List[VariantItem] = Field(default_factory=list)
    active_label: Optional[str] = None


class VariantDeletionResponse(BaseModel):
    deletion: VariantDeletionPlan
    active_label: Optional[str] = None


class ScheduleResponse(BaseModel):
    block_id: str
    entries: List[SessionScheduleEntry]


def _variant_response(result: VariantMutationResult) -> VariantResponse:
    if not result.success:
        raise_for_error(result.error_code, result.error)
    return VariantResponse(
        variant=result.variant,
        items=result.items,
        active_label=result.active_label,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("", response_model=CreateBlockResponse, status_code=201)
def create_block(
    request: CreateBlockRequest,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> CreateBlockResponse:
    """Create a block together with its default Variant A."""
    result = use_case.create_block(
        request.name,
        user_id=user_id,
        description=request.description,
        rounds=request.rounds,
    )
    if not result.success:
        raise_for_error(result.error_code, result.error)
    return CreateBlockResponse(block=result.block, default_variant=result.default_variant)


@router.post("/{block_id}/variants", response_model=VariantResponse, status_code=201)
def create_variant(
    block_id: str,
    request: CreateVariantRequest,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> VariantResponse:
    """
    Add a variant labelled by the current variant count.

    Without `items` the variant starts empty; fill it through the items
    endpoint before athletes navigate the block.
    """
    return _variant_response(
        use_case.create_variant(
            block_id,
            user_id=user_id,
            name=request.name,
            items=[(item.exercise_id, item.protocol_id) for item in request.items],
        )
    )


@router.delete("/{block_id}/variants/{variant_id}", response_model=VariantDeletionResponse)
def delete_variant(
    block_id: str,
    variant_id: str,
    active_label: Optional[str] = Query(None, description="Label currently active in the editor"),
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> VariantDeletionResponse:
    """
    Delete a variant.

    Deleting the only variant of a block is refused with 409 and nothing
    is removed.
    """
    result = use_case.delete_variant(
        block_id, variant_id, user_id=user_id, active_label=active_label
    )
    if result.refused:
        logger.warning(f"Refused deletion of variant {variant_id} in block {block_id}: {result.error}")
        raise HTTPException(
            status_code=409,
            detail={"error_code": "LAST_VARIANT", "message": result.error},
        )
    if not result.success:
        raise_for_error(result.error_code, result.error)
    return VariantDeletionResponse(deletion=result.deletion, active_label=result.active_label)


@router.post(
    "/{block_id}/variants/{variant_id}/duplicate",
    response_model=VariantResponse,
    status_code=201,
)
def duplicate_variant(
    block_id: str,
    variant_id: str,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> VariantResponse:
    """Copy a variant and all of its items under the next label."""
    return _variant_response(use_case.duplicate_variant(block_id, variant_id, user_id=user_id))


@router.patch("/{block_id}/variants/{variant_id}", response_model=VariantResponse)
def update_variant(
    block_id: str,
    variant_id: str,
    request: UpdateVariantRequest,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> VariantResponse:
    """Rename a variant or edit its notes. Labels never change."""
    return _variant_response(
        use_case.rename_variant(
            block_id, variant_id, user_id=user_id, name=request.name, notes=request.notes
        )
    )


@router.post(
    "/{block_id}/variants/{variant_id}/items",
    response_model=VariantResponse,
    status_code=201,
)
def add_variant_item(
    block_id: str,
    variant_id: str,
    request: ItemRequest,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> VariantResponse:
    """Append an exercise/protocol pairing to a variant."""
    return _variant_response(
        use_case.add_item(
            block_id,
            variant_id,
            request.exercise_id,
            request.protocol_id,
            user_id=user_id,
        )
    )


@router.delete(
    "/{block_id}/variants/{variant_id}/items/{item_id}",
    response_model=VariantResponse,
)
def remove_variant_item(
    block_id: str,
    variant_id: str,
    item_id: str,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> VariantResponse:
    """
    Remove an item from a variant.

    Removing the only item of a variant is refused with 409.
    """
    result = use_case.remove_item(block_id, variant_id, item_id, user_id=user_id)
    if result.refused:
        logger.warning(f"Refused removal of item {item_id} in variant {variant_id}: {result.error}")
        raise HTTPException(
            status_code=409,
            detail={"error_code": "LAST_ITEM", "message": result.error},
        )
    return _variant_response(result)


@router.put("/{block_id}/variants/{variant_id}/items/order", response_model=VariantResponse)
def reorder_variant_items(
    block_id: str,
    variant_id: str,
    request: ReorderItemsRequest,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> VariantResponse:
    """Renumber a variant's items in the given order."""
    return _variant_response(
        use_case.reorder_items(block_id, variant_id, request.item_ids, user_id=user_id)
    )


@router.put("/{block_id}/schedule", response_model=ScheduleResponse)
def update_schedule(
    block_id: str,
    request: ScheduleRequest,
    user_id: str = Depends(get_current_user),
    use_case: ManageVariantsUseCase = Depends(get_manage_variants_use_case),
) -> ScheduleResponse:
    """Replace the block's session-to-variant schedule."""
    result = use_case.update_schedule(
        block_id, request.session_count, request.pattern, user_id=user_id
    )
    if not result.success:
        raise_for_error(result.error_code, result.error)
    return ScheduleResponse(block_id=block_id, entries=result.entries)
