"""
Session schedule planning.

A block's schedule says which variant an athlete performs in their nth
session of that block. The navigation resolver reads it to pick the active
variant when a cursor carries a session number.
"""

from typing import List, Optional, Sequence

from domain.exceptions import InvalidParametersError
from domain.models import SessionScheduleEntry, Variant

DEFAULT_PATTERN = ["A", "A", "B", "A", "B", "B", "A", "B"]
MAX_SESSION_COUNT = 20


def plan_session_schedule(
    block_id: str,
    variants: Sequence[Variant],
    session_count: int,
    pattern: Optional[Sequence[str]] = None,
    *,
    max_sessions: int = MAX_SESSION_COUNT,
) -> List[SessionScheduleEntry]:
    """
    Build a schedule of `session_count` sessions cycling `pattern`.

    With no pattern the default A A B A B B A B rotation is used, with any
    label the block does not have replaced by its first variant.

    Raises:
        InvalidParametersError: If the session count is out of range, the
            block has no variants, or an explicit pattern names an unknown label.
    """
    if session_count < 1 or session_count > max_sessions:
        raise InvalidParametersError(
            f"Session count must be between 1 and {max_sessions}, got {session_count}"
        )
    if not variants:
        raise InvalidParametersError(f"Block '{block_id}' has no variants to schedule")

    ordered = sorted(variants, key=lambda v: v.sort_order)
    labels = {v.variant_label for v in ordered}

    if pattern:
        unknown = sorted(set(pattern) - labels)
        if unknown:
            raise InvalidParametersError(
                f"Schedule names unknown variant(s): {', '.join(unknown)}"
            )
        rotation = list(pattern)
    else:
        fallback = ordered[0].variant_label
        rotation = [label if label in labels else fallback for label in DEFAULT_PATTERN]

    return [
        SessionScheduleEntry(
            block_id=block_id,
            session_number=number,
            variant_label=rotation[(number - 1) % len(rotation)],
        )
        for number in range(1, session_count + 1)
    ]
