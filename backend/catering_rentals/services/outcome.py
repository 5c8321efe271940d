"""Result of a sequential, non-transactional multi-step write."""

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class WriteOutcome:
    """``failed_step`` names the first write that failed; earlier writes stay committed."""

    ok: bool
    rental_id: uuid.UUID | None = None
    failed_step: str | None = None
    error: str | None = None
