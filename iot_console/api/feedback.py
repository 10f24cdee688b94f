"""
Feedback ledger endpoints.
Read-only view of the session's ledger, newest first, plus clearing it.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from util.logging import logger
from ..core.schema import FeedbackEntry
from ..core.session import ConfigurationSession
from .schemas import FeedbackEntryResponse, FeedbackListResponse
from .state import get_session

router = APIRouter()


def entry_response(entry: FeedbackEntry) -> FeedbackEntryResponse:
    return FeedbackEntryResponse(**entry.to_dict())


@router.get("", response_model=FeedbackListResponse)
def list_feedback(
    type: str = Query(None, description="Filter by outcome type: success, error, info"),
    session: ConfigurationSession = Depends(get_session),
):
    """List feedback entries, newest first."""
    if type and type not in ("success", "error", "info"):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid type '{type}'. Must be one of: success, error, info"
        )

    entries = session.feedback()
    if type:
        entries = [e for e in entries if e.kind.value == type]

    return FeedbackListResponse(
        entries=[entry_response(e) for e in entries],
        count=len(entries),
        capacity=session.ledger.capacity,
    )


@router.delete("")
def clear_feedback(session: ConfigurationSession = Depends(get_session)):
    """Clear the feedback ledger."""
    cleared = len(session.ledger)
    session.clear_feedback()
    logger.log_operation("ledger.clear", "success", {"cleared": cleared})
    return {"ok": True, "cleared": cleared}
