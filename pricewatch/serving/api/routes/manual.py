"""
Manual Dataset Endpoints

Hand-submitted products and price corrections. Both are merged into the
search corpus on the next query.
"""

from fastapi import APIRouter, Depends, HTTPException
import structlog

from pricewatch.exceptions import StorageError
from pricewatch.models import ManualSubmission, PriceFeedback
from pricewatch.serving.api.deps import get_manual_store
from pricewatch.storage.manual_store import ManualStore

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/products", status_code=201)
def submit_product(
    submission: ManualSubmission,
    store: ManualStore = Depends(get_manual_store),
) -> dict:
    """Store a manually submitted product."""
    try:
        store.add_submission(submission)
    except StorageError as e:
        logger.error("Submission save failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to store submission")

    return {
        "ok": True,
        "status": "created",
        "entry": submission.to_json_dict(),
    }


@router.post("/feedback", status_code=201)
def submit_price_feedback(
    feedback: PriceFeedback,
    store: ManualStore = Depends(get_manual_store),
) -> dict:
    """Store a price correction for an existing SKU."""
    try:
        store.add_feedback(feedback)
    except StorageError as e:
        logger.error("Feedback save failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to store feedback")

    return {
        "ok": True,
        "status": "created",
        "entry": feedback.to_json_dict(),
    }
