"""
Manual Dataset Store

JSON list files holding hand-submitted products and price corrections,
plus a combined audit log (`manual-dataset.json`) with one typed entry per
submission or correction.
"""

import json
from pathlib import Path
from typing import List, Type, TypeVar, Union

import structlog
from pydantic import ValidationError

from pricewatch.models import CamelModel, ManualSubmission, PriceFeedback
from pricewatch.storage.catalog_store import atomic_write_json

logger = structlog.get_logger(__name__)

SUBMISSIONS_FILE = "user-submissions.json"
FEEDBACK_FILE = "price-feedback.json"
DATASET_FILE = "manual-dataset.json"

T = TypeVar("T", bound=CamelModel)


class ManualStore:
    """
    Append-only manual datasets backed by JSON files.

    Each append rewrites the whole list, so a failed write never leaves a
    partially updated file behind.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / name

    def _read_raw(self, name: str) -> list:
        path = self._path(name)
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Manual dataset unreadable", path=str(path), error=str(e))
            return []
        return parsed if isinstance(parsed, list) else []

    def _read(self, name: str, model: Type[T]) -> List[T]:
        entries = []
        for raw in self._read_raw(name):
            try:
                entries.append(model.model_validate(raw))
            except ValidationError:
                logger.warning("Skipping invalid manual entry", file=name)
        return entries

    def _append(self, name: str, entry: dict) -> None:
        entries = self._read_raw(name)
        entries.append(entry)
        atomic_write_json(self._path(name), entries)
        logger.info("Manual entry stored", file=name, total=len(entries))

    def list_submissions(self) -> List[ManualSubmission]:
        return self._read(SUBMISSIONS_FILE, ManualSubmission)

    def list_feedback(self) -> List[PriceFeedback]:
        return self._read(FEEDBACK_FILE, PriceFeedback)

    def list_dataset(self) -> List[dict]:
        """Audit log entries in write order, each tagged with a ``type``"""
        return [entry for entry in self._read_raw(DATASET_FILE) if isinstance(entry, dict)]

    def add_submission(self, submission: ManualSubmission) -> ManualSubmission:
        self._append(SUBMISSIONS_FILE, submission.to_json_dict())
        self._append(DATASET_FILE, submission_audit_entry(submission))
        return submission

    def add_feedback(self, feedback: PriceFeedback) -> PriceFeedback:
        self._append(FEEDBACK_FILE, feedback.to_json_dict())
        self._append(DATASET_FILE, feedback_audit_entry(feedback))
        return feedback


def submission_audit_entry(submission: ManualSubmission) -> dict:
    data = submission.to_json_dict()
    return {
        "type": "submission",
        "timestamp": data["timestamp"],
        "name": submission.name,
        "brand": submission.brand,
        "category": submission.category,
        "marketplace": submission.marketplace,
        "price": submission.price,
        "sold": submission.sold,
        "url": submission.url,
    }


def feedback_audit_entry(feedback: PriceFeedback) -> dict:
    data = feedback.to_json_dict()
    return {
        "type": "price-update",
        "timestamp": data["timestamp"],
        "sku": feedback.sku,
        "newPrice": feedback.new_price,
        "previousPrice": feedback.previous_price,
        "marketplace": feedback.marketplace,
        "url": feedback.url,
        "note": feedback.note,
    }
