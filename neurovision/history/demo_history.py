"""
Demo History - Dashboard sample records
Six fixed scans shown on a fresh dashboard before any upload.
"""
from datetime import datetime, timezone
from typing import List

from neurovision.history.ledger import HistoryLedger
from neurovision.inference.mock_classifier import MockTumorClassifier
from neurovision.models.detection import BoundingRegion, DetectionOutcome
from neurovision.models.history_entry import HistoryEntry
from neurovision.models.scan import ScanSubmission

DEMO_PROCESSING_TIME_SECONDS = 1.8

demo_records = [
    {"patient_id": "P-10045", "scan_name": "brain_mri_001.dcm", "date": "2023-05-15T09:30:00", "result": "negative", "confidence": 0.96},
    {"patient_id": "P-10046", "scan_name": "brain_mri_002.dcm", "date": "2023-05-14T14:15:00", "result": "positive", "confidence": 0.89},
    {"patient_id": "P-10047", "scan_name": "brain_mri_003.dcm", "date": "2023-05-14T11:45:00", "result": "positive", "confidence": 0.92},
    {"patient_id": "P-10048", "scan_name": "brain_mri_004.dcm", "date": "2023-05-13T16:20:00", "result": "negative", "confidence": 0.97},
    {"patient_id": "P-10049", "scan_name": "brain_mri_005.dcm", "date": "2023-05-12T10:00:00", "result": "negative", "confidence": 0.95},
    {"patient_id": "P-10050", "scan_name": "brain_mri_006.dcm", "date": "2023-05-11T13:30:00", "result": "positive", "confidence": 0.87},
]


def _demo_outcome(result: str, confidence: float) -> DetectionOutcome:
    if result != "positive":
        return DetectionOutcome(
            detected=False,
            confidence=confidence,
            processing_time_seconds=DEMO_PROCESSING_TIME_SECONDS,
        )

    x, y, width, height = MockTumorClassifier.REGION_BOX
    region = BoundingRegion(
        x=x,
        y=y,
        width=width,
        height=height,
        confidence=confidence * MockTumorClassifier.REGION_CONFIDENCE_SCALE,
    )
    return DetectionOutcome(
        detected=True,
        confidence=confidence,
        regions=(region,),
        processing_time_seconds=DEMO_PROCESSING_TIME_SECONDS,
    )


def seed_demo_history(ledger: HistoryLedger) -> List[HistoryEntry]:
    """
    Appends the sample records oldest first so that ids grow with time.
    Patient ids are kept as listed.
    """
    seeded = []
    for record in sorted(demo_records, key=lambda r: r["date"]):
        submission = ScanSubmission(
            file_name=record["scan_name"],
            mime_type="application/dicom",
            size_bytes=0,
        )
        timestamp = datetime.fromisoformat(record["date"]).replace(tzinfo=timezone.utc)
        seeded.append(
            ledger.append(
                submission,
                _demo_outcome(record["result"], record["confidence"]),
                timestamp=timestamp,
                patient_id=record["patient_id"],
            )
        )
    return seeded
