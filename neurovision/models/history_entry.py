from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from neurovision.models.detection import DetectionLabel, DetectionOutcome


@dataclass(frozen=True)
class HistoryEntry:
    """
    One ledger record. Owned by the HistoryLedger, never mutated.
    `sequence` is the insertion position and breaks timestamp ties.
    """
    id: str
    patient_id: str
    scan_name: str
    timestamp: datetime
    outcome: DetectionOutcome
    sequence: int

    @property
    def result(self) -> DetectionLabel:
        return self.outcome.label

    @property
    def confidence(self) -> float:
        return self.outcome.confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "patientId": self.patient_id,
            "scanName": self.scan_name,
            "date": self.timestamp.isoformat(),
            "result": self.result.value,
            "confidence": self.confidence,
            "outcome": self.outcome.to_dict(),
        }
