# neurovision/scoring/aggregator.py

from typing import Any, Dict, Iterable

from neurovision.models.detection import DetectionLabel
from neurovision.models.history_entry import HistoryEntry


def summarize(entries: Iterable[HistoryEntry]) -> Dict[str, Any]:
    entries = list(entries)
    total = len(entries)

    positive_count = sum(1 for e in entries if e.result == DetectionLabel.POSITIVE)
    negative_count = total - positive_count

    if total == 0:
        return {
            "total": 0,
            "positive_count": 0,
            "negative_count": 0,
            "positive_rate": 0.0,
            "average_confidence": 0.0,
        }

    confidence_sum = sum(e.confidence for e in entries)

    return {
        "total": total,
        "positive_count": positive_count,
        "negative_count": negative_count,
        "positive_rate": round(positive_count / total, 4),
        "average_confidence": round(confidence_sum / total, 4),
    }
