from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class DetectionLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class BoundingRegion:
    x: int
    y: int
    width: int
    height: int
    confidence: float

    def __post_init__(self):
        if min(self.x, self.y, self.width, self.height) < 0:
            raise ValueError("Region coordinates and size must be >= 0")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Region confidence must be within [0, 1]")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class DetectionOutcome:
    """
    Result of one inference pass.

    A positive outcome always carries at least one region,
    a negative outcome never carries any.
    """
    detected: bool
    confidence: float
    regions: Tuple[BoundingRegion, ...] = field(default_factory=tuple)
    processing_time_seconds: float = 1.0

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")
        if self.processing_time_seconds <= 0:
            raise ValueError("processing_time_seconds must be > 0")
        # Lists are accepted for convenience but stored as a tuple
        object.__setattr__(self, "regions", tuple(self.regions))
        if self.detected and not self.regions:
            raise ValueError("A positive outcome requires at least one region")
        if not self.detected and self.regions:
            raise ValueError("A negative outcome must not carry regions")

    @property
    def label(self) -> DetectionLabel:
        return DetectionLabel.POSITIVE if self.detected else DetectionLabel.NEGATIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected": self.detected,
            "confidence": self.confidence,
            "regions": [r.to_dict() for r in self.regions],
            "processingTime": self.processing_time_seconds,
        }
