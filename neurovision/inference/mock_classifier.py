import random
from typing import Optional

from neurovision.models.detection import BoundingRegion, DetectionOutcome
from neurovision.models.scan import ScanSubmission


class MockTumorClassifier:
    """
    Randomized stand-in for a tumour detection model.

    This is NOT a detector. It never reads the uploaded bytes; outcomes are
    drawn from the injected random source, so two identical scans may get
    different results. Pass `seed` (or a seeded `random.Random`) for
    reproducible runs.

    The confidence ranges below are demo constants with no clinical meaning.
    """

    backend_name = "mock-random"

    DETECTION_THRESHOLD = 0.5
    POSITIVE_CONFIDENCE = (0.85, 1.00)
    NEGATIVE_CONFIDENCE = (0.05, 0.20)
    PROCESSING_TIME_SECONDS = (1.0, 3.0)

    # Fixed illustrative placement for the single reported region
    REGION_BOX = (120, 150, 60, 40)
    REGION_CONFIDENCE_SCALE = 0.95

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        if rng is not None and seed is not None:
            raise ValueError("Pass either rng or seed, not both")
        self._rng = rng if rng is not None else random.Random(seed)

    def classify(self, submission: ScanSubmission) -> DetectionOutcome:
        detected = self._rng.random() > self.DETECTION_THRESHOLD

        low, high = self.POSITIVE_CONFIDENCE if detected else self.NEGATIVE_CONFIDENCE
        confidence = self._rng.uniform(low, high)

        regions = []
        if detected:
            x, y, width, height = self.REGION_BOX
            regions.append(
                BoundingRegion(
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                    confidence=confidence * self.REGION_CONFIDENCE_SCALE,
                )
            )

        processing_time = self._rng.uniform(*self.PROCESSING_TIME_SECONDS)

        return DetectionOutcome(
            detected=detected,
            confidence=confidence,
            regions=tuple(regions),
            processing_time_seconds=processing_time,
        )
