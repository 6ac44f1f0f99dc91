import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from neurovision.config import ServiceConfig, compute_config_fingerprint
from neurovision.errors import InferenceFailure
from neurovision.history.demo_history import seed_demo_history
from neurovision.history.ledger import HistoryLedger
from neurovision.inference.mock_classifier import MockTumorClassifier
from neurovision.inference.runner import run_inference
from neurovision.models.detection import DetectionOutcome
from neurovision.models.history_entry import HistoryEntry
from neurovision.models.scan import ScanSubmission
from neurovision.scoring.aggregator import summarize
from neurovision.telemetry import (
    confidence_bucket,
    emit_detection_telemetry,
    emit_exception_telemetry,
    emit_rejection_telemetry,
)
from neurovision.validation.validator import validate_submission

logger = logging.getLogger("neurovision.pipeline")


@dataclass(frozen=True)
class SubmissionResult:
    outcome: DetectionOutcome
    entry: HistoryEntry


class DetectionService:
    """
    Validate -> infer -> record.

    Nothing reaches the ledger unless validation passed and inference
    returned in time.
    """

    def __init__(
        self,
        classifier: Any,
        ledger: HistoryLedger,
        config: Optional[ServiceConfig] = None,
    ):
        self.classifier = classifier
        self.ledger = ledger
        self.config = config or ServiceConfig()

    async def submit(self, submission: ScanSubmission) -> SubmissionResult:
        # 1. Validate (type first, then size)
        validation = validate_submission(submission, max_bytes=self.config.max_upload_bytes)
        if not validation.accepted:
            logger.info(f"SCAN_REJECTED reason={validation.reason.value}")
            emit_rejection_telemetry(validation.reason.value)
            validation.raise_for_rejection()

        # 2. Infer (the only await point)
        start_time = time.perf_counter()
        try:
            outcome = await run_inference(
                self.classifier,
                submission,
                timeout_seconds=self.config.inference_timeout_seconds,
                latency_scale=self.config.latency_scale,
            )
        except InferenceFailure as e:
            emit_exception_telemetry(e)
            raise
        latency_ms = int((time.perf_counter() - start_time) * 1000)

        # 3. Record
        entry = self.ledger.append(submission, outcome)

        emit_detection_telemetry(
            inference_latency_ms=latency_ms,
            detected=outcome.detected,
            bucket=confidence_bucket(outcome.confidence),
        )
        logger.info(
            f"SCAN_ANALYZED id={entry.id} result={entry.result.value} "
            f"LATENCY={latency_ms}ms"
        )
        return SubmissionResult(outcome=outcome, entry=entry)

    def history(self, result: str = "all", sort: str = "newest") -> List[HistoryEntry]:
        return self.ledger.list(result=result, sort=sort)

    def summary(self) -> Dict[str, Any]:
        return summarize(self.ledger.snapshot())

    def get_entry(self, entry_id: str) -> HistoryEntry:
        return self.ledger.get(entry_id)


def build_detection_service(config: Optional[ServiceConfig] = None) -> DetectionService:
    """
    Default wiring: mock classifier + fresh in-memory ledger.
    With a random seed configured, both the classifier and the patient id
    generator become reproducible.
    """
    config = config or ServiceConfig()

    if config.random_seed is not None:
        classifier = MockTumorClassifier(seed=config.random_seed)
        ledger = HistoryLedger(rng=random.Random(config.random_seed))
    else:
        classifier = MockTumorClassifier()
        ledger = HistoryLedger()

    if config.seed_demo_history:
        seeded = seed_demo_history(ledger)
        logger.info(f"Seeded {len(seeded)} demo history entries")

    logger.info(f"Detection service ready CONFIG={compute_config_fingerprint(config)[:12]}")
    return DetectionService(classifier=classifier, ledger=ledger, config=config)
