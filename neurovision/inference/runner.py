import asyncio
import logging
from typing import Any, Optional

from neurovision.errors import InferenceFailure, InferenceTimeout
from neurovision.models.detection import DetectionOutcome
from neurovision.models.scan import ScanSubmission

logger = logging.getLogger("neurovision.inference")


async def _classify_with_latency(
    classifier: Any,
    submission: ScanSubmission,
    latency_scale: float,
) -> DetectionOutcome:
    # Worker thread; wait_for abandons it on timeout
    outcome = await asyncio.to_thread(classifier.classify, submission)
    if latency_scale > 0:
        await asyncio.sleep(outcome.processing_time_seconds * latency_scale)
    return outcome


async def run_inference(
    classifier: Any,
    submission: ScanSubmission,
    timeout_seconds: Optional[float] = None,
    latency_scale: float = 0.0,
) -> DetectionOutcome:
    """
    The only suspending step of a submission.

    An outcome that arrives after the timeout is discarded along with the
    cancelled task, so a late result can never reach the ledger.
    """
    if latency_scale < 0:
        raise ValueError("latency_scale must be >= 0")

    try:
        return await asyncio.wait_for(
            _classify_with_latency(classifier, submission, latency_scale),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.warning(f"Inference timed out after {timeout_seconds}s")
        raise InferenceTimeout(
            f"Inference did not finish within {timeout_seconds} seconds"
        ) from e
    except InferenceFailure:
        raise
    except Exception as e:
        logger.error(f"Inference failed: {type(e).__name__}")
        raise InferenceFailure(f"Inference failed: {type(e).__name__}") from e
