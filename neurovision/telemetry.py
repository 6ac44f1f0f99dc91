"""
Telemetry for the detection workflow.

No file names, no patient ids, no image bytes. Only outcome categories
and timings are emitted.
"""
import os
import logging
from typing import Literal

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry.trace import get_current_span

logger = logging.getLogger("neurovision.telemetry")

CONFIDENCE_BUCKETS = ("0.0-0.2", "0.2-0.85", "0.85+")
REJECTION_REASONS = ("UNSUPPORTED_TYPE", "TOO_LARGE")


def init_telemetry():
    """
    Initialize Azure Application Insights via OpenTelemetry.
    Disabled when no connection string is configured (local / tests).
    """
    connection_string = os.getenv("AZURE_APPINSIGHTS_CONNECTION_STRING")

    if not connection_string:
        return

    configure_azure_monitor(
        connection_string=connection_string
    )
    logger.info("Azure Monitor telemetry enabled")


def confidence_bucket(confidence: float) -> Literal["0.0-0.2", "0.2-0.85", "0.85+"]:
    if confidence >= 0.85:
        return "0.85+"
    if confidence > 0.2:
        return "0.2-0.85"
    return "0.0-0.2"


def emit_detection_telemetry(
    inference_latency_ms: int,
    detected: bool,
    bucket: Literal["0.0-0.2", "0.2-0.85", "0.85+"],
):
    """
    Emit one event per completed inference.
    The confidence is reported as a bucket, never as the raw float.
    """
    assert isinstance(inference_latency_ms, int), "inference_latency_ms must be int"
    assert isinstance(detected, bool), "detected must be bool"
    assert bucket in CONFIDENCE_BUCKETS, f"bucket must be one of {CONFIDENCE_BUCKETS}, got {bucket}"

    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="neurovision.detection",
        attributes={
            "inference_latency_ms": inference_latency_ms,
            "detected": detected,
            "confidence_bucket": bucket,
        }
    )


def emit_rejection_telemetry(reason: Literal["UNSUPPORTED_TYPE", "TOO_LARGE"]):
    assert reason in REJECTION_REASONS, f"reason must be one of {REJECTION_REASONS}, got {reason}"

    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="neurovision.rejection",
        attributes={
            "rejection_reason": reason,
        }
    )


def scrub_exception_for_telemetry(exception: Exception) -> str:
    """
    Never log str(e); only the exception class name.
    """
    return type(exception).__name__


def emit_exception_telemetry(exception: Exception):
    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="neurovision.exception",
        attributes={
            "exception_type": scrub_exception_for_telemetry(exception)
        }
    )
