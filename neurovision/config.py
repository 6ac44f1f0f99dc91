import hashlib
import json
import os
from dataclasses import asdict, dataclass
from typing import Optional

from dotenv import load_dotenv

from neurovision.validation.validator import DEFAULT_MAX_UPLOAD_BYTES

# Load environment variables
load_dotenv()

DEFAULT_INFERENCE_TIMEOUT_SECONDS = 30.0
DEFAULT_AUDIT_LOG = "audit.log"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ServiceConfig:
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    inference_timeout_seconds: Optional[float] = DEFAULT_INFERENCE_TIMEOUT_SECONDS
    latency_scale: float = 0.0
    random_seed: Optional[int] = None
    seed_demo_history: bool = False
    audit_log: str = DEFAULT_AUDIT_LOG


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def load_config() -> ServiceConfig:
    """
    Reads NEUROVISION_* environment variables (a local .env is honoured).
    A timeout of 0 disables the inference timeout.
    """
    max_upload_bytes = _env_int("NEUROVISION_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    if max_upload_bytes <= 0:
        raise ValueError("NEUROVISION_MAX_UPLOAD_BYTES must be > 0")

    timeout = _env_float("NEUROVISION_INFERENCE_TIMEOUT_SECONDS", DEFAULT_INFERENCE_TIMEOUT_SECONDS)
    if timeout is not None and timeout <= 0:
        timeout = None

    latency_scale = _env_float("NEUROVISION_LATENCY_SCALE", 0.0)
    if latency_scale < 0:
        raise ValueError("NEUROVISION_LATENCY_SCALE must be >= 0")

    return ServiceConfig(
        max_upload_bytes=max_upload_bytes,
        inference_timeout_seconds=timeout,
        latency_scale=latency_scale,
        random_seed=_env_int("NEUROVISION_RANDOM_SEED", None),
        seed_demo_history=os.getenv("NEUROVISION_SEED_DEMO_HISTORY", "").strip().lower() in _TRUTHY,
        audit_log=os.getenv("NEUROVISION_AUDIT_LOG") or DEFAULT_AUDIT_LOG,
    )


def compute_config_fingerprint(config: ServiceConfig) -> str:
    """
    Deterministic hash of the settings that shape detection outcomes.
    """
    payload = json.dumps(asdict(config), sort_keys=True).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
