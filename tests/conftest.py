import time
from datetime import datetime, timedelta, timezone

import pytest

from neurovision.models.detection import BoundingRegion, DetectionOutcome
from neurovision.models.scan import ScanSubmission

MIB = 1024 * 1024


class ScriptedRandom:
    """
    Stand-in random source.
    random() returns the scripted draws in order, uniform() returns the
    midpoint of its range.
    """

    def __init__(self, draws):
        self._draws = list(draws)

    def random(self):
        return self._draws.pop(0)

    def uniform(self, a, b):
        return (a + b) / 2

    def randint(self, a, b):
        return a


class FixedClassifier:
    """Returns the queued outcomes in order; never touches randomness."""

    backend_name = "fixed"

    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = 0

    def classify(self, submission):
        self.calls += 1
        return self._outcomes.pop(0)


class ExplodingClassifier:
    backend_name = "exploding"

    def classify(self, submission):
        raise RuntimeError("model weights missing")


class SteppingClock:
    """Each call is one minute after the previous one."""

    def __init__(self, start=None, step=timedelta(minutes=1)):
        self._now = start or datetime(2025, 3, 14, 10, 0, tzinfo=timezone.utc)
        self._step = step

    def __call__(self):
        current = self._now
        self._now = current + self._step
        return current


def make_positive(confidence=0.9, processing_time=1.5):
    return DetectionOutcome(
        detected=True,
        confidence=confidence,
        regions=(BoundingRegion(x=120, y=150, width=60, height=40, confidence=confidence * 0.95),),
        processing_time_seconds=processing_time,
    )


def make_negative(confidence=0.1, processing_time=1.5):
    return DetectionOutcome(
        detected=False,
        confidence=confidence,
        processing_time_seconds=processing_time,
    )


@pytest.fixture
def positive_outcome():
    return make_positive()


@pytest.fixture
def negative_outcome():
    return make_negative()


@pytest.fixture
def jpeg_submission():
    return ScanSubmission(file_name="brain_mri_001.jpg", mime_type="image/jpeg", size_bytes=1 * MIB)


@pytest.fixture
def png_submission():
    return ScanSubmission(file_name="axial_slice.png", mime_type="image/png", size_bytes=2 * MIB)


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def fixed_classifier():
    return FixedClassifier


@pytest.fixture
def exploding_classifier():
    return ExplodingClassifier()


@pytest.fixture
def stepping_clock():
    return SteppingClock()


@pytest.fixture
def outcome_factory():
    return {"positive": make_positive, "negative": make_negative}


class BlockingClassifier:
    """Holds the calling thread, like a model stuck in native code."""

    backend_name = "blocking"

    def __init__(self, outcome, seconds=0.5):
        self._outcome = outcome
        self._seconds = seconds

    def classify(self, submission):
        time.sleep(self._seconds)
        return self._outcome


@pytest.fixture
def blocking_classifier(positive_outcome):
    return BlockingClassifier(positive_outcome)
