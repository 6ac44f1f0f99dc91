import asyncio

import pytest

from neurovision.config import ServiceConfig
from neurovision.errors import InferenceFailure, InferenceTimeout, TooLarge, UnsupportedType
from neurovision.history.ledger import HistoryLedger
from neurovision.models.scan import ScanSubmission
from neurovision.orchestrator.detection_pipeline import DetectionService, build_detection_service

MIB = 1024 * 1024


@pytest.fixture
def make_service(fixed_classifier):
    def _make(outcomes, **config_overrides):
        classifier = fixed_classifier(outcomes)
        service = DetectionService(
            classifier=classifier,
            ledger=HistoryLedger(),
            config=ServiceConfig(**config_overrides),
        )
        return service, classifier
    return _make


def test_accepted_jpeg_produces_one_entry(make_service, positive_outcome):
    """1 MiB JPEG: accepted, inferred, exactly one new entry."""
    service, _ = make_service([positive_outcome])
    submission = ScanSubmission(file_name="brain_mri_007.jpg", mime_type="image/jpeg", size_bytes=1 * MIB)

    result = asyncio.run(service.submit(submission))

    assert result.outcome == positive_outcome
    history = service.history()
    assert len(history) == 1
    assert history[0] == result.entry
    assert history[0].scan_name == "brain_mri_007.jpg"


def test_rejections_never_reach_inference_or_ledger(make_service, positive_outcome):
    service, classifier = make_service([positive_outcome])

    with pytest.raises(TooLarge):
        asyncio.run(service.submit(ScanSubmission("big.png", "image/png", 15 * MIB)))
    with pytest.raises(UnsupportedType):
        asyncio.run(service.submit(ScanSubmission("notes.txt", "text/plain", 2 * MIB)))

    assert classifier.calls == 0
    assert service.history() == []


def test_configured_upload_limit_applies(make_service, positive_outcome):
    service, _ = make_service([positive_outcome], max_upload_bytes=1 * MIB)

    with pytest.raises(TooLarge, match="1MB"):
        asyncio.run(service.submit(ScanSubmission("a.png", "image/png", 1 * MIB + 1)))


def test_resubmission_after_rejection_is_independent(make_service, positive_outcome):
    service, _ = make_service([positive_outcome])

    with pytest.raises(UnsupportedType):
        asyncio.run(service.submit(ScanSubmission("scan.gif", "image/gif", 1024)))
    result = asyncio.run(service.submit(ScanSubmission("scan.png", "image/png", 1024)))

    assert [e.id for e in service.history()] == [result.entry.id]


def test_timed_out_inference_appends_nothing(make_service, outcome_factory):
    service, _ = make_service(
        [outcome_factory["positive"](processing_time=2.0)],
        inference_timeout_seconds=0.05,
        latency_scale=1.0,
    )

    with pytest.raises(InferenceTimeout):
        asyncio.run(service.submit(ScanSubmission("slow.png", "image/png", 1024)))

    assert len(service.ledger) == 0


def test_failed_inference_appends_nothing(exploding_classifier):
    service = DetectionService(classifier=exploding_classifier, ledger=HistoryLedger())

    with pytest.raises(InferenceFailure):
        asyncio.run(service.submit(ScanSubmission("x.png", "image/png", 1024)))

    assert len(service.ledger) == 0


def test_three_submissions_summary(make_service, outcome_factory):
    """2 positive + 1 negative -> positive rate of two thirds."""
    service, _ = make_service([
        outcome_factory["positive"](),
        outcome_factory["negative"](),
        outcome_factory["positive"](),
    ])

    for i in range(3):
        asyncio.run(service.submit(ScanSubmission(f"scan_{i}.png", "image/png", 1024)))

    summary = service.summary()
    assert summary["total"] == 3
    assert summary["positive_count"] == 2
    assert summary["negative_count"] == 1
    assert summary["positive_rate"] == pytest.approx(0.667, abs=1e-3)
    assert service.summary() == summary


def test_history_newest_first_and_filtered(make_service, outcome_factory):
    service, _ = make_service([outcome_factory["positive"](), outcome_factory["negative"]()])

    first = asyncio.run(service.submit(ScanSubmission("one.png", "image/png", 1))).entry
    second = asyncio.run(service.submit(ScanSubmission("two.png", "image/png", 1))).entry

    assert service.history()[0].id == second.id
    assert service.history(result="positive") == [first]
    assert service.get_entry(second.id) == second


def test_build_detection_service_with_seed_is_reproducible():
    config = ServiceConfig(random_seed=99)
    a = build_detection_service(config)
    b = build_detection_service(config)

    for i in range(5):
        submission = ScanSubmission(f"s{i}.dcm", "application/dicom", 1024)
        ra = asyncio.run(a.submit(submission))
        rb = asyncio.run(b.submit(submission))
        assert ra.outcome == rb.outcome
        assert ra.entry.patient_id == rb.entry.patient_id


def test_build_detection_service_seeds_demo_history():
    service = build_detection_service(ServiceConfig(seed_demo_history=True))

    assert service.summary()["total"] == 6
    assert service.history()[0].patient_id == "P-10045"


def test_blocking_classifier_timeout_appends_nothing(blocking_classifier):
    service = DetectionService(
        classifier=blocking_classifier,
        ledger=HistoryLedger(),
        config=ServiceConfig(inference_timeout_seconds=0.05),
    )

    with pytest.raises(InferenceTimeout):
        asyncio.run(service.submit(ScanSubmission("stuck.png", "image/png", 1024)))

    assert len(service.ledger) == 0
