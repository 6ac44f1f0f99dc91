import random

import pytest

from neurovision.inference.mock_classifier import MockTumorClassifier


def test_high_draw_is_positive_with_single_region(scripted_random, jpeg_submission):
    """Draw 0.9 > 0.5: positive, midpoint confidence, one fixed region."""
    classifier = MockTumorClassifier(rng=scripted_random([0.9]))

    outcome = classifier.classify(jpeg_submission)

    assert outcome.detected is True
    assert outcome.confidence == pytest.approx(0.925)
    assert len(outcome.regions) == 1
    region = outcome.regions[0]
    assert (region.x, region.y, region.width, region.height) == (120, 150, 60, 40)
    assert region.confidence == pytest.approx(0.925 * 0.95)
    assert outcome.processing_time_seconds == pytest.approx(2.0)


def test_draw_of_exactly_half_is_negative(scripted_random, jpeg_submission):
    """The threshold is strict: r must be greater than 0.5."""
    classifier = MockTumorClassifier(rng=scripted_random([0.5]))

    outcome = classifier.classify(jpeg_submission)

    assert outcome.detected is False
    assert outcome.confidence == pytest.approx(0.125)
    assert outcome.regions == ()


def test_outcome_invariants_hold_across_many_draws(jpeg_submission):
    """detected <=> confidence >= 0.85 <=> at least one region."""
    classifier = MockTumorClassifier(seed=1234)

    seen = set()
    for _ in range(500):
        outcome = classifier.classify(jpeg_submission)
        seen.add(outcome.detected)

        if outcome.detected:
            assert 0.85 <= outcome.confidence <= 1.0
            assert len(outcome.regions) == 1
            assert outcome.regions[0].confidence == pytest.approx(outcome.confidence * 0.95)
        else:
            assert 0.05 <= outcome.confidence <= 0.20
            assert outcome.regions == ()
        assert 1.0 <= outcome.processing_time_seconds <= 3.0

    # Both branches are exercised
    assert seen == {True, False}


def test_same_seed_same_sequence(jpeg_submission, png_submission):
    a = MockTumorClassifier(seed=42)
    b = MockTumorClassifier(seed=42)

    assert [a.classify(jpeg_submission) for _ in range(20)] == [b.classify(jpeg_submission) for _ in range(20)]
    # Content independent: a different file gets the same draw
    assert MockTumorClassifier(seed=7).classify(jpeg_submission) == MockTumorClassifier(seed=7).classify(png_submission)


def test_rng_and_seed_are_mutually_exclusive():
    with pytest.raises(ValueError):
        MockTumorClassifier(rng=random.Random(1), seed=1)
