# ABOUTME: Unit tests for Jenks Natural Breaks tier classification.
# ABOUTME: Tests breakpoints, label mapping, degenerate distributions and order independence.

import random

import pytest

from tierdex.errors import DegenerateDistributionError
from tierdex.ranking.jenks import TierClassifier


@pytest.fixture
def classifier() -> TierClassifier:
    """Classifier with the default six labels."""
    return TierClassifier()


class TestClassify:
    """Tests for TierClassifier.classify."""

    def test_empty(self, classifier: TierClassifier) -> None:
        """No scores, no breakpoints."""
        assert classifier.classify([]) == []

    def test_two_clear_clusters(self, classifier: TierClassifier) -> None:
        """Well separated clusters split at their natural gap."""
        breakpoints = classifier.classify([1, 2, 3, 100, 101, 102], 2)

        assert breakpoints == [100.0, 1.0]

    def test_three_clusters(self, classifier: TierClassifier) -> None:
        """Each breakpoint is its class's lower bound, best class first."""
        scores = [10, 11, 12, 50, 51, 52, 90, 91, 92]

        assert classifier.classify(scores, 3) == [90.0, 50.0, 10.0]

    def test_descending(self, classifier: TierClassifier) -> None:
        """Breakpoints are strictly descending."""
        breakpoints = classifier.classify([float(x * x) for x in range(30)], 6)

        assert len(breakpoints) == 6
        assert breakpoints == sorted(breakpoints, reverse=True)
        assert len(set(breakpoints)) == len(breakpoints)

    def test_fewer_distinct_scores_than_classes(self, classifier: TierClassifier) -> None:
        """Each distinct score becomes its own class."""
        assert classifier.classify([10, 20, 30, 40, 50], 6) == [50.0, 40.0, 30.0, 20.0, 10.0]

    def test_duplicates_with_few_distinct_values(self, classifier: TierClassifier) -> None:
        """Repeated values collapse into one class each."""
        assert classifier.classify([5, 5, 9, 9, 1], 6) == [9.0, 5.0, 1.0]

    def test_zero_variance(self, classifier: TierClassifier) -> None:
        """Identical scores yield a single class instead of crashing."""
        breakpoints = classifier.classify([100, 100, 100, 100], 6)

        assert breakpoints == [100.0]
        assert all(classifier.tier_of(100, breakpoints) == "S+" for _ in range(4))

    def test_zero_variance_strict(self, classifier: TierClassifier) -> None:
        """strict mode reports the degenerate distribution."""
        with pytest.raises(DegenerateDistributionError) as exc_info:
            classifier.classify([7, 7, 7], 6, strict=True)

        assert exc_info.value.count == 3

    def test_order_independent(self, classifier: TierClassifier) -> None:
        """The same multiset in any order gives identical breakpoints."""
        scores = [3.5, 12.0, 12.0, 7.25, 40.0, 41.5, 0.5, 19.0, 22.0, 8.0, 30.0, 2.0]
        shuffled = scores.copy()
        random.Random(7).shuffle(shuffled)

        assert classifier.classify(scores, 4) == classifier.classify(shuffled, 4)
        assert classifier.classify(scores, 4) == classifier.classify(sorted(scores), 4)

    @pytest.mark.parametrize("num_classes", [0, -1])
    def test_invalid_num_classes(self, classifier: TierClassifier, num_classes: int) -> None:
        """num_classes below 1 raises ValueError."""
        with pytest.raises(ValueError):
            classifier.classify([1, 2, 3], num_classes)

    def test_single_class(self, classifier: TierClassifier) -> None:
        """One class spans the whole population."""
        assert classifier.classify([4, 1, 9], 1) == [1.0]


class TestTierOf:
    """Tests for TierClassifier.tier_of."""

    def test_maps_to_first_reached_breakpoint(self, classifier: TierClassifier) -> None:
        """A score takes the label of the first breakpoint it reaches."""
        breakpoints = [90.0, 50.0, 10.0]

        assert classifier.tier_of(95, breakpoints) == "S+"
        assert classifier.tier_of(90, breakpoints) == "S+"
        assert classifier.tier_of(60, breakpoints) == "S"
        assert classifier.tier_of(10, breakpoints) == "A"

    def test_below_all_breakpoints(self, classifier: TierClassifier) -> None:
        """Scores below every breakpoint get the worst label."""
        assert classifier.tier_of(1, [90.0, 50.0]) == "D"

    def test_more_breakpoints_than_labels(self) -> None:
        """Breakpoint indices past the label list map to the worst label."""
        classifier = TierClassifier(labels=("Top", "Bottom"))

        assert classifier.tier_of(5, [9.0, 7.0, 5.0, 3.0]) == "Bottom"

    def test_custom_labels(self, classifier: TierClassifier) -> None:
        """Labels can be overridden per call."""
        assert classifier.tier_of(50, [90.0, 50.0], labels=("gold", "silver", "bronze")) == "silver"


class TestAssign:
    """Tests for TierClassifier.assign."""

    def test_unique_tiers_for_small_population(self, classifier: TierClassifier) -> None:
        """Five distinct scores with six classes get five different tiers."""
        breakpoints, tiers = classifier.assign([50, 40, 30, 20, 10], 6)

        assert breakpoints == [50.0, 40.0, 30.0, 20.0, 10.0]
        assert tiers == ["S+", "S", "A", "B", "C"]

    def test_tiers_align_with_input(self, classifier: TierClassifier) -> None:
        """Tiers are returned in the order of the input scores."""
        _, tiers = classifier.assign([10, 50, 30], 6)

        assert tiers == ["A", "S+", "S"]

    def test_every_score_gets_a_defined_tier(self, classifier: TierClassifier) -> None:
        """All inputs map to one of the configured labels."""
        scores = [float(x % 17) * 1.5 for x in range(60)]

        _, tiers = classifier.assign(scores)

        assert set(tiers) <= set(classifier.labels)

    def test_invalid_constructor_arguments(self) -> None:
        """Bad classifier configuration raises ValueError."""
        with pytest.raises(ValueError):
            TierClassifier(num_classes=0)
        with pytest.raises(ValueError):
            TierClassifier(labels=())
