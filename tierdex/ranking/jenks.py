# ABOUTME: Jenks Natural Breaks tier classification.
# ABOUTME: Partitions a score distribution into ordered classes and maps scores to tier labels.

import logging
import math
from collections.abc import Sequence

from tierdex.config import DEFAULT_TIER_LABELS
from tierdex.errors import DegenerateDistributionError

logger = logging.getLogger(__name__)


def _partition_starts(values: Sequence[float], num_classes: int) -> list[list[int]]:
    """Run the Jenks optimal-partitioning dynamic program.

    Args:
        values: Scores sorted in descending order.
        num_classes: Number of classes, smaller than len(values).

    Returns:
        Matrix starts[l][j]: 1-based index where class j begins in the optimal
        partition of the first l values into j classes.
    """
    n = len(values)
    # Both matrices are (n+1) x (k+1), sized once up front
    starts = [[0] * (num_classes + 1) for _ in range(n + 1)]
    variance = [[0.0] * (num_classes + 1) for _ in range(n + 1)]

    for j in range(1, num_classes + 1):
        starts[1][j] = 1
        for i in range(2, n + 1):
            variance[i][j] = math.inf

    for last in range(2, n + 1):
        sum_values = 0.0
        sum_squares = 0.0
        count = 0
        within = 0.0
        # Grow the final class backwards one element at a time
        for size in range(1, last + 1):
            first = last - size + 1
            value = values[first - 1]
            sum_values += value
            sum_squares += value * value
            count += 1
            within = sum_squares - (sum_values * sum_values) / count
            previous_end = first - 1
            if previous_end != 0:
                for j in range(2, num_classes + 1):
                    candidate = within + variance[previous_end][j - 1]
                    if variance[last][j] >= candidate:
                        starts[last][j] = first
                        variance[last][j] = candidate
        starts[last][1] = 1
        variance[last][1] = within

    return starts


class TierClassifier:
    """Classifies scores into tiers with Jenks Natural Breaks.

    Args:
        num_classes: Default number of classes.
        labels: Tier labels from best to worst.
    """

    def __init__(
        self,
        num_classes: int = len(DEFAULT_TIER_LABELS),
        labels: Sequence[str] = DEFAULT_TIER_LABELS,
    ) -> None:
        if num_classes < 1:
            raise ValueError(f"num_classes must be >= 1, got {num_classes}")
        if not labels:
            raise ValueError("at least one tier label is required")
        self.num_classes = num_classes
        self.labels = tuple(labels)

    def classify(self, scores: Sequence[float], num_classes: int | None = None, strict: bool = False) -> list[float]:
        """Compute class breakpoints for a score distribution.

        Args:
            scores: Scores of the whole population, in any order.
            num_classes: Number of classes; defaults to the classifier's own.
            strict: Raise on a zero-variance distribution instead of
                collapsing it to a single class.

        Returns:
            Lower bound of each class, best class first (descending). The
            list is shorter than `num_classes` when the population cannot fill
            every class: with at most `num_classes` distinct scores each
            distinct score is its own breakpoint, an all-equal population
            gives a single breakpoint and an empty one gives none. Callers
            must not assume `len(result) == num_classes`.

        Raises:
            ValueError: If num_classes < 1.
            DegenerateDistributionError: If strict and all scores are equal.
        """
        k = self.num_classes if num_classes is None else num_classes
        if k < 1:
            raise ValueError(f"num_classes must be >= 1, got {k}")
        if not scores:
            return []

        values = sorted((float(s) for s in scores), reverse=True)

        if values[0] == values[-1]:
            if strict:
                raise DegenerateDistributionError(values[0], len(values))
            logger.debug("All %d scores equal %s; using a single class", len(values), values[0])
            return [values[0]]

        distinct = list(dict.fromkeys(values))
        if len(distinct) <= k:
            return distinct

        starts = _partition_starts(values, k)
        breakpoints: list[float] = []
        end = len(values)
        for j in range(k, 0, -1):
            if end <= 0:
                break
            # Descending order: a class's lower bound is its last element
            breakpoints.append(values[end - 1])
            end = starts[end][j] - 1

        breakpoints.reverse()
        return breakpoints

    def tier_of(self, score: float, breakpoints: Sequence[float], labels: Sequence[str] | None = None) -> str:
        """Map a score to the label of the first breakpoint it reaches.

        Args:
            score: The score to classify.
            breakpoints: Descending class lower bounds from `classify`.
            labels: Tier labels, best first; defaults to the classifier's.

        Returns:
            The tier label; the worst label if the score is below every
            breakpoint or the breakpoint index has no label of its own.
        """
        tier_labels = tuple(labels) if labels is not None else self.labels
        for index, lower_bound in enumerate(breakpoints):
            if score >= lower_bound:
                return tier_labels[index] if index < len(tier_labels) else tier_labels[-1]
        return tier_labels[-1]

    def assign(self, scores: Sequence[float], num_classes: int | None = None) -> tuple[list[float], list[str]]:
        """Classify a population and return its breakpoints and per-score tiers.

        Args:
            scores: Scores of the whole population.
            num_classes: Number of classes; defaults to the classifier's own.

        Returns:
            Tuple of (breakpoints, tiers) where tiers align with `scores`.
        """
        breakpoints = self.classify(scores, num_classes)
        return breakpoints, [self.tier_of(score, breakpoints) for score in scores]
