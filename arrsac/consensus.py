"""Adaptive Real-Time Random Sample Consensus (ARRSAC).

The consensus process estimates a model from data that holds outliers.
Hypotheses are generated from random minimal samples, scored block by block
and filtered with a sequential probability ratio test, keeping a shrinking
set of the best candidates until all data has been evaluated.
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

__all__ = ["Model", "Estimator", "Arrsac"]

_U32 = 1 << 32
_U32_MASK = _U32 - 1


class Model(ABC):
    """A model whose fit to a single data point is measured by a residual."""

    @abstractmethod
    def residual(self, data: Any) -> float:
        """Return the residual error of ``data`` with respect to this model."""


M = TypeVar("M", bound=Model)


class Estimator(ABC, Generic[M]):
    """Builds candidate models from exactly ``MIN_SAMPLES`` data points."""

    MIN_SAMPLES: int = 1

    @abstractmethod
    def estimate(self, data: Sequence[Any]) -> Iterable[M]:
        """Return the models (possibly none) that fit the given sample."""


@dataclass
class _Hypothesis:
    model: Model
    inliers: int


def _ratio(numerator: float, denominator: float) -> float:
    """Divide like IEEE floats do: a zero denominator yields inf or nan."""
    if denominator == 0.0:
        if numerator == 0.0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _sort_best_first(hypotheses: list[_Hypothesis]) -> None:
    hypotheses.sort(key=lambda h: h.inliers, reverse=True)


class Arrsac:
    """The ARRSAC algorithm for sample consensus.

    The input data is not shuffled; shuffle it beforehand to avoid a bias
    towards the data at its beginning.

    ``rng`` must provide ``getrandbits`` (for instance ``random.Random``).
    ``inlier_threshold`` is the residual below which a data point counts as
    an inlier of a model.
    """

    def __init__(
        self,
        inlier_threshold: float,
        rng: random.Random,
        *,
        initialization_hypotheses: int = 256,
        initialization_blocks: int = 4,
        max_candidate_hypotheses: int = 64,
        estimations_per_block: int = 64,
        block_size: int = 64,
        likelihood_ratio_threshold: float = 1e3,
    ) -> None:
        self.inlier_threshold = inlier_threshold
        self.rng = rng
        self.initialization_hypotheses = initialization_hypotheses
        self.initialization_blocks = initialization_blocks
        self.max_candidate_hypotheses = max_candidate_hypotheses
        self.estimations_per_block = estimations_per_block
        self.block_size = block_size
        self.likelihood_ratio_threshold = likelihood_ratio_threshold

    # Public interface

    def model(self, estimator: Estimator, data: Iterable[Any]) -> Model | None:
        """Return the best model found, or ``None`` if none could be found."""
        found = self.model_inliers(estimator, data)
        return None if found is None else found[0]

    def model_inliers(
        self, estimator: Estimator, data: Iterable[Any]
    ) -> tuple[Model, list[int]] | None:
        """Return the best model and the indices of its inliers, or ``None``."""
        points = list(data)
        if len(points) < estimator.MIN_SAMPLES:
            return None

        hypotheses, delta = self._initial_hypotheses(estimator, points)
        if not hypotheses:
            return None

        block = self.initialization_blocks
        exhausted = False
        while not exhausted:
            begin = block * self.block_size
            end = begin + self.block_size
            for sample in range(begin, end):
                if sample >= len(points):
                    exhausted = True
                    break
                datapoint = points[sample]
                for hypothesis in hypotheses:
                    if hypothesis.model.residual(datapoint) < self.inlier_threshold:
                        hypothesis.inliers += 1
            if exhausted:
                break
            _sort_best_first(hypotheses)
            self._populate_hypotheses_sprt(
                estimator,
                hypotheses,
                delta,
                points,
                end,
                self.estimations_per_block,
            )
            _sort_best_first(hypotheses)
            del hypotheses[self.max_candidate_hypotheses >> block :]
            if len(hypotheses) <= 1:
                break
            block += 1

        best: _Hypothesis | None = None
        for hypothesis in hypotheses:
            # Ties go to the later hypothesis.
            if best is None or hypothesis.inliers >= best.inliers:
                best = hypothesis
        if best is None:
            return None
        return best.model, self._inliers(points, best.model)

    # Internals

    def _initial_hypotheses(
        self, estimator: Estimator, points: list[Any]
    ) -> tuple[list[_Hypothesis], float]:
        """Generate the first candidates and estimate delta.

        Epsilon and delta are taken from the best and worst of the randomly
        generated models instead of being supplied up front.
        """
        if self.initialization_blocks <= 0:
            raise ValueError("ARRSAC must have at least 1 initialization block")

        initial_datapoints = min(
            self.initialization_blocks * self.block_size, len(points)
        )
        initial = points[:initial_datapoints]
        hypotheses: list[_Hypothesis] = []
        for _ in range(self.initialization_hypotheses):
            for model in self._generate_random_hypotheses(estimator, points):
                hypotheses.append(_Hypothesis(model, self._count_inliers(initial, model)))

        if not hypotheses:
            return hypotheses, 0.0

        _sort_best_first(hypotheses)
        epsilon = _ratio(hypotheses[0].inliers, initial_datapoints)
        worst = max(hypotheses[-1].inliers, estimator.MIN_SAMPLES)
        delta = _ratio(worst, initial_datapoints)

        if epsilon < delta:
            # A bad initialization would reject good models and accept bad ones.
            return [], delta

        self._populate_hypotheses_sprt(
            estimator,
            hypotheses,
            delta,
            points,
            initial_datapoints,
            self.initialization_hypotheses,
        )
        _sort_best_first(hypotheses)
        del hypotheses[self.max_candidate_hypotheses >> (self.initialization_blocks - 1) :]
        return hypotheses, delta

    def _sample_indices(self, num: int, length: int) -> list[int]:
        """Draw ``num`` distinct uniform indices below ``length``."""
        if length < num:
            raise ValueError("cannot use arrsac without having enough samples")
        threshold = ((-length) & _U32_MASK) % length
        samples: list[int] = []
        while len(samples) < num:
            mul = self.rng.getrandbits(32) * length
            if (mul & _U32_MASK) >= threshold:
                index = mul >> 32
                if index not in samples:
                    samples.append(index)
        return samples

    def _populate_hypotheses_sprt(
        self,
        estimator: Estimator,
        hypotheses: list[_Hypothesis],
        delta: float,
        points: list[Any],
        num_checked: int,
        num_hypotheses: int,
    ) -> None:
        """Add hypotheses drawn from the best model's inliers that pass SPRT."""
        epsilon = _ratio(hypotheses[0].inliers, num_checked)
        positive_likelihood_ratio = _ratio(delta, epsilon)
        negative_likelihood_ratio = _ratio(1.0 - delta, 1.0 - epsilon)
        checked = points[:num_checked]
        subset = self._inliers(checked, hypotheses[0].model)
        for _ in range(num_hypotheses):
            for model in self._generate_random_hypotheses_subset(estimator, points, subset):
                inliers = self._asprt(
                    checked,
                    model,
                    positive_likelihood_ratio,
                    negative_likelihood_ratio,
                    estimator.MIN_SAMPLES,
                )
                if inliers is not None:
                    hypotheses.append(_Hypothesis(model, inliers))

    def _generate_random_hypotheses(
        self, estimator: Estimator, points: list[Any]
    ) -> Iterable[Model]:
        samples = self._sample_indices(estimator.MIN_SAMPLES, len(points))
        return estimator.estimate([points[ix] for ix in samples]) or ()

    def _generate_random_hypotheses_subset(
        self, estimator: Estimator, points: list[Any], subset: list[int]
    ) -> Iterable[Model]:
        samples = self._sample_indices(estimator.MIN_SAMPLES, len(subset))
        return estimator.estimate([points[subset[ix]] for ix in samples]) or ()

    def _asprt(
        self,
        points: Iterable[Any],
        model: Model,
        positive_likelihood_ratio: float,
        negative_likelihood_ratio: float,
        minimum_samples: int,
    ) -> int | None:
        """Sequential probability ratio test; the inlier count if accepted."""
        likelihood_ratio = 1.0
        inliers = 0
        for point in points:
            if model.residual(point) < self.inlier_threshold:
                inliers += 1
                likelihood_ratio *= positive_likelihood_ratio
            else:
                likelihood_ratio *= negative_likelihood_ratio
            if likelihood_ratio > self.likelihood_ratio_threshold or math.isnan(
                likelihood_ratio
            ):
                return None
        return inliers if inliers >= minimum_samples else None

    def _count_inliers(self, points: Iterable[Any], model: Model) -> int:
        return sum(1 for point in points if model.residual(point) < self.inlier_threshold)

    def _inliers(self, points: Iterable[Any], model: Model) -> list[int]:
        return [
            ix
            for ix, point in enumerate(points)
            if model.residual(point) < self.inlier_threshold
        ]