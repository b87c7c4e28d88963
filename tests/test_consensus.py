import math
import random
from dataclasses import dataclass

import pytest

from arrsac.consensus import Arrsac, Estimator, Model


@dataclass(frozen=True)
class Vec2:
    x: float
    y: float

    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def normalize(self) -> "Vec2":
        n = math.hypot(self.x, self.y)
        return Vec2(self.x / n, self.y / n)


@dataclass
class Line(Model):
    norm: Vec2
    c: float

    def residual(self, data):
        return abs(self.norm.dot(data) + self.c)


class LineEstimator(Estimator):
    MIN_SAMPLES = 2

    def estimate(self, data):
        a, b = data
        norm = Vec2(a.y - b.y, b.x - a.x).normalize()
        return [Line(norm, -norm.dot(b))]


class Unsolvable(Model):
    def residual(self, data):
        return 0.01


class UnsolvableEstimator(Estimator):
    MIN_SAMPLES = 4

    def estimate(self, data):
        return []


class RecordingEstimator(Estimator):
    MIN_SAMPLES = 3

    def __init__(self):
        self.samples = []

    def estimate(self, data):
        self.samples.append(list(data))
        return [Unsolvable()]


def _noisy_line_points(rng):
    norm = Vec2(rng.uniform(-10.0, 10.0), rng.uniform(-10.0, 10.0)).normalize()
    ray = Vec2(norm.y, -norm.x)
    c = rng.uniform(-10.0, 10.0)
    num = rng.randrange(50, 1000)
    points = []
    for _ in range(num):
        residual = rng.uniform(-5.0, 5.0)
        distance = rng.uniform(-50.0, 50.0)
        points.append(
            Vec2(
                distance * ray.x + (residual - c) * norm.x,
                distance * ray.y + (residual - c) * norm.y,
            )
        )
    return norm, points


def test_lines():
    rng = random.Random(0)
    arrsac = Arrsac(3.0, random.Random(0))
    for _ in range(15):
        norm, points = _noisy_line_points(rng)
        model = arrsac.model(LineEstimator(), points)
        assert model is not None
        assert abs(model.norm.dot(norm)) > 0.99


def test_no_valid_hypothesis():
    arrsac = Arrsac(3.0, random.Random(0))
    assert arrsac.model(UnsolvableEstimator(), range(1, 999)) is None


def test_too_little_data_returns_none():
    arrsac = Arrsac(3.0, random.Random(0))
    assert arrsac.model_inliers(UnsolvableEstimator(), [1, 2, 3]) is None


def _exact_line_with_outliers():
    points = []
    line_indices = []
    for i in range(100):
        points.append(Vec2(float(i), 2.0 * i + 1.0))
        line_indices.append(len(points) - 1)
        if i % 5 == 0:
            points.append(Vec2(float((i * 7) % 50), 600.0 + (i * 37) % 300))
    return points, line_indices


def test_model_inliers_exact_line():
    points, line_indices = _exact_line_with_outliers()
    arrsac = Arrsac(0.5, random.Random(3))
    found = arrsac.model_inliers(LineEstimator(), points)
    assert found is not None
    model, inliers = found
    assert inliers == line_indices
    assert model.residual(Vec2(1000.0, 2001.0)) < 1e-6


def test_inliers_are_below_threshold():
    rng = random.Random(11)
    _, points = _noisy_line_points(rng)
    arrsac = Arrsac(3.0, random.Random(1))
    model, inliers = arrsac.model_inliers(LineEstimator(), points)
    assert inliers == sorted(inliers)
    assert all(model.residual(points[ix]) < 3.0 for ix in inliers)
    outliers = set(range(len(points))) - set(inliers)
    assert all(model.residual(points[ix]) >= 3.0 for ix in outliers)


def test_same_seed_same_result():
    points, _ = _exact_line_with_outliers()
    first = Arrsac(0.5, random.Random(9)).model_inliers(LineEstimator(), points)
    second = Arrsac(0.5, random.Random(9)).model_inliers(LineEstimator(), points)
    assert first[1] == second[1]
    assert first[0] == second[0]


def test_estimator_gets_distinct_samples_of_min_size():
    estimator = RecordingEstimator()
    arrsac = Arrsac(
        1.0,
        random.Random(2),
        initialization_hypotheses=10,
        estimations_per_block=2,
    )
    data = list(range(200))
    found = arrsac.model_inliers(estimator, data)
    assert found is not None
    assert found[1] == data
    assert estimator.samples
    for sample in estimator.samples:
        assert len(sample) == 3
        assert len(set(sample)) == 3
        assert all(0 <= x < 200 for x in sample)


def test_zero_initialization_blocks_rejected():
    arrsac = Arrsac(3.0, random.Random(0), initialization_blocks=0)
    with pytest.raises(ValueError):
        arrsac.model(LineEstimator(), [Vec2(0.0, 0.0), Vec2(1.0, 1.0), Vec2(2.0, 2.0)])


def test_defaults():
    arrsac = Arrsac(2.5, random.Random(0))
    assert (
        arrsac.initialization_hypotheses,
        arrsac.initialization_blocks,
        arrsac.max_candidate_hypotheses,
        arrsac.estimations_per_block,
        arrsac.block_size,
        arrsac.likelihood_ratio_threshold,
        arrsac.inlier_threshold,
    ) == (256, 4, 64, 64, 64, 1e3, 2.5)