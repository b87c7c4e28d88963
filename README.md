# arrsac

ARRSAC (Adaptive Real-Time Random Sample Consensus) finds a model that fits
the inliers of a noisy data set while ignoring outliers. Candidate models are
generated from random minimal samples, scored on growing blocks of data, and
weeded out early with a sequential probability ratio test, so good models are
found without scoring every hypothesis against every point.

The package is a library with no dependencies beyond the standard library.
Everything lives in the `arrsac.consensus` module.

## Installation

```
pip install arrsac
```

## Usage

You provide two things:

* a **model**, a subclass of `arrsac.consensus.Model` with a `residual(data)`
  method that returns how far a data point is from the model;
* an **estimator**, a subclass of `arrsac.consensus.Estimator` with a
  `MIN_SAMPLES` class attribute and an `estimate(data)` method. The method
  is given a list of exactly `MIN_SAMPLES` distinct data points and returns an
  iterable of zero or more candidate models (returning `None` also counts as
  no models).

```python
import math
import random

from arrsac.consensus import Arrsac, Estimator, Model


class Line(Model):
    def __init__(self, nx, ny, c):
        self.nx, self.ny, self.c = nx, ny, c

    def residual(self, data):
        x, y = data
        return abs(self.nx * x + self.ny * y + self.c)


class LineEstimator(Estimator):
    MIN_SAMPLES = 2

    def estimate(self, data):
        (ax, ay), (bx, by) = data
        nx, ny = ay - by, bx - ax
        length = math.hypot(nx, ny)
        if length == 0:
            return []
        nx, ny = nx / length, ny / length
        return [Line(nx, ny, -(nx * bx + ny * by))]


rng = random.Random(0)
points = [(x, 2.0 * x + 1.0 + rng.uniform(-1, 1)) for x in range(200)]
rng.shuffle(points)

arrsac = Arrsac(3.0, random.Random(0))
line = arrsac.model(LineEstimator(), points)

found = arrsac.model_inliers(LineEstimator(), points)
if found is not None:
    line, inlier_indices = found
```

`Arrsac.model(estimator, data)` returns the best model, or `None` when no
model could be found. `Arrsac.model_inliers(estimator, data)` returns a
`(model, inlier_indices)` pair, where the indices refer to positions in
`data`, or `None`. `data` may be any iterable; it is read into a list once.

`None` is returned when there are fewer data points than `MIN_SAMPLES`, when
the estimator produces no models, or when the initial estimate of the inlier
ratios is unusable (the best model has a lower inlier ratio than the worst).

Shuffle your data before use: the algorithm does not shuffle it for you, and
unshuffled data biases the result toward its first points.

## Parameters

`inlier_threshold` must always be chosen for your data: a point whose residual
is strictly below it counts as an inlier. The other settings are keyword
arguments of `Arrsac` with these defaults:

| Parameter                    | Default | Meaning                                                       |
|------------------------------|---------|---------------------------------------------------------------|
| `initialization_hypotheses`  | 256     | Estimations run while estimating the initial inlier ratios    |
| `initialization_blocks`      | 4       | Blocks of data used for that initial estimate (at least 1)    |
| `max_candidate_hypotheses`   | 64      | Candidates kept; halved with each further block               |
| `estimations_per_block`      | 64      | Estimations run after each block is scored                    |
| `block_size`                 | 64      | Data points scored per block                                  |
| `likelihood_ratio_threshold` | 1e3     | Likelihood ratio at which a model is rejected                 |

All settings, including `inlier_threshold` and `rng`, are plain attributes of
an `Arrsac` instance and may be changed between runs.

Raising `likelihood_ratio_threshold` makes a good result more likely and the
run slower. Lowering it does the opposite.

`rng` can be any object with a `getrandbits(bits)` method, such as
`random.Random`. Seed it for reproducible results.

## Errors

A `ValueError` is raised when `initialization_blocks` is less than 1, and when
the best candidate has fewer inliers than the estimator's `MIN_SAMPLES`, so
that no new sample can be drawn from them.

## Running the tests

```
pip install -e ".[test]"
pytest
```