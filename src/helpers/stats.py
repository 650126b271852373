import math

import numpy as np


class RollingVariance:
    """Running mean and population variance of a stream of amplitudes."""

    def __init__(self):
        self.n = 0
        self.sum = 0.0
        self.square_sum = 0.0

    def add(self, x: float):
        self.n += 1
        self.sum += x
        self.square_sum += x * x

    def update(self, values):
        values = np.asarray(values, dtype=np.float64).ravel()
        self.n += values.size
        self.sum += float(values.sum())
        self.square_sum += float(np.dot(values, values))

    @property
    def mean(self) -> float:
        if self.n == 0:
            return math.nan
        return self.sum / self.n

    @property
    def variance(self) -> float:
        if self.n == 0:
            return math.nan
        div = 1.0 / self.n
        return div * self.square_sum - (div * self.sum) ** 2

    def to_dict(self) -> dict:
        return {"n": self.n, "mean": self.mean, "variance": self.variance}
