import numpy as np

from .constants import AUGMENT_MIN_LEN, AUGMENT_MAX_LEN, AUGMENT_NOISE


def stretch_positions(length: int, scale: float) -> np.ndarray:
    """
    Fractional read positions 0, 1/scale, 2/scale, ... for which both
    bracketing input samples exist (floor(p) + 1 < length).
    """
    if length < 2:
        return np.zeros(0, dtype=np.float64)
    inc = 1.0 / scale
    # one extra step guards against rounding in the division; the mask trims it
    count = int(np.ceil((length - 1) / inc)) + 1
    positions = np.arange(count, dtype=np.float64) * inc
    return positions[positions < length - 1]


def augment(
    samples,
    rng: np.random.Generator = None,
    min_scale: float = AUGMENT_MIN_LEN,
    max_scale: float = AUGMENT_MAX_LEN,
    noise: float = AUGMENT_NOISE,
) -> np.ndarray:
    """
    Slightly manipulate an audio stream: stretch it in time by a random
    factor in [min_scale, max_scale] using linear interpolation and add
    Gaussian noise with standard deviation `noise` to every output sample.

    The output has roughly len(samples) * scale entries; inputs shorter
    than 2 samples give an empty output.
    """
    if not 0 < min_scale <= max_scale:
        raise ValueError(f"bad stretch range [{min_scale}, {max_scale}]")
    if noise < 0:
        raise ValueError(f"noise must be non-negative, got {noise}")
    rng = rng if rng is not None else np.random.default_rng()
    samples = np.asarray(samples, dtype=np.float64)
    scale = rng.uniform(min_scale, max_scale)

    positions = stretch_positions(len(samples), scale)
    idx = positions.astype(np.int64)
    frac = positions - idx
    mixed = samples[idx] * (1 - frac) + samples[idx + 1] * frac
    return mixed + rng.normal(0.0, noise, size=len(mixed))
