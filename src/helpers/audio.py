import gzip
import io
import zlib

import numpy as np
import soundfile as sf

from .constants import GZIP_SUFFIX


class DecodeError(RuntimeError):
    """An audio file exists but could not be decoded."""


def mix_to_mono(data: np.ndarray) -> np.ndarray:
    """Average a [frames, channels] array down to [frames]."""
    if data.ndim == 1:
        return data.astype(np.float64, copy=False)
    if data.ndim != 2 or data.shape[1] == 0:
        raise DecodeError(f"bad sample layout: shape {data.shape}")
    if data.shape[1] == 1:
        return data[:, 0].astype(np.float64, copy=True)
    return data.mean(axis=1, dtype=np.float64)


def read_sample(path: str) -> np.ndarray:
    """
    Decode a .wav or .wav.gz file into a mono float64 waveform in [-1, 1].

    Raises FileNotFoundError for missing files and DecodeError for anything
    that is not a readable (optionally gzipped) sound file.
    """
    with open(path, "rb") as fh:
        raw = fh.read()

    if path.endswith(GZIP_SUFFIX):
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(f"read {path}: {e}") from e

    try:
        data, _ = sf.read(io.BytesIO(raw), dtype="float64", always_2d=True)
    except (RuntimeError, TypeError, ValueError) as e:
        raise DecodeError(f"read {path}: {e}") from e
    return mix_to_mono(data)
