"""Shared fixtures: seeded generators, small corpora and on-disk audio."""

import gzip
import io

import numpy as np
import pytest
import soundfile as sf

from helpers.constants import SEED
from helpers.dataset import Sample

SAMPLE_RATE = 16000

MANIFEST_TEXT = """\
# Segments csv created Sun Mar  5 10:54:25 2017
# num_ytids=4, num_segs=4, num_unique_labels=3, num_positive_labels=5
# YTID, start_seconds, end_seconds, positive_labels
aaa, 30.000, 40.000, "/m/dog,/m/cat"
bbb, 0.000, 10.000, "/m/bird"
ccc, 10.000, 20.000, "/m/dog"
ddd, 5.000, 15.000, "/m/cat"
"""


@pytest.fixture
def rng():
    return np.random.default_rng(SEED)


@pytest.fixture
def make_corpus():
    """Build a corpus from a list of label tuples."""

    def _make(label_sets):
        return [
            Sample(path=f"sample_{i}.wav", classes=tuple(labels))
            for i, labels in enumerate(label_sets)
        ]

    return _make


@pytest.fixture
def abc_corpus(make_corpus):
    """a: 3 samples, b: 2 samples, c: 1 sample."""
    return make_corpus([("a",), ("a",), ("a",), ("b",), ("b",), ("c",)])


def encode_wav(data: np.ndarray, sr: int = SAMPLE_RATE) -> bytes:
    buf = io.BytesIO()
    sf.write(buf, data, sr, format="WAV", subtype="PCM_16")
    return buf.getvalue()


@pytest.fixture
def write_wav(tmp_path):
    """Write a (frames,) or (frames, channels) array as .wav or .wav.gz."""

    def _write(name, data, directory=None, gz=False):
        directory = directory or tmp_path
        raw = encode_wav(np.asarray(data, dtype=np.float64))
        if gz:
            raw = gzip.compress(raw)
        path = directory / name
        path.write_bytes(raw)
        return str(path)

    return _write


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "segments.csv"
    path.write_text(MANIFEST_TEXT, encoding="utf-8")
    return str(path)
