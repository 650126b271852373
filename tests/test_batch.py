"""Tests for episode tensors and batches."""

from types import SimpleNamespace

import numpy as np
import pytest
import torch

import dataset as dataset_module
from dataset import EpisodeDataset, episode_loader
from helpers.audio import DecodeError
from helpers.batch import (
    chunk_waveform,
    collate_episodes,
    episode_inputs,
    fetch_batch,
    one_hot_labels,
    previous_labels,
)


def constant_reader(path):
    return np.ones(10)


def test_chunk_waveform_pads_last_chunk():
    chunks = chunk_waveform(np.arange(10, dtype=np.float64), 4)
    assert chunks.shape == (3, 4)
    assert chunks[2].tolist() == [8.0, 9.0, 0.0, 0.0]


def test_chunk_waveform_empty():
    assert chunk_waveform([], 4).shape == (0, 4)
    with pytest.raises(ValueError):
        chunk_waveform([1.0], 0)


def test_one_hot_labels():
    oh = one_hot_labels([2, 0], 3)
    assert oh.tolist() == [[0.0, 0.0, 1.0], [1.0, 0.0, 0.0]]
    assert one_hot_labels([], 3).shape == (0, 3)


def test_previous_labels_shift():
    oh = one_hot_labels([0, 1, 2], 3).unsqueeze(0)
    prev = previous_labels(oh)
    assert prev[0, 0].tolist() == [0.0, 0.0, 0.0]
    assert torch.equal(prev[0, 1:], oh[0, :-1])


def test_episode_inputs():
    features = torch.randn(2, 5, 7)
    oh = torch.zeros(2, 5, 3)
    oh[:, :, 1] = 1
    inputs = episode_inputs(features, oh)
    assert inputs.shape == (2, 5, 10)
    assert torch.equal(inputs[..., :7], features)
    assert inputs[:, 0, 7:].abs().sum() == 0
    assert torch.equal(inputs[:, 1:, 7:], oh[:, :-1])
    with pytest.raises(ValueError):
        episode_inputs(features, torch.zeros(2, 4, 3))


def test_fetch_batch(abc_corpus, rng):
    batch = fetch_batch(abc_corpus, 3, 2, 4, 4, rng, read_fn=constant_reader)
    assert len(batch) == 3
    assert batch.labels.shape[0] == 3
    assert batch.labels.shape[2] == 2
    for b, ep in enumerate(batch.episodes):
        n = len(ep)
        assert int(batch.mask[b].sum()) == n
        assert batch.labels[b, :n].argmax(dim=1).tolist() == ep.labels
        assert batch.labels[b, n:].abs().sum() == 0
        assert len(batch.samples[b]) == n
        assert all(chunks.shape == (3, 4) for chunks in batch.samples[b])


def test_fetch_batch_with_augmentation(abc_corpus, rng):
    batch = fetch_batch(
        abc_corpus, 1, 3, 6, 100, rng, read_fn=constant_reader, augment_pcm=True
    )
    for chunks in batch.samples[0]:
        assert chunks.shape == (1, 100)
        # at most ceil(9 * 1.1) samples survive the stretch
        assert chunks[0, 11:].abs().sum() == 0


def test_fetch_batch_propagates_decode_errors(abc_corpus, rng):
    def broken(path):
        raise DecodeError(f"read {path}: bad sample count")

    with pytest.raises(DecodeError, match="fetch samples"):
        fetch_batch(abc_corpus, 1, 2, 4, 4, rng, read_fn=broken)


def test_collate_pads_to_longest_episode():
    short = ([torch.zeros(1, 4)], one_hot_labels([1], 3))
    long = ([torch.zeros(1, 4)] * 3, one_hot_labels([0, 2, 1], 3))
    batch = collate_episodes([short, long])
    assert batch.labels.shape == (2, 3, 3)
    assert batch.mask.tolist() == [[True, False, False], [True, True, True]]
    assert batch.labels[0, 1:].sum().item() == 0
    with pytest.raises(ValueError):
        collate_episodes([])


def test_fetch_batch_needs_positive_size(abc_corpus, rng):
    with pytest.raises(ValueError):
        fetch_batch(abc_corpus, 0, 2, 4, 4, rng, read_fn=constant_reader)


def test_episode_dataset_and_loader(abc_corpus):
    ds = EpisodeDataset(
        abc_corpus, 2, 4, 5, episodes_per_epoch=6, read_fn=constant_reader
    )
    assert len(ds) == 6
    chunks, oh = ds[0]
    assert oh.shape[1] == 2
    assert len(chunks) == oh.shape[0]
    with pytest.raises(IndexError):
        ds[6]

    batches = list(episode_loader(ds, batch_size=4))
    assert [len(b) for b in batches] == [4, 2]
    assert batches[0].labels.shape[2] == 2


def draw_paths(ds, n=10):
    return [[s.path for s in ds.sample().samples] for _ in range(n)]


def test_episode_dataset_reseeds_per_worker(abc_corpus, monkeypatch):
    def make():
        return EpisodeDataset(abc_corpus, 3, 6, 5, episodes_per_epoch=10, seed=7)

    draws = {}
    for worker_id in (0, 1):
        monkeypatch.setattr(
            dataset_module, "get_worker_info", lambda: SimpleNamespace(id=worker_id)
        )
        draws[worker_id] = draw_paths(make())
        assert draw_paths(make()) == draws[worker_id]
    assert draws[0] != draws[1]

    monkeypatch.setattr(dataset_module, "get_worker_info", lambda: None)
    assert draw_paths(make()) not in (draws[0], draws[1])
