"""
Turn episodes into tensors for a sequence meta-learner.

Every sample becomes a sequence of fixed-size PCM chunks; every episode
becomes a sequence of one-hot labels. The learner sees, at step t, the
features of sample t next to the label of sample t-1.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple
import math

import numpy as np
import torch
from torch.nn.utils.rnn import pad_sequence

from .audio import DecodeError, read_sample
from .augment import augment
from .episode import Episode, sample_episode


def chunk_waveform(pcm, chunk_size: int) -> torch.Tensor:
    """Split a waveform into [n_chunks, chunk_size], zero-padding the last chunk."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    pcm = torch.as_tensor(np.asarray(pcm, dtype=np.float32)).reshape(-1)
    n_chunks = math.ceil(pcm.numel() / chunk_size)
    if n_chunks == 0:
        return torch.zeros((0, chunk_size), dtype=torch.float32)
    pad = n_chunks * chunk_size - pcm.numel()
    return torch.nn.functional.pad(pcm, (0, pad)).reshape(n_chunks, chunk_size)


def one_hot_labels(labels: Sequence[int], num_classes: int) -> torch.Tensor:
    """[T] dense labels -> [T, num_classes] float one-hot rows."""
    labels = list(labels)
    if len(labels) == 0:
        return torch.zeros((0, num_classes), dtype=torch.float32)
    idx = torch.as_tensor(labels, dtype=torch.long)
    return torch.nn.functional.one_hot(idx, num_classes=num_classes).float()


def previous_labels(one_hot: torch.Tensor) -> torch.Tensor:
    """Shift labels one step later along the time axis (dim -2); step 0 gets zeros."""
    prev = torch.zeros_like(one_hot)
    prev[..., 1:, :] = one_hot[..., :-1, :]
    return prev


def episode_inputs(features: torch.Tensor, one_hot: torch.Tensor) -> torch.Tensor:
    """Concatenate [B, T, F] features with the previous step's [B, T, K] labels."""
    if features.shape[:-1] != one_hot.shape[:-1]:
        raise ValueError(
            f"features {tuple(features.shape)} and labels {tuple(one_hot.shape)} disagree on batch/time"
        )
    return torch.cat([features, previous_labels(one_hot).to(features.dtype)], dim=-1)


def episode_chunks(
    episode: Episode,
    chunk_size: int,
    read_fn: Callable[[str], np.ndarray] = read_sample,
    rng: Optional[np.random.Generator] = None,
    augment_pcm: bool = False,
) -> List[torch.Tensor]:
    """Read every sample of an episode and chunk it. Decode errors propagate."""
    chunks = []
    for sample in episode.samples:
        try:
            pcm = read_fn(sample.path)
        except DecodeError as e:
            raise DecodeError(f"fetch samples: {e}") from e
        if augment_pcm:
            pcm = augment(pcm, rng)
        chunks.append(chunk_waveform(pcm, chunk_size))
    return chunks


@dataclass
class EpisodeBatch:
    # samples[b][t] is a [n_chunks, chunk_size] tensor
    samples: List[List[torch.Tensor]]
    # [B, T, K] one-hot labels, zero rows past each episode's end
    labels: torch.Tensor
    # [B, T] True where a step is present
    mask: torch.Tensor
    episodes: List[Episode] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)


def collate_episodes(items: Sequence[Tuple[List[torch.Tensor], torch.Tensor]]) -> EpisodeBatch:
    """Pad a list of (chunks, one_hot) episode items into an EpisodeBatch."""
    if len(items) == 0:
        raise ValueError("cannot collate an empty batch")
    samples = [chunks for chunks, _ in items]
    one_hots = [oh for _, oh in items]
    labels = pad_sequence(one_hots, batch_first=True)
    lengths = torch.tensor([oh.shape[0] for oh in one_hots], dtype=torch.long)
    mask = torch.arange(labels.shape[1]).unsqueeze(0) < lengths.unsqueeze(1)
    return EpisodeBatch(samples=samples, labels=labels, mask=mask)


def fetch_batch(
    corpus: Sequence,
    batch_size: int,
    num_classes: int,
    num_steps: int,
    chunk_size: int,
    rng: Optional[np.random.Generator] = None,
    read_fn: Callable[[str], np.ndarray] = read_sample,
    augment_pcm: bool = False,
) -> EpisodeBatch:
    """Produce a batch of batch_size freshly sampled episodes."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    rng = rng if rng is not None else np.random.default_rng()
    items = []
    episodes = []
    for _ in range(batch_size):
        ep = sample_episode(corpus, num_classes, num_steps, rng)
        chunks = episode_chunks(ep, chunk_size, read_fn, rng, augment_pcm)
        items.append((chunks, one_hot_labels(ep.labels, num_classes)))
        episodes.append(ep)
    batch = collate_episodes(items)
    batch.episodes = episodes
    return batch

