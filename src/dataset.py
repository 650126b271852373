from typing import Callable, Sequence

import numpy as np
from torch.utils.data import DataLoader, Dataset, get_worker_info

from helpers.audio import read_sample, DecodeError
from helpers.batch import collate_episodes, episode_chunks, one_hot_labels
from helpers.constants import SEED
from helpers.dataset import (
    Sample,
    read_set,
    read_manifest,
    read_label_sets,
    corpus_classes,
    split_corpus,
    filter_corpus,
)
from helpers.episode import Episode, sample_episode


class EpisodeDataset(Dataset):
    """
    Random meta-learning episodes drawn from a corpus, as tensors.

    The index only bounds the epoch length: every item is a freshly sampled
    episode returned as (chunks, one_hot), where chunks[t] is the
    [n_chunks, chunk_size] PCM of step t and one_hot is [T, num_classes].

    Inside a DataLoader worker the generator is reseeded from (seed, worker id)
    so parallel workers draw different episodes.
    """

    def __init__(
        self,
        corpus: Sequence[Sample],
        num_classes: int,
        num_steps: int,
        chunk_size: int,
        episodes_per_epoch: int,
        augment: bool = False,
        seed: int = SEED,
        read_fn: Callable[[str], np.ndarray] = read_sample,
    ):
        self.corpus = list(corpus)
        self.num_classes = int(num_classes)
        self.num_steps = int(num_steps)
        self.chunk_size = int(chunk_size)
        self.episodes_per_epoch = int(episodes_per_epoch)
        self.augment = augment
        self.read_fn = read_fn
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self._worker_id = None

    def __len__(self) -> int:
        return self.episodes_per_epoch

    def _generator(self) -> np.random.Generator:
        info = get_worker_info()
        if info is not None and info.id != self._worker_id:
            self._worker_id = info.id
            self.rng = np.random.default_rng([self.seed, info.id])
        return self.rng

    def sample(self) -> Episode:
        return sample_episode(
            self.corpus, self.num_classes, self.num_steps, self._generator()
        )

    def __getitem__(self, idx: int):
        if not 0 <= idx < self.episodes_per_epoch:
            raise IndexError(idx)
        ep = self.sample()
        chunks = episode_chunks(
            ep, self.chunk_size, self.read_fn, self.rng, augment_pcm=self.augment
        )
        return chunks, one_hot_labels(ep.labels, self.num_classes)


def episode_loader(dataset: EpisodeDataset, batch_size: int) -> DataLoader:
    """DataLoader yielding padded EpisodeBatch objects."""
    return DataLoader(
        dataset, batch_size=batch_size, shuffle=False, collate_fn=collate_episodes
    )


__all__ = [
    "Sample",
    "Episode",
    "EpisodeDataset",
    "DecodeError",
    "episode_loader",
    "read_set",
    "read_manifest",
    "read_label_sets",
    "read_sample",
    "corpus_classes",
    "split_corpus",
    "filter_corpus",
    "sample_episode",
]
