"""
Meta-learning episodes: a random subset of classes, every sample of those
classes, shuffled and truncated, with labels renumbered to [0, k).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np


@dataclass
class Episode:
    samples: List = field(default_factory=list)
    labels: List[int] = field(default_factory=list)
    # classes[i] is the corpus class behind dense label i
    classes: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Tuple[object, int]]:
        return iter(zip(self.samples, self.labels))

    @property
    def num_classes(self) -> int:
        """Number of distinct dense labels actually present."""
        return len(set(self.labels))


def class_index(corpus: Sequence) -> Tuple[List[str], Dict[str, List]]:
    """
    Map every class to the samples carrying it.

    Classes are listed in first-seen order. A sample that lists a class twice
    is indexed twice.
    """
    classes: List[str] = []
    by_class: Dict[str, List] = {}
    for sample in corpus:
        for c in sample.classes:
            if c not in by_class:
                classes.append(c)
                by_class[c] = []
            by_class[c].append(sample)
    return classes, by_class


def sample_episode(
    corpus: Sequence,
    num_classes: int,
    num_steps: int,
    rng: Optional[np.random.Generator] = None,
) -> Episode:
    """
    Generate a meta-learning episode.

    The episode includes up to num_classes classes and at most num_steps
    samples. Labels are assigned in [0, k) where k = min(num_classes,
    distinct classes in the corpus), in the order the classes were drawn.

    A sample carrying several of the drawn classes appears once per drawn
    class, each time with that class's label.
    """
    if num_classes < 0:
        raise ValueError(f"num_classes must be non-negative, got {num_classes}")
    if num_steps < 0:
        raise ValueError(f"num_steps must be non-negative, got {num_steps}")
    rng = rng if rng is not None else np.random.default_rng()

    classes, by_class = class_index(corpus)
    num_classes = min(num_classes, len(classes))

    chosen = [classes[j] for j in rng.permutation(len(classes))[:num_classes]]
    samples: List = []
    labels: List[int] = []
    for label, c in enumerate(chosen):
        for sample in by_class[c]:
            samples.append(sample)
            labels.append(label)

    order = rng.permutation(len(samples))[:num_steps]
    return Episode(
        samples=[samples[i] for i in order],
        labels=[labels[i] for i in order],
        classes=chosen,
    )
