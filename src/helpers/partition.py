"""
Label-disjoint partitioning of a multi-label class universe.

A Partition sends every label either to the training side (True) or to the
evaluation side (False). Samples carrying labels from both sides cannot be
used by either split and are "dropped"; optimize_partition() looks for a
partition with few drops by greedy hill-climbing over single swap moves.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def label_universe(label_sets: Iterable[Iterable[str]]) -> List[str]:
    """All distinct labels found in label_sets, sorted alphabetically."""
    universe = set()
    for labels in label_sets:
        universe.update(labels)
    return sorted(universe)


class Partition:
    """
    Immutable assignment of every label in a universe to one side.

    sides[i] is True when labels[i] is a training label. The array is
    read-only; mutate() returns a new Partition.
    """

    def __init__(self, labels: Sequence[str], sides):
        labels = tuple(labels)
        sides = np.array(sides, dtype=bool)
        if sides.shape != (len(labels),):
            raise ValueError(
                f"partition needs one side per label: {len(labels)} labels, sides shape {sides.shape}"
            )
        index = {lab: i for i, lab in enumerate(labels)}
        if len(index) != len(labels):
            raise ValueError("partition labels must be unique")
        sides.setflags(write=False)
        self._labels = labels
        self._index = index
        self._sides = sides

    @classmethod
    def random(
        cls, labels: Iterable[str], num_eval: int, rng: np.random.Generator
    ) -> "Partition":
        """Put num_eval labels, chosen uniformly without replacement, on the evaluation side."""
        labels = sorted(set(labels))
        if num_eval < 0 or num_eval > len(labels):
            raise ValueError(
                f"num_eval must be in [0, {len(labels)}], got {num_eval}"
            )
        sides = np.ones(len(labels), dtype=bool)
        sides[rng.permutation(len(labels))[:num_eval]] = False
        return cls(labels, sides)

    @classmethod
    def from_eval_labels(
        cls, labels: Iterable[str], eval_labels: Iterable[str]
    ) -> "Partition":
        labels = sorted(set(labels))
        eval_set = set(eval_labels)
        unknown = eval_set.difference(labels)
        if unknown:
            raise ValueError(f"evaluation labels not in universe: {sorted(unknown)}")
        return cls(labels, [lab not in eval_set for lab in labels])

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    @property
    def sides(self) -> np.ndarray:
        return self._sides

    @property
    def index(self) -> Dict[str, int]:
        return dict(self._index)

    @property
    def num_eval(self) -> int:
        return int(len(self._sides) - self._sides.sum())

    @property
    def training_labels(self) -> List[str]:
        return self.keys_for_side(True)

    @property
    def evaluation_labels(self) -> List[str]:
        return self.keys_for_side(False)

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label) -> bool:
        return label in self._index

    def __eq__(self, other) -> bool:
        if not isinstance(other, Partition):
            return NotImplemented
        return self._labels == other._labels and bool(
            np.array_equal(self._sides, other._sides)
        )

    def __repr__(self) -> str:
        return f"Partition(training={len(self) - self.num_eval}, evaluation={self.num_eval})"

    def side(self, label: str) -> bool:
        """True if label is on the training side. KeyError for unknown labels."""
        return bool(self._sides[self._index[label]])

    def keys_for_side(self, training: bool) -> List[str]:
        return [lab for lab, s in zip(self._labels, self._sides) if s == training]

    def to_dict(self) -> Dict[str, bool]:
        return {lab: bool(s) for lab, s in zip(self._labels, self._sides)}

    def swapped(self) -> "Partition":
        """Same universe with every label moved to the opposite side."""
        return Partition(self._labels, ~self._sides)

    def mutate(self, rng: np.random.Generator) -> "Partition":
        """
        Swap one uniformly chosen training label with one uniformly chosen
        evaluation label. The receiver is left untouched.
        """
        train_idx = np.flatnonzero(self._sides)
        eval_idx = np.flatnonzero(~self._sides)
        if len(train_idx) == 0 or len(eval_idx) == 0:
            raise ValueError("cannot mutate a partition with an empty side")
        t = train_idx[rng.integers(len(train_idx))]
        f = eval_idx[rng.integers(len(eval_idx))]
        sides = self._sides.copy()
        sides[t], sides[f] = False, True
        return Partition(self._labels, sides)


class LabelIncidence:
    """
    Flattened (sample, label) incidence of a corpus against a label table.

    Each occurrence of a label in a sample's label set is one entry, so the
    drop count can be computed with a single bincount per partition.
    """

    def __init__(self, label_sets: Sequence[Iterable[str]], labels: Sequence[str]):
        index = {lab: i for i, lab in enumerate(labels)}
        sample_idx: List[int] = []
        label_idx: List[int] = []
        for i, sample_labels in enumerate(label_sets):
            for lab in sample_labels:
                sample_idx.append(i)
                label_idx.append(index[lab])
        self.labels = tuple(labels)
        self.num_samples = len(label_sets)
        self.sample_idx = np.asarray(sample_idx, dtype=np.int64)
        self.label_idx = np.asarray(label_idx, dtype=np.int64)
        self.labels_per_sample = np.bincount(
            self.sample_idx, minlength=self.num_samples
        )

    def num_drop(self, partition: Partition) -> int:
        if partition.labels != self.labels:
            raise ValueError("partition was built over a different label universe")
        if self.num_samples == 0:
            return 0
        n_train = np.bincount(
            self.sample_idx,
            weights=partition.sides[self.label_idx].astype(np.float64),
            minlength=self.num_samples,
        )
        n_eval = self.labels_per_sample - n_train
        return int(np.count_nonzero((n_train > 0) & (n_eval > 0)))


def num_drop(partition: Partition, label_sets: Iterable[Iterable[str]]) -> int:
    """
    Count samples whose labels fall on both sides of the partition.

    Plain rescan of every label set; samples without labels never count.
    Labels missing from the partition count as evaluation labels.
    """
    sides = partition.to_dict()
    drop = 0
    for sample_labels in label_sets:
        n_train = n_eval = 0
        for lab in sample_labels:
            if sides.get(lab, False):
                n_train += 1
            else:
                n_eval += 1
        if n_train > 0 and n_eval > 0:
            drop += 1
    return drop


@dataclass
class PartitionResult:
    partition: Partition
    num_drop: int
    initial_num_drop: int
    iterations_run: int
    # (iteration, num_drop) for every accepted candidate
    history: List[Tuple[int, int]] = field(default_factory=list)


def optimize_partition(
    label_sets: Sequence[Iterable[str]],
    num_eval: int,
    iterations: int,
    rng: Optional[np.random.Generator] = None,
    on_improve: Optional[Callable[[int, int, Partition], None]] = None,
    should_stop: Optional[Callable[[int, int], bool]] = None,
) -> PartitionResult:
    """
    Find a training/evaluation partition of the label universe with few
    dropped samples.

    Starts from a random partition with num_eval evaluation labels, then for
    `iterations` steps mutates the best candidate and keeps the mutation only
    if it drops strictly fewer samples. This is plain greedy local search, so
    the result may be a local minimum.

    Args:
        label_sets: one iterable of labels per sample.
        num_eval: number of evaluation labels. Clamped to |U| - 1 so that both
            sides stay non-empty.
        iterations: number of candidates to evaluate.
        rng: numpy Generator; a fresh unseeded one is used when omitted.
        on_improve: called as on_improve(iteration, num_drop, partition) after
            every accepted candidate.
        should_stop: called as should_stop(iteration, best_num_drop) before
            every iteration; a truthy return ends the search early.
    """
    if num_eval < 0:
        raise ValueError(f"num_eval must be non-negative, got {num_eval}")
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
    rng = rng if rng is not None else np.random.default_rng()

    label_sets = [tuple(labels) for labels in label_sets]
    labels = label_universe(label_sets)
    if num_eval >= len(labels) and num_eval > 0:
        clamped = max(len(labels) - 1, 0)
        logger.warning(
            f"num_eval={num_eval} leaves no training labels ({len(labels)} labels); using {clamped}"
        )
        num_eval = clamped

    incidence = LabelIncidence(label_sets, labels)
    best = Partition.random(labels, num_eval, rng)
    best_drop = incidence.num_drop(best)
    initial_drop = best_drop
    history: List[Tuple[int, int]] = []
    logger.info(f"started with {best_drop} dropped.")

    if num_eval == 0:
        logger.info("no evaluation labels requested; nothing to search")
        return PartitionResult(best, best_drop, initial_drop, 0, history)

    iterations_run = 0
    for i in range(iterations):
        if should_stop is not None and should_stop(i, best_drop):
            logger.info(f"stopped early at iter {i}/{iterations}")
            break
        candidate = best.mutate(rng)
        d = incidence.num_drop(candidate)
        iterations_run += 1
        if d < best_drop:
            best, best_drop = candidate, d
            history.append((i, d))
            logger.info(f"iter {i}/{iterations}: improved to {d} dropped.")
            if on_improve is not None:
                on_improve(i, d, candidate)

    return PartitionResult(best, best_drop, initial_drop, iterations_run, history)
