"""
Corpus utilities: manifest parsing, sample lookup and label-based splits.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
import csv
import logging
import os

import numpy as np
import pandas as pd

from constants import (
    YTID,
    START_SECONDS,
    END_SECONDS,
    POSITIVE_LABELS,
    MANIFEST_COLUMNS,
)
from .constants import AUDIO_EXTENSIONS
from .audio import read_sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """Meta-data about one audio clip: where it lives and which classes it carries."""

    path: str
    classes: Tuple[str, ...] = ()

    def read(self) -> np.ndarray:
        """Decode the clip as mono PCM."""
        return read_sample(self.path)


# ---------------------------
# Manifest parsing
# ---------------------------
def split_labels(field: str) -> Tuple[str, ...]:
    """Split a comma-separated label field, dropping empty entries."""
    return tuple(lab.strip() for lab in field.split(",") if lab.strip())


def _read_rows(path: str, fields: Optional[int] = None) -> List[List[str]]:
    """
    Read a space-separated manifest. Lines starting with '#' are comments,
    fields may be quoted with '"' and trailing commas are part of the format:

      --PJHxphWEs, 30.000, 40.000, "/m/09x0r,/t/dd00088"

    Raises ValueError when `fields` is given and a row has another field count.
    """
    rows = []
    with open(path, "r", encoding="utf-8", newline="") as fh:
        # surrounding whitespace would otherwise show up as empty fields
        lines = (
            line.strip()
            for line in fh
            if line.strip() and not line.lstrip().startswith("#")
        )
        reader = csv.reader(lines, delimiter=" ", quotechar='"', skipinitialspace=True)
        for row in reader:
            if fields is not None and len(row) != fields:
                raise ValueError(
                    f"read {path}: row {len(rows) + 1}: expected {fields} fields, got {len(row)}"
                )
            rows.append(row)
    return rows


def read_manifest(path: str) -> pd.DataFrame:
    """
    Read a segment manifest into a DataFrame with columns:
      ytid, start_seconds, end_seconds, positive_labels

    start/end are kept as the strings found in the file since they are part
    of the audio file names. positive_labels holds tuples of labels.
    """
    rows = []
    for row in _read_rows(path, fields=len(MANIFEST_COLUMNS)):
        rows.append(
            {
                YTID: row[0].strip(","),
                START_SECONDS: row[1].strip(","),
                END_SECONDS: row[2].strip(","),
                POSITIVE_LABELS: split_labels(row[3]),
            }
        )
    if len(rows) == 0:
        return pd.DataFrame(columns=MANIFEST_COLUMNS)
    return pd.DataFrame(rows, columns=MANIFEST_COLUMNS)


def read_label_sets(path: str) -> List[Tuple[str, ...]]:
    """Label set of every manifest row, taken from the row's last field."""
    return [split_labels(row[-1]) for row in _read_rows(path)]


def find_audio_file(data_dir: str, ytid: str, start: str) -> Optional[str]:
    """Return the first existing <ytid>_<start><ext> in data_dir, or None."""
    for ext in AUDIO_EXTENSIONS:
        candidate = os.path.join(data_dir, f"{ytid}_{start}{ext}")
        if os.path.isfile(candidate):
            return candidate
    return None


def read_set(data_dir: str, manifest_path: str) -> List[Sample]:
    """
    Build a corpus by matching manifest rows with audio files in data_dir.
    Rows without a matching file are skipped.
    """
    meta = read_manifest(manifest_path)
    corpus: List[Sample] = []
    missing = 0
    for ytid, start, _, labels in meta.itertuples(index=False, name=None):
        path = find_audio_file(data_dir, ytid, start)
        if path is None:
            missing += 1
            logger.debug(f"no audio for {ytid}_{start}, skipping")
            continue
        corpus.append(Sample(path=path, classes=tuple(labels)))
    logger.info(
        f"Loaded {len(corpus)} samples from {manifest_path} ({missing} rows without audio)"
    )
    return corpus


def iter_audio_files(directory: str) -> List[str]:
    """Sorted paths of the .wav / .wav.gz files directly inside directory."""
    names = sorted(os.listdir(directory))
    return [
        os.path.join(directory, name)
        for name in names
        if name.endswith(AUDIO_EXTENSIONS)
        and os.path.isfile(os.path.join(directory, name))
    ]


# ---------------------------
# Classes and splits
# ---------------------------
def corpus_classes(corpus: Iterable[Sample]) -> List[str]:
    """All classes found in the corpus, sorted alphabetically."""
    classes = set()
    for sample in corpus:
        classes.update(sample.classes)
    return sorted(classes)


def split_corpus(
    corpus: Iterable[Sample], eval_classes: Iterable[str]
) -> Tuple[List[Sample], List[Sample]]:
    """
    Split a corpus into (training, evaluation) samples.

    A sample goes to a side only if all of its classes are on that side;
    samples with classes on both sides (or with no classes) are dropped.
    """
    eval_set = set(eval_classes)
    training: List[Sample] = []
    evaluation: List[Sample] = []
    for sample in corpus:
        n_eval = sum(1 for c in sample.classes if c in eval_set)
        n_train = len(sample.classes) - n_eval
        if n_eval != 0 and n_train == 0:
            evaluation.append(sample)
        elif n_eval == 0 and n_train != 0:
            training.append(sample)
    return training, evaluation


def filter_corpus(corpus: Iterable[Sample], partition) -> Tuple[List[Sample], List[Sample]]:
    """split_corpus() driven by a Partition's evaluation side."""
    return split_corpus(corpus, partition.evaluation_labels)


# ---------------------------
# Label lists
# ---------------------------
def read_label_list(path: str) -> List[str]:
    """Read a newline-delimited label list, ignoring blank lines."""
    with open(path, "r", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip()]


def write_label_list(path: str, labels: Iterable[str]) -> None:
    """Write one label per line with a trailing newline."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write("\n".join(labels) + "\n")
