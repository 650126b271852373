"""
Draw meta-learning episodes from one side of a class split and write them
as JSON lines.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from constants import CLASSES, LABELS, PATHS
from helpers.constants import DEFAULT_NUM_CLASSES, DEFAULT_NUM_EPISODES, DEFAULT_NUM_STEPS
from helpers.dataset import corpus_classes, read_label_list, read_set, split_corpus
from helpers.episode import Episode, sample_episode
from helpers.helpers_preprocess import make_rng

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def restrict_corpus(corpus, classes: List[str]):
    """Keep the samples whose classes all belong to `classes`."""
    keep = set(classes)
    others = [c for c in corpus_classes(corpus) if c not in keep]
    # everything outside the list plays the role of the other split
    restricted, _ = split_corpus(corpus, others)
    return restricted


def episode_record(ep: Episode) -> dict:
    return {
        PATHS: [s.path for s in ep.samples],
        LABELS: list(ep.labels),
        CLASSES: list(ep.classes),
    }


def episodes_cli(
    data_dir: str,
    manifest: str,
    classes: Optional[str] = None,
    num_classes: int = DEFAULT_NUM_CLASSES,
    num_steps: int = DEFAULT_NUM_STEPS,
    num_episodes: int = DEFAULT_NUM_EPISODES,
    seed: Optional[int] = None,
    out: Optional[str] = None,
) -> List[Episode]:
    corpus = read_set(data_dir, manifest)
    if classes:
        class_list = read_label_list(classes)
        corpus = restrict_corpus(corpus, class_list)
        logger.info(
            f"{len(corpus)} samples left after restricting to {len(class_list)} classes from {classes}"
        )
    if not corpus:
        logger.warning("corpus is empty; episodes will be empty")

    rng = make_rng(seed)
    episodes = [
        sample_episode(corpus, num_classes, num_steps, rng) for _ in range(num_episodes)
    ]

    lines = [json.dumps(episode_record(ep)) for ep in episodes]
    if out:
        with open(out, "w", encoding="utf-8") as fh:
            for line in lines:
                fh.write(line + "\n")
        logger.info(f"Wrote {len(episodes)} episodes to {out}")
    else:
        for line in lines:
            print(line)
    return episodes


def cli(sys_argv):
    parser = argparse.ArgumentParser(
        description="Sample meta-learning episodes from an audio corpus",
        prog="episodes",
        usage="%(prog)s [options]",
    )
    parser.add_argument("--data-dir", required=True, help="directory with audio samples")
    parser.add_argument("--manifest", required=True, help="segments CSV path")
    parser.add_argument(
        "--classes",
        default=None,
        help="optional class list (e.g. train.txt from class_split) to restrict the corpus to",
    )
    parser.add_argument("--num-classes", type=int, default=DEFAULT_NUM_CLASSES)
    parser.add_argument("--num-steps", type=int, default=DEFAULT_NUM_STEPS)
    parser.add_argument("--num-episodes", type=int, default=DEFAULT_NUM_EPISODES)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out", default=None, help="JSON lines output (default: stdout)")
    args = parser.parse_args(sys_argv)

    episodes_cli(**vars(args))


if __name__ == "__main__":
    cli(sys.argv[1:])
