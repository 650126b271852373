"""
Divide the set of classes into two separate sets, aiming to minimize the
number of samples with labels from both sets.

This is suitable for preparing a class-based data split for meta-learning
or one-shot learning applications.
"""

import argparse
import logging
import os
import platform
import socket
import sys
from typing import Any, Dict, Optional

from constants import (
    CREATED_AT,
    ENV,
    EVALUATION,
    GIT,
    HISTORY,
    HOST,
    INITIAL_NUM_DROP,
    ITERATIONS,
    ITERATIONS_RUN,
    LABELS,
    MANIFEST,
    N_SAMPLES,
    NUM_DROP,
    NUM_EVAL,
    PARAMETERS,
    PATH,
    PLATFORM,
    SEED,
    SHA,
    SHA256,
    TRAINING,
)
from helpers.constants import (
    DEFAULT_EVAL_OUT,
    DEFAULT_ITERS,
    DEFAULT_NUM_EVAL,
    DEFAULT_TRAIN_OUT,
)
from helpers.dataset import read_label_sets, write_label_list
from helpers.helpers_preprocess import make_rng
from helpers.partition import optimize_partition, PartitionResult
from utils.common import get_env_info, get_git_sha, save_json, sha256_file, utc_now

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def build_report(
    data: str,
    result: PartitionResult,
    n_samples: int,
    params: Dict[str, Any],
) -> Dict[str, Any]:
    """JSON-serializable summary of a class split run."""
    manifest_sha, _ = sha256_file(data)
    return {
        CREATED_AT: utc_now(),
        MANIFEST: {PATH: os.path.abspath(data), SHA256: manifest_sha},
        PARAMETERS: params,
        N_SAMPLES: n_samples,
        INITIAL_NUM_DROP: result.initial_num_drop,
        NUM_DROP: result.num_drop,
        ITERATIONS_RUN: result.iterations_run,
        HISTORY: [{"iter": i, NUM_DROP: d} for i, d in result.history],
        TRAINING: {LABELS: len(result.partition.training_labels)},
        EVALUATION: {LABELS: len(result.partition.evaluation_labels)},
        f"{GIT}_{SHA}": get_git_sha(),
        ENV: get_env_info(),
        HOST: socket.gethostname(),
        PLATFORM: platform.platform(),
    }


def class_split_cli(
    data: str,
    numeval: int = DEFAULT_NUM_EVAL,
    iters: int = DEFAULT_ITERS,
    trainout: str = DEFAULT_TRAIN_OUT,
    evalout: str = DEFAULT_EVAL_OUT,
    seed: Optional[int] = None,
    report: Optional[str] = None,
) -> PartitionResult:
    """
    Split the label universe of a manifest into training and evaluation
    classes by hill-climbing, then write both label lists.
    """
    if not data:
        raise SystemExit("Required flag: --data. See --help.")

    label_sets = read_label_sets(data)
    logger.info(f"Read {len(label_sets)} label sets from {data}")
    rng = make_rng(seed)

    result = optimize_partition(label_sets, numeval, iters, rng=rng)
    logger.info(
        f"Final split drops {result.num_drop} of {len(label_sets)} samples "
        f"(started with {result.initial_num_drop})."
    )

    logger.info(f"Writing {trainout} ...")
    write_label_list(trainout, result.partition.training_labels)

    logger.info(f"Writing {evalout} ...")
    write_label_list(evalout, result.partition.evaluation_labels)

    if report:
        params = {NUM_EVAL: numeval, ITERATIONS: iters, SEED: seed}
        save_json(report, build_report(data, result, len(label_sets), params))
        logger.info(f"Saved report: {report}")

    return result


def cli(sys_argv):
    parser = argparse.ArgumentParser(
        description="Split classes into training/evaluation sets with few shared samples",
        prog="class_split",
        usage="%(prog)s [options]",
    )
    parser.add_argument("--data", default="", help="data CSV path")
    parser.add_argument(
        "--numeval",
        type=int,
        default=DEFAULT_NUM_EVAL,
        help="number of evaluation classes",
    )
    parser.add_argument(
        "--iters",
        type=int,
        default=DEFAULT_ITERS,
        help="number of hill-climbing steps",
    )
    parser.add_argument(
        "--trainout", default=DEFAULT_TRAIN_OUT, help="training list output file"
    )
    parser.add_argument(
        "--evalout", default=DEFAULT_EVAL_OUT, help="evaluation list output file"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="random seed (default: unseeded)"
    )
    parser.add_argument(
        "--report", default=None, help="optional JSON report output file"
    )
    args = parser.parse_args(sys_argv)

    class_split_cli(**vars(args))


if __name__ == "__main__":
    cli(sys.argv[1:])
