"""
Compute the running variance of sample amplitudes over a directory of
audio files.
"""

import argparse
import logging
import sys

from helpers.audio import DecodeError, read_sample
from helpers.dataset import iter_audio_files
from helpers.stats import RollingVariance

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def pcm_stats_cli(dir_path: str) -> RollingVariance:
    if not dir_path:
        raise SystemExit("Required flag: --dir. See --help.")

    stats = RollingVariance()
    for path in iter_audio_files(dir_path):
        try:
            data = read_sample(path)
        except (DecodeError, OSError) as e:
            # keep the progress line intact
            sys.stdout.write("\n")
            logger.error(f"{e}")
            continue
        stats.update(data)
        sys.stdout.write(f"variance={stats.variance:f}     \r")
        sys.stdout.flush()
    sys.stdout.write("\n")
    logger.info(f"n={stats.n} mean={stats.mean:f} variance={stats.variance:f}")
    return stats


def cli(sys_argv):
    parser = argparse.ArgumentParser(
        description="Running variance of PCM amplitudes in a sample directory",
        prog="pcm_stats",
        usage="%(prog)s [options]",
    )
    parser.add_argument("--dir", dest="dir_path", default="", help="path to sample directory")
    args = parser.parse_args(sys_argv)

    pcm_stats_cli(**vars(args))


if __name__ == "__main__":
    cli(sys.argv[1:])
