"""
Find corrupted audio samples in a directory of samples.
"""

import argparse
import logging
import sys
from typing import List

from helpers.audio import DecodeError, read_sample
from helpers.dataset import iter_audio_files

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def find_bad_cli(dir_path: str) -> List[str]:
    """Print (and return) every .wav / .wav.gz file in dir_path that fails to decode."""
    if not dir_path:
        raise SystemExit("Required flag: --dir. See --help.")

    bad = []
    paths = iter_audio_files(dir_path)
    for path in paths:
        try:
            read_sample(path)
        except (DecodeError, OSError) as e:
            logger.error(f"{e}")
            bad.append(path)
            print(path)
    logger.info(f"{len(bad)} of {len(paths)} files failed to decode")
    return bad


def cli(sys_argv):
    parser = argparse.ArgumentParser(
        description="List audio files that cannot be decoded",
        prog="find_bad",
        usage="%(prog)s [options]",
    )
    parser.add_argument("--dir", dest="dir_path", default="", help="path to sample directory")
    args = parser.parse_args(sys_argv)

    find_bad_cli(**vars(args))


if __name__ == "__main__":
    cli(sys.argv[1:])
