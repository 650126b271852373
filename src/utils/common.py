import hashlib
import os
import subprocess
import json
import sys
from datetime import datetime, timezone

from constants import LOCAL


def _safe_mkdir(path: str):
    """Create a directory if it doesn't exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def sha256_file(path: str):
    """Compute the SHA-256 hash and file size of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            h.update(chunk)
    return h.hexdigest(), os.path.getsize(path)


def get_git_sha():
    """Get the current Git commit SHA."""
    try:
        sha = (
            subprocess.check_output(
                ["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL
            )
            .decode()
            .strip()
        )
        return sha
    except (OSError, subprocess.CalledProcessError):
        return LOCAL


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def save_json(path, obj):
    """Save an object to a JSON file"""
    _safe_mkdir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)


def get_env_info() -> dict:
    """Gather versions of key environment packages."""
    env_info = {"python": sys.version.split()[0]}
    try:
        import numpy as _np

        env_info["numpy"] = _np.__version__
    except ImportError:
        env_info["numpy"] = None
    try:
        import pandas as _pd

        env_info["pandas"] = _pd.__version__
    except ImportError:
        env_info["pandas"] = None
    try:
        import soundfile as _sf

        env_info["soundfile"] = _sf.__version__
    except ImportError:
        env_info["soundfile"] = None
    try:
        import torch as _torch

        env_info["torch"] = _torch.__version__
    except ImportError:
        env_info["torch"] = None
    return env_info
