import logging
import random
from typing import Optional

import numpy as np
import torch

from .constants import SEED

logger = logging.getLogger(__name__)


def set_seed(seed=SEED):
    """Set random seed for reproducibility"""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Generator handed to the partition search, episode sampler and augmenter.
    seed=None draws fresh OS entropy.
    """
    if seed is not None:
        set_seed(seed)
        logger.info(f"random seed: {seed}")
    return np.random.default_rng(seed)
