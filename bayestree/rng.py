"""
The process-wide random number generator used when sampling without an explicit rng.

It is created on first use with a fixed seed, so a given sequence of sampling calls
produces the same results from run to run. Draws are serialised with a lock,
which makes concurrent sampling from several threads safe.
"""
import logging
import threading
import numpy as np

from bayestree.config import SAMPLER_SEED

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_shared = None


def _shared_rng():
    # callers hold _lock
    global _shared
    if _shared is None:
        logger.debug("creating shared generator with seed %d", SAMPLER_SEED)
        _shared = np.random.default_rng(SAMPLER_SEED)
    return _shared


def reseed(seed=SAMPLER_SEED):
    """Reset the shared generator to a fresh generator seeded with `seed`."""
    global _shared
    with _lock:
        _shared = np.random.default_rng(seed)


def draw_categorical(p, rng=None) -> int:
    """
    Draw an outcome in range(len(p)) with probability proportional to p.

    p: non-negative weights (they need not sum to 1)
    rng: a numpy Generator; if None, the shared generator is used (under the lock)
    """
    p = np.asarray(p, dtype=float)
    total = np.sum(p)
    if not total > 0:
        raise ValueError(f"I need weights with a positive sum, got {total}")
    p = p / total
    if rng is not None:
        return int(rng.choice(len(p), p=p))
    with _lock:
        return int(_shared_rng().choice(len(p), p=p))
