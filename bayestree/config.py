"""
Package-wide defaults.

There are no configuration files: these constants are the defaults that
surface as keyword arguments (tol=..., rng=None) of the functions using them.
"""
import logging

# seed of the process-wide generator used by DiscreteConditional.sample
SAMPLER_SEED = 2

# absolute tolerance used by equals() on factors, conditionals and trees
EQUALITY_TOL = 1e-9

# tolerance when checking that a conditional sums to 1.0 over its frontals
NORMALIZATION_TOL = 1e-6

LOGGER_NAME = "bayestree"


def enable_logging(level=logging.DEBUG, fmt="%(asctime)s %(name)s %(levelname)s: %(message)s"):
    """
    Attach a stream handler to the package logger (handy in notebooks and scripts).
    The library itself never configures logging, it only emits debug messages.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not any(getattr(h, "_bayestree", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler._bayestree = True
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
