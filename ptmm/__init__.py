"""Threaded dense matrix product / repeated-squaring micro-benchmark."""

from . import config, engine, errors, kernels, matrix, partition, reference, timing, trace

__all__ = [
    "config",
    "engine",
    "errors",
    "kernels",
    "matrix",
    "partition",
    "reference",
    "timing",
    "trace",
]

__version__ = "0.1.0"
