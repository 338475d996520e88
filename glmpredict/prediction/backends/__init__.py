"""
Prediction backends.

Available backends:
    CPUWaldBackend: Response-scale Wald confidence intervals
    CPUPredictBackend: Point predictions on link or response scale
"""

from glmpredict.prediction.backends.cpu import CPUWaldBackend, CPUPredictBackend

__all__ = [
    "CPUWaldBackend",
    "CPUPredictBackend",
]
