from .estimator import (
    EstimatorState,
    Snapshot,
    eta_seconds,
    extrapolate,
    format_eta,
    refresh_due,
)

__all__ = [
    'EstimatorState',
    'Snapshot',
    'eta_seconds',
    'extrapolate',
    'format_eta',
    'refresh_due',
]
