"""Smokewatch smoker telemetry and cook-completion forecasting package."""

# Define public API
__all__ = [
    "MonitorSettings",
    "MonitorSession",
    "HistoryBuffer",
    "Sample",
    "Probe",
    "Prediction",
    "PredictionKind",
    "Status",
    "predict_completion",
    "classify_status",
    "export_csv",
]

# Import settings
from .settings import MonitorSettings

# Import models
from .models import Prediction, PredictionKind, Probe, Sample, Status

# Import core stages
from .history import HistoryBuffer
from .predictor import predict_completion
from .status import classify_status
from .export import export_csv
from .session import MonitorSession
