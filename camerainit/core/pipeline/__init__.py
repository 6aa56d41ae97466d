"""Camera initialization pipeline."""

from .engine import CameraInitEngine, ViewResolution, run_camera_init
from .gate import check_completeness
from .report import ReportBuilder, ResolutionOutcome, log_report_details

__all__ = [
    "CameraInitEngine",
    "ViewResolution",
    "run_camera_init",
    "check_completeness",
    "ReportBuilder",
    "ResolutionOutcome",
    "log_report_details",
]
