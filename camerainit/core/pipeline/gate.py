"""Completeness checks run before a result may be written."""

from ..errors import IncompleteOutputError
from ..models.project import CameraInitOptions, CameraInitReport


def check_completeness(report: CameraInitReport, options: CameraInitOptions) -> None:
    """Fail the run if too few views have an initialized intrinsic.

    Nothing is checked when ``allow_incomplete_output`` is set.

    Raises:
        IncompleteOutputError: If a camera is missing from the sensor database
            and no default focal length was given, or if fewer than two views
            (one with ``allow_single_view``) are complete
    """
    if options.allow_incomplete_output:
        return

    if report.unknown_sensors and not options.has_default_focal():
        cameras = ", ".join(f"{s.make} {s.model}".strip() for s in report.unknown_sensors)
        raise IncompleteOutputError(
            f"Sensor width unknown for camera(s): {cameras}. "
            "Add them to the sensor database or give a default focal length."
        )

    required = 1 if options.allow_single_view else 2
    if report.complete_views < required:
        raise IncompleteOutputError(
            f"At least {'one image' if required == 1 else 'two images'} should have an initialized "
            f"intrinsic, got {report.complete_views} of {report.total_views}.\n"
            "Check your input images metadata (brand, model, focal length, ...), "
            "more should be set and correct."
        )
