"""Tests for the completeness checks."""

import pytest

from camerainit.core.errors import IncompleteOutputError
from camerainit.core.models.project import CameraInitOptions, CameraInitReport, SensorIssue
from camerainit.core.pipeline.gate import check_completeness


def make_report(complete_views, total_views=3, unknown=False):
    unknown_sensors = []
    if unknown:
        unknown_sensors.append(SensorIssue(make="Nikon", model="D800", image_path="/data/a.jpg"))
    return CameraInitReport(
        total_views=total_views,
        complete_views=complete_views,
        unknown_sensors=unknown_sensors,
    )


class TestCompletenessGate:
    """Test completeness checks."""

    def test_two_complete_views(self):
        """Test the minimum complete result."""
        check_completeness(make_report(2), CameraInitOptions())

    def test_single_view_rejected(self):
        """Test one complete view is not enough by default."""
        with pytest.raises(IncompleteOutputError, match="two images"):
            check_completeness(make_report(1), CameraInitOptions())

    def test_single_view_allowed(self):
        """Test one complete view with allow_single_view."""
        options = CameraInitOptions(allow_single_view=True)
        check_completeness(make_report(1), options)

        with pytest.raises(IncompleteOutputError, match="one image"):
            check_completeness(make_report(0), options)

    def test_unknown_sensor_without_default(self):
        """Test an unknown camera fails the run without a default focal."""
        with pytest.raises(IncompleteOutputError, match="Nikon D800"):
            check_completeness(make_report(3, unknown=True), CameraInitOptions())

    def test_unknown_sensor_with_default(self):
        """Test an unknown camera is accepted with a default focal."""
        check_completeness(make_report(3, unknown=True), CameraInitOptions(default_field_of_view=45.0))
        check_completeness(make_report(3, unknown=True), CameraInitOptions(default_focal_length_pix=1000.0))

    def test_allow_incomplete_output(self):
        """Test nothing is checked with allow_incomplete_output."""
        options = CameraInitOptions(allow_incomplete_output=True)
        check_completeness(make_report(0, unknown=True), options)
