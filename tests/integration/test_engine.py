"""Integration tests for the camera initialization engine."""

import logging
import math

import pytest

from camerainit.core.errors import IncompleteOutputError, NoViewsError, RigStructureError
from camerainit.core.intrinsics.grouping import CounterIdGenerator
from camerainit.core.models.entities import InitializationMode, Intrinsic, View
from camerainit.core.models.project import CameraInitOptions, SfMProject
from camerainit.core.pipeline.engine import CameraInitEngine, run_camera_init
from camerainit.core.sensors.database import SensorDatabase
from camerainit.io.project_io import load_project, save_project

DATABASE = SensorDatabase.parse([
    "Canon;Canon EOS 5D Mark II;36.0",
    "Sony;DSC-RX100;13.2",
])

CANON = {"Make": "Canon", "Model": "Canon EOS 5D Mark II", "Exif:FocalLength": "50"}


def make_project(entries, width=6000, height=4000):
    """Build a project from (path, metadata) pairs, view ids 1..n."""
    project = SfMProject()
    for view_id, (path, metadata) in enumerate(entries, start=1):
        project.add_view(View(
            view_id=view_id,
            path=path,
            width=width,
            height=height,
            metadata=metadata,
        ))
    return project


def run(project, **options):
    engine = CameraInitEngine(options=CameraInitOptions(**options), sensor_lookup=DATABASE.lookup)
    return engine.run(project)


class TestMetadataResolution:
    """Test intrinsics resolved from metadata."""

    def test_database_and_focal(self):
        """Test two shots of one camera share a resolved intrinsic."""
        project = make_project([("/data/a.jpg", CANON), ("/data/b.jpg", CANON)])

        report = run(project)

        assert report.total_views == 2
        assert report.complete_views == 2
        assert len(project.intrinsics) == 1
        intrinsic_id = project.views[1].intrinsic_id
        assert project.views[2].intrinsic_id == intrinsic_id

        intrinsic = project.intrinsics[intrinsic_id]
        assert intrinsic.focal_length_pix == pytest.approx(50.0 * 6000 / 36.0, rel=1e-9)
        assert intrinsic.principal_point == [3000.0, 2000.0]
        assert intrinsic.initialization_mode == InitializationMode.COMPUTED_FROM_METADATA
        assert project.validate_project() == []

    def test_different_focal_lengths_split(self):
        """Test zoomed shots get separate intrinsics."""
        zoomed = dict(CANON, **{"Exif:FocalLength": "85"})
        project = make_project([("/data/a.jpg", CANON), ("/data/b.jpg", zoomed)])

        run(project)

        assert len(project.intrinsics) == 2
        assert project.views[1].intrinsic_id != project.views[2].intrinsic_id

    def test_35mm_equivalent_only(self):
        """Test sensor width and focal length estimated from the 35mm tag."""
        metadata = {"Exif:FocalLengthIn35mmFilm": "50"}
        project = make_project([("/data/a.jpg", metadata), ("/data/b.jpg", metadata)])

        report = run(project)

        intrinsic = project.intrinsics[project.views[1].intrinsic_id]
        assert intrinsic.focal_length_pix == pytest.approx(50.0 * 6000 / 36.0, rel=1e-9)
        assert intrinsic.initialization_mode == InitializationMode.ESTIMATED_FROM_METADATA
        assert report.estimated_from_35mm["/data/a.jpg"] == pytest.approx([36.0, 50.0], rel=1e-9)
        assert report.no_metadata_paths == []

    def test_sensor_mismatch_warning(self, caplog):
        """Test a close database match is used and reported."""
        metadata = {"Make": "Canon", "Model": "EOS 5D", "Exif:FocalLength": "50"}
        project = make_project([("/data/a.jpg", metadata), ("/data/b.jpg", metadata)])

        with caplog.at_level(logging.WARNING):
            report = run(project)

        assert report.complete_views == 2
        assert len(report.unsure_sensors) == 1
        issue = report.unsure_sensors[0]
        assert issue.image_path == "/data/a.jpg"
        assert issue.database_model == "Canon EOS 5D Mark II"
        assert issue.sensor_width_mm == 36.0
        assert "slightly different" in caplog.text

    def test_run_camera_init(self):
        """Test the convenience wrapper."""
        project = make_project([("/data/a.jpg", CANON), ("/data/b.jpg", CANON)])
        report = run_camera_init(project, sensor_lookup=DATABASE.lookup)
        assert report.complete_views == 2


class TestDefaultIntrinsics:
    """Test views without usable metadata."""

    def test_default_field_of_view_same_folder(self):
        """Test frames of one folder share a default-FOV intrinsic."""
        entries = [(f"/data/seq/{i:04d}.jpg", {}) for i in range(3)]
        project = make_project(entries, width=1920, height=1080)

        report = run(project, default_field_of_view=45.0)

        assert report.complete_views == 3
        assert len(report.no_metadata_paths) == 3
        assert len(project.intrinsics) == 1
        intrinsic = next(iter(project.intrinsics.values()))
        assert intrinsic.focal_length_pix == pytest.approx(960.0 / math.tan(math.radians(22.5)), rel=1e-9)
        assert intrinsic.initialization_mode == InitializationMode.SET_FROM_DEFAULT_FOV
        assert intrinsic.serial_number == "/data/seq"

    def test_different_folders_split(self):
        """Test views without metadata in different folders are not grouped."""
        project = make_project([
            ("/data/seq1/0001.jpg", {}),
            ("/data/seq2/0001.jpg", {}),
        ], width=1920, height=1080)

        run(project, default_field_of_view=45.0)

        assert len(project.intrinsics) == 2

    def test_different_sizes_split(self):
        """Test views of one folder with different sizes are not grouped."""
        project = make_project([("/data/seq/0001.jpg", {})], width=1920, height=1080)
        project.add_view(View(view_id=2, path="/data/seq/0002.jpg", width=1280, height=720))

        run(project, default_field_of_view=45.0)

        assert len(project.intrinsics) == 2

    def test_policy_1_does_not_group_by_folder(self):
        """Test views without metadata get their own intrinsic under policy 1."""
        entries = [(f"/data/seq/{i:04d}.jpg", {}) for i in range(3)]
        project = make_project(entries, width=1920, height=1080)

        run(project, default_field_of_view=45.0, group_camera_model=1)

        assert len(project.intrinsics) == 3

    def test_ungrouped(self):
        """Test policy 0 gives one intrinsic per view."""
        project = make_project([("/data/a.jpg", CANON), ("/data/b.jpg", CANON), ("/data/c.jpg", CANON)])
        engine = CameraInitEngine(
            options=CameraInitOptions(group_camera_model=0),
            sensor_lookup=DATABASE.lookup,
            id_generator=CounterIdGenerator(start=100),
        )

        engine.run(project)

        assert sorted(project.intrinsics) == [100, 101, 102]
        assert [project.views[i].intrinsic_id for i in (1, 2, 3)] == [100, 101, 102]

    def test_default_intrinsic_matrix(self):
        """Test focal length and principal point from a K matrix string."""
        project = make_project([("/data/a.jpg", {}), ("/data/b.jpg", {})], width=1280, height=720)

        run(project, default_intrinsic="1200;0;600;0;1200;350;0;0;1")

        intrinsic = next(iter(project.intrinsics.values()))
        assert intrinsic.focal_length_pix == 1200.0
        assert intrinsic.principal_point == [600.0, 350.0]
        assert intrinsic.initialization_mode == InitializationMode.SET_FROM_DEFAULT_FOCAL


class TestCompleteness:
    """Test the completeness gate through the engine."""

    def test_no_views(self):
        """Test an empty project."""
        with pytest.raises(NoViewsError):
            run(SfMProject())

    def test_no_metadata_no_default(self):
        """Test views without metadata and without defaults fail the run."""
        project = make_project([("/data/a.jpg", {}), ("/data/b.jpg", {})])
        with pytest.raises(IncompleteOutputError):
            run(project)

    def test_single_view(self):
        """Test a single complete view needs allow_single_view."""
        with pytest.raises(IncompleteOutputError):
            run(make_project([("/data/a.jpg", CANON)]))

        report = run(make_project([("/data/a.jpg", CANON)]), allow_single_view=True)
        assert report.complete_views == 1

    def test_unknown_sensor(self):
        """Test a camera missing from the database fails without a default."""
        metadata = {"Make": "Nikon", "Model": "D800", "Exif:FocalLength": "50"}
        project = make_project([("/data/a.jpg", metadata), ("/data/b.jpg", metadata)])

        with pytest.raises(IncompleteOutputError, match="Nikon D800"):
            run(project)

    def test_unknown_sensor_with_default_fov(self):
        """Test a camera missing from the database falls back to the default FOV."""
        metadata = {"Make": "Nikon", "Model": "D800", "Exif:FocalLength": "50"}
        project = make_project([("/data/a.jpg", metadata), ("/data/b.jpg", metadata)])

        report = run(project, default_field_of_view=45.0)

        assert report.complete_views == 2
        assert len(report.unknown_sensors) == 1
        assert report.unknown_sensors[0].make == "Nikon"
        intrinsic = project.intrinsics[project.views[1].intrinsic_id]
        assert intrinsic.initialization_mode == InitializationMode.SET_FROM_DEFAULT_FOV

    def test_allow_incomplete_output(self):
        """Test unresolved views are left without intrinsic."""
        project = make_project([("/data/a.jpg", CANON), ("/data/b.jpg", {})])

        report = run(project, allow_incomplete_output=True)

        assert report.complete_views == 1
        assert project.views[1].intrinsic_id is not None
        assert project.views[2].intrinsic_id is None
        assert len(project.intrinsics) == 1


class TestExistingIntrinsics:
    """Test projects that already carry intrinsics."""

    def make_project_with_intrinsic(self, focal):
        project = make_project([("/data/a.jpg", CANON), ("/data/b.jpg", CANON)])
        project.add_intrinsic(5, Intrinsic(
            width=6000,
            height=4000,
            focal_length_pix=focal,
            principal_point=[3000.0, 2000.0],
            initialization_mode=InitializationMode.CALIBRATED,
        ))
        for view in project.views.values():
            view.intrinsic_id = 5
        return project

    def test_resolved_intrinsic_is_kept(self):
        """Test a resolved intrinsic is never recomputed."""
        project = self.make_project_with_intrinsic(4321.0)

        report = run(project)

        assert report.complete_views == 2
        assert list(project.intrinsics) == [5]
        assert project.intrinsics[5].focal_length_pix == 4321.0
        assert project.intrinsics[5].initialization_mode == InitializationMode.CALIBRATED

    def test_unresolved_intrinsic_is_replaced(self):
        """Test an unresolved intrinsic is rebuilt under the same id."""
        project = self.make_project_with_intrinsic(-1.0)

        run(project)

        assert list(project.intrinsics) == [5]
        assert project.views[1].intrinsic_id == 5
        assert project.views[2].intrinsic_id == 5
        assert project.intrinsics[5].focal_length_pix == pytest.approx(50.0 * 6000 / 36.0, rel=1e-9)


class TestRigs:
    """Test rig detection through the engine."""

    def rig_entries(self, frames_per_camera):
        return [
            (f"/data/rig/{sub_pose}/{frame:04d}.jpg", {})
            for sub_pose, frames in enumerate(frames_per_camera)
            for frame in range(frames)
        ]

    def test_valid_rig(self):
        """Test a two-camera rig is detected and its cameras grouped."""
        project = make_project(self.rig_entries([2, 2]), width=1920, height=1080)

        report = run(project, default_field_of_view=60.0)

        assert report.rig_count == 1
        rig_id, rig = next(iter(project.rigs.items()))
        assert rig.sub_pose_count == 2
        assert all(view.rig_id == rig_id for view in project.views.values())
        assert [v.sub_pose_id for v in project.views.values()] == [0, 0, 1, 1]
        assert [v.frame_id for v in project.views.values()] == [0, 1, 0, 1]

        # One intrinsic per rig camera
        assert len(project.intrinsics) == 2
        assert project.views[1].intrinsic_id == project.views[2].intrinsic_id
        assert project.views[1].intrinsic_id != project.views[3].intrinsic_id
        assert project.validate_project() == []

    def test_inconsistent_rig(self):
        """Test cameras with different frame counts fail the run."""
        project = make_project(self.rig_entries([2, 1]), width=1920, height=1080)

        with pytest.raises(RigStructureError):
            run(project, default_field_of_view=60.0)

    def test_unparsable_rig_path(self, caplog):
        """Test rig-like paths without integer ids are single images."""
        project = make_project([
            ("/data/rig/left/0001.jpg", {}),
            ("/data/rig/left/0002.jpg", {}),
        ], width=1920, height=1080)

        with caplog.at_level(logging.WARNING):
            report = run(project, default_field_of_view=60.0)

        assert report.rig_count == 0
        assert all(view.rig_id is None for view in project.views.values())
        assert "Used as single image." in caplog.text


class TestReproducibility:
    """Test deterministic output."""

    def test_same_result_for_any_worker_count(self):
        """Test worker count does not change ids."""
        entries = [(f"/data/seq{i % 3}/{i:04d}.jpg", {}) for i in range(12)] + [
            (f"/data/cam/{i:04d}.jpg", CANON) for i in range(4)
        ]

        dumps = []
        for workers in (1, 3, 8):
            for policy in (0, 2):
                project = make_project(entries, width=1920, height=1080)
                run(project, default_field_of_view=50.0, max_workers=workers, group_camera_model=policy)
                dumps.append((policy, project.model_dump()))

        by_policy = {}
        for policy, dump in dumps:
            by_policy.setdefault(policy, []).append(dump)
        for results in by_policy.values():
            assert all(result == results[0] for result in results)

    def test_rerun_after_reload_is_stable(self, tmp_path):
        """Test running again on a saved result changes nothing."""
        project = make_project(
            [("/data/a.jpg", CANON), ("/data/b.jpg", CANON)] + [
                (f"/data/rig/{s}/{f:04d}.jpg", {}) for s in range(2) for f in range(2)
            ]
        )
        run(project, default_field_of_view=50.0)
        path = tmp_path / "cameraInit.sfm"
        save_project(project, path)

        reloaded = load_project(path)
        run(reloaded, default_field_of_view=50.0)

        assert reloaded.model_dump() == project.model_dump()
