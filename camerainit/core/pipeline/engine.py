"""Camera initialization engine: per-view resolution fan-out and serial merge."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..errors import IncompleteOutputError, NoViewsError, RigStructureError
from ..intrinsics.builder import build_intrinsic
from ..intrinsics.focal_length import resolve_focal_length
from ..intrinsics.grouping import GroupingEngine, IdGenerator
from ..intrinsics.sensor_width import SensorLookup, resolve_sensor_width
from ..models.entities import Intrinsic, View
from ..models.project import CameraInitOptions, CameraInitReport, SfMProject
from ..rig.detector import RigAnnotation, RigRegistry, detect_rig
from .gate import check_completeness
from .report import ReportBuilder, ResolutionOutcome, log_report_details


@dataclass
class ViewResolution:
    """Everything a worker computed for one view."""

    view_id: int
    rig: Optional[RigAnnotation] = None
    kept_existing: bool = False
    outcome: Optional[ResolutionOutcome] = None
    intrinsic: Optional[Intrinsic] = None
    group_key: Optional[int] = None


def _no_database(make: str, model: str):
    return None


class CameraInitEngine:
    """Resolves an initial intrinsic for every view of a project."""

    def __init__(
        self,
        options: Optional[CameraInitOptions] = None,
        sensor_lookup: Optional[SensorLookup] = None,
        id_generator: Optional[IdGenerator] = None
    ):
        """Initialize engine.

        Args:
            options: Run options
            sensor_lookup: ``lookup(make, model) -> Datasheet | None``, e.g.
                ``SensorDatabase.lookup``; no database when None
            id_generator: Ids for ungrouped intrinsics, seeded from
                ``options.id_seed`` when None
        """
        self.options = options or CameraInitOptions()
        self.sensor_lookup = sensor_lookup or _no_database
        self.grouping = GroupingEngine(
            policy=self.options.group_camera_model,
            id_generator=id_generator or IdGenerator(self.options.id_seed),
        )
        self.logger = logging.getLogger(__name__)

    def run(self, project: SfMProject) -> CameraInitReport:
        """Initialize intrinsics of all views in place.

        Args:
            project: Project whose views are annotated and whose intrinsic
                and rig maps are filled

        Returns:
            Run report

        Raises:
            NoViewsError: If the project has no view
            RigStructureError: If a detected rig is inconsistent
            IncompleteOutputError: If the completeness checks fail
        """
        if not project.views:
            raise NoViewsError("Can't find views in input.")

        self.logger.info(f"Initializing intrinsics of {len(project.views)} views")

        resolutions = self._resolve_all(project)
        report_builder = ReportBuilder()
        rig_registry = RigRegistry()
        complete_views = 0

        for resolution in resolutions:
            view = project.views[resolution.view_id]

            if resolution.rig is not None:
                view.set_rig_and_sub_pose(resolution.rig.rig_id, resolution.rig.sub_pose_id)
                view.frame_id = resolution.rig.frame_id
                rig_registry.add(resolution.rig)

            if resolution.kept_existing:
                complete_views += 1
                continue

            report_builder.add(view, resolution.outcome)

            if resolution.intrinsic is None:
                view.intrinsic_id = None
                continue

            if resolution.intrinsic.is_resolved():
                complete_views += 1
            view.intrinsic_id = self.grouping.assign(resolution.group_key, resolution.intrinsic, project)

        if len(rig_registry):
            try:
                project.rigs.update(rig_registry.validate())
            except RigStructureError as e:
                self.logger.error(str(e))
                raise

        report = report_builder.build(
            total_views=len(project.views),
            complete_views=complete_views,
            intrinsic_count=len(project.intrinsics),
            rig_count=len(project.rigs),
        )
        log_report_details(report)

        try:
            check_completeness(report, self.options)
        except IncompleteOutputError as e:
            self.logger.error(str(e))
            raise

        self.logger.info(report.summary())
        return report

    def _resolve_all(self, project: SfMProject) -> List[ViewResolution]:
        """Resolve every view on worker threads, sorted by view id."""
        views = [project.views[view_id] for view_id in project.get_view_ids()]
        intrinsics = project.intrinsics
        n_workers = min(self.options.max_workers, len(views))
        partitions = [views[i::n_workers] for i in range(n_workers)]

        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            partial_results = list(executor.map(
                lambda partition: [self._resolve_view(v, intrinsics) for v in partition],
                partitions
            ))

        resolutions = [r for partial in partial_results for r in partial]
        resolutions.sort(key=lambda r: r.view_id)
        return resolutions

    def _resolve_view(self, view: View, intrinsics: Dict[int, Intrinsic]) -> ViewResolution:
        """Resolve one view without touching shared state."""
        resolution = ViewResolution(view_id=view.view_id, rig=detect_rig(view.path))
        if resolution.rig is not None:
            view = view.model_copy(update={
                "rig_id": resolution.rig.rig_id,
                "sub_pose_id": resolution.rig.sub_pose_id,
                "frame_id": resolution.rig.frame_id,
            })

        existing = intrinsics.get(view.intrinsic_id) if view.intrinsic_id is not None else None
        if existing is not None and existing.is_resolved():
            resolution.kept_existing = True
            return resolution

        options = self.options
        make = view.get_make()
        model = view.get_model()
        has_camera_metadata = view.has_camera_metadata()
        metadata_focal = view.get_focal_length_mm()
        focal_in_35mm = view.get_focal_in_35mm()
        image_ratio = view.aspect_ratio()

        sensor = resolve_sensor_width(
            make, model, focal_in_35mm, metadata_focal, image_ratio, self.sensor_lookup
        )
        focal_length = resolve_focal_length(
            metadata_focal, focal_in_35mm, sensor.sensor_width_mm, image_ratio,
            preset_focal_mm=sensor.focal_length_mm
        )

        self.logger.debug(
            f"View {view.view_id} '{view.path}': make='{make}' model='{model}' "
            f"sensor width={sensor.sensor_width_mm} focal length={focal_length} "
            f"({sensor.diagnostic.value})"
        )

        resolution.outcome = ResolutionOutcome(
            sensor_width_mm=sensor.sensor_width_mm,
            focal_length_mm=focal_length,
            initialization_mode=sensor.initialization_mode,
            diagnostic=sensor.diagnostic,
            used_focal_in_35mm=focal_in_35mm is not None,
            datasheet=sensor.datasheet,
        )

        if not sensor.is_resolved() and options.allow_incomplete_output:
            return resolution

        intrinsic = build_intrinsic(
            view,
            focal_length,
            sensor.sensor_width_mm,
            default_focal_length_pix=options.default_focal_length_pix,
            default_field_of_view=options.default_field_of_view,
            camera_model=options.default_camera_model,
            default_ppx=options.default_ppx,
            default_ppy=options.default_ppy,
            resolved_mode=sensor.initialization_mode,
        )
        resolution.intrinsic = intrinsic
        resolution.group_key = self.grouping.group_key(view, intrinsic, has_camera_metadata)
        return resolution


def run_camera_init(
    project: SfMProject,
    options: Optional[CameraInitOptions] = None,
    sensor_lookup: Optional[SensorLookup] = None
) -> CameraInitReport:
    """Convenience wrapper around ``CameraInitEngine.run``."""
    return CameraInitEngine(options=options, sensor_lookup=sensor_lookup).run(project)
