"""Camera initialization API routes."""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from camerainit.core.errors import CameraInitError
from camerainit.core.models.project import CameraInitOptions, CameraInitReport
from camerainit.core.pipeline.engine import CameraInitEngine
from camerainit.core.sensors.database import Datasheet, SensorDatabase
from .projects import projects_store

router = APIRouter(prefix="/camera-init", tags=["camera-init"])


class SensorEntry(BaseModel):
    """One sensor database entry."""

    brand: str
    model: str
    sensor_width_mm: float = Field(gt=0)


class CameraInitRequest(BaseModel):
    """Request model for a camera initialization run."""

    options: CameraInitOptions = Field(default_factory=CameraInitOptions)
    sensor_database: List[SensorEntry] = Field(default_factory=list)


@router.post("/{project_id}")
def init_cameras(project_id: str, request: CameraInitRequest) -> CameraInitReport:
    """Initialize intrinsics of all views of a project."""
    if project_id not in projects_store:
        raise HTTPException(status_code=404, detail="Project not found")

    # Work on a copy so a failed run leaves the stored project untouched
    project = projects_store[project_id].model_copy(deep=True)
    database = SensorDatabase(
        Datasheet(brand=e.brand, model=e.model, sensor_width_mm=e.sensor_width_mm)
        for e in request.sensor_database
    )

    try:
        engine = CameraInitEngine(options=request.options, sensor_lookup=database.lookup)
        report = engine.run(project)
    except CameraInitError as e:
        raise HTTPException(status_code=422, detail=f"Camera initialization failed: {str(e)}")

    projects_store[project_id] = project
    return report


@router.get("/{project_id}/intrinsics")
async def get_intrinsics(project_id: str) -> Dict[str, Any]:
    """Get intrinsics and view assignment of a project."""
    if project_id not in projects_store:
        raise HTTPException(status_code=404, detail="Project not found")

    project = projects_store[project_id]
    return {
        "intrinsics": project.intrinsics,
        "calibration_matrices": {
            intrinsic_id: intrinsic.get_K().tolist()
            for intrinsic_id, intrinsic in project.intrinsics.items()
            if intrinsic.is_resolved()
        },
        "view_intrinsics": {
            view_id: view.intrinsic_id for view_id, view in project.views.items()
        },
    }
