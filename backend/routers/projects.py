"""Project management API routes."""

from itertools import count
from typing import Any

from fastapi import APIRouter, HTTPException

from camerainit.core.models.project import SfMProject

router = APIRouter(prefix="/projects", tags=["projects"])

# In-memory project store
projects_store: dict[str, SfMProject] = {}
_project_ids = count()


@router.post("/", response_model=dict[str, str])
async def create_project(project: SfMProject) -> dict[str, str]:
    """Register a project (views and optional intrinsics)."""
    project_id = f"project_{next(_project_ids)}"
    projects_store[project_id] = project

    return {"project_id": project_id, "status": "created"}


@router.get("/{project_id}")
async def get_project(project_id: str) -> SfMProject:
    """Get project by ID."""
    if project_id not in projects_store:
        raise HTTPException(status_code=404, detail="Project not found")

    return projects_store[project_id]


@router.delete("/{project_id}")
async def delete_project(project_id: str) -> dict[str, str]:
    """Delete project."""
    if project_id not in projects_store:
        raise HTTPException(status_code=404, detail="Project not found")

    del projects_store[project_id]
    return {"status": "deleted"}


@router.get("/{project_id}/summary")
async def get_project_summary(project_id: str) -> dict[str, Any]:
    """Get project summary."""
    if project_id not in projects_store:
        raise HTTPException(status_code=404, detail="Project not found")

    project = projects_store[project_id]

    summary = {
        "views": len(project.views),
        "intrinsics": len(project.intrinsics),
        "rigs": len(project.rigs),
        "views_without_intrinsic": sum(
            1 for view in project.views.values() if view.intrinsic_id is None
        ),
        "camera_models": {},
    }

    # Count camera models
    for intrinsic in project.intrinsics.values():
        model = intrinsic.model.value
        summary["camera_models"][model] = summary["camera_models"].get(model, 0) + 1

    return summary
