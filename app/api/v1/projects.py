import uuid

from fastapi import APIRouter, Response

from app.api.deps import DbSessionDep
from app.api.v1.schemas import (
    LevelConfig,
    LevelPresetRequest,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
)
from app.services.projects import UNSET, ProjectService


router = APIRouter(tags=["projects"])


@router.post("/projects", response_model=ProjectRead)
def create_project(payload: ProjectCreate, db=DbSessionDep):
    level_config = payload.level_config.model_dump() if payload.level_config is not None else None
    return ProjectService(db).create_project(
        title=payload.title,
        description=payload.description,
        level_config=level_config,
    )


@router.get("/projects", response_model=list[ProjectRead])
def list_projects(db=DbSessionDep):
    return ProjectService(db).list_projects()


@router.get("/projects/{project_id}", response_model=ProjectRead)
def get_project(project_id: uuid.UUID, db=DbSessionDep):
    return ProjectService(db).get_project(project_id)


@router.patch("/projects/{project_id}", response_model=ProjectRead)
def update_project(project_id: uuid.UUID, payload: ProjectUpdate, db=DbSessionDep):
    fields_set = payload.model_fields_set
    title = payload.title if "title" in fields_set and payload.title is not None else UNSET
    description = payload.description if "description" in fields_set else UNSET
    return ProjectService(db).update_project(project_id, title=title, description=description)


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(project_id: uuid.UUID, db=DbSessionDep):
    ProjectService(db).delete_project(project_id)
    return Response(status_code=204)


@router.put("/projects/{project_id}/level-config", response_model=ProjectRead)
def update_level_config(project_id: uuid.UUID, payload: LevelConfig, db=DbSessionDep):
    return ProjectService(db).update_level_config(project_id, payload.model_dump())


@router.post("/projects/{project_id}/level-config/preset", response_model=ProjectRead)
def apply_level_preset(project_id: uuid.UUID, payload: LevelPresetRequest, db=DbSessionDep):
    return ProjectService(db).apply_level_preset(project_id, payload.preset)
