import uuid

from fastapi import APIRouter, Response

from app.api.deps import DbSessionDep
from app.api.v1.schemas import (
    ContentNodeCreate,
    ContentNodeNotesUpdate,
    ContentNodeRead,
    ContentNodeRename,
    ContentTreeNodeRead,
    ContentTreeRead,
)
from app.services.content_tree import UNSET, ContentTreeService, iter_tree
from app.services.projects import ProjectService, effective_level_config


router = APIRouter(tags=["content"])


@router.get("/projects/{project_id}/content-tree", response_model=ContentTreeRead)
def get_content_tree(project_id: uuid.UUID, db=DbSessionDep):
    roots = ContentTreeService(db).get_content_tree(project_id)
    project = ProjectService(db).get_project(project_id)
    return ContentTreeRead(
        project_id=project_id,
        level_config=effective_level_config(project),
        node_count=sum(1 for _ in iter_tree(roots)),
        roots=[ContentTreeNodeRead.model_validate(root, from_attributes=True) for root in roots],
    )


@router.post("/projects/{project_id}/nodes", response_model=ContentNodeRead)
def create_node(project_id: uuid.UUID, payload: ContentNodeCreate, db=DbSessionDep):
    return ContentTreeService(db).create_node(
        project_id=project_id,
        title=payload.title,
        level=payload.level,
        parent_id=payload.parent_id,
    )


@router.get("/nodes/{node_id}", response_model=ContentNodeRead)
def get_node(node_id: uuid.UUID, db=DbSessionDep):
    return ContentTreeService(db).get_node(node_id)


@router.get("/nodes/{node_id}/children", response_model=list[ContentNodeRead])
def list_node_children(node_id: uuid.UUID, db=DbSessionDep):
    service = ContentTreeService(db)
    service.get_node(node_id)
    return service.list_children(node_id)


@router.patch("/nodes/{node_id}", response_model=ContentNodeRead)
def rename_node(node_id: uuid.UUID, payload: ContentNodeRename, db=DbSessionDep):
    return ContentTreeService(db).update_node_title(node_id, payload.title)


@router.patch("/nodes/{node_id}/notes", response_model=ContentNodeRead)
def update_node_notes(node_id: uuid.UUID, payload: ContentNodeNotesUpdate, db=DbSessionDep):
    fields_set = payload.model_fields_set
    return ContentTreeService(db).update_node_notes(
        node_id,
        head_notes=payload.head_notes if "head_notes" in fields_set else UNSET,
        foot_notes=payload.foot_notes if "foot_notes" in fields_set else UNSET,
    )


@router.delete("/nodes/{node_id}", status_code=204)
def delete_node(node_id: uuid.UUID, db=DbSessionDep):
    ContentTreeService(db).delete_node(node_id)
    return Response(status_code=204)
