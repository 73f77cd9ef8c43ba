import uuid

from fastapi import APIRouter, Response

from app.api.deps import DbSessionDep
from app.api.v1.schemas import CharacterData, CharacterRead
from app.services.characters import CharacterService


router = APIRouter(tags=["characters"])


@router.post("/projects/{project_id}/characters", response_model=CharacterRead)
def create_character(project_id: uuid.UUID, payload: CharacterData, db=DbSessionDep):
    return CharacterService(db).create_character(project_id, payload.model_dump())


@router.get("/projects/{project_id}/characters", response_model=list[CharacterRead])
def list_characters(project_id: uuid.UUID, db=DbSessionDep):
    return CharacterService(db).list_characters(project_id)


@router.get("/characters/{character_id}", response_model=CharacterRead)
def get_character(character_id: uuid.UUID, db=DbSessionDep):
    return CharacterService(db).get_character(character_id)


@router.put("/characters/{character_id}", response_model=CharacterRead)
def update_character(character_id: uuid.UUID, payload: CharacterData, db=DbSessionDep):
    """Replace every character field; anything omitted goes back to its default."""
    return CharacterService(db).update_character(character_id, payload.model_dump())


@router.delete("/characters/{character_id}", status_code=204)
def delete_character(character_id: uuid.UUID, db=DbSessionDep):
    CharacterService(db).delete_character(character_id)
    return Response(status_code=204)
