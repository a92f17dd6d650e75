import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from ..json_store import JsonStore, get_store
from ..repository import CollectionRepository
from ..shared.dates import utc_now_iso
from ..shared.validators import require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


class DocumentCreate(BaseModel):
    name: str
    type: str
    filePath: str
    description: str = ""

    @field_validator("name", "type", "filePath")
    @classmethod
    def check_text(cls, v, info):
        return require_text(v, info.field_name)


def documents_repo(store: JsonStore = Depends(get_store)) -> CollectionRepository:
    return CollectionRepository(store, "documents")


@router.get("")
async def list_documents(repo: CollectionRepository = Depends(documents_repo)):
    return [{**d, "description": d.get("description") or ""} for d in repo.all()]


@router.get("/{document_id}")
async def get_document(document_id: str, repo: CollectionRepository = Depends(documents_repo)):
    document = repo.get(document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return {**document, "description": document.get("description") or ""}


@router.post("", status_code=201)
async def create_document(data: DocumentCreate, repo: CollectionRepository = Depends(documents_repo)):
    now = utc_now_iso()
    document = {
        "id": repo.new_id(),
        "name": data.name,
        "description": data.description,
        "type": data.type,
        "filePath": data.filePath,
        "createdAt": now,
        "updatedAt": now,
    }
    repo.add(document)
    logger.info(f"📄 Document {document['id']} registered: {data.name}")
    return document
