from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import Optional

from escalator.api.deps import get_db, get_filter_store
from escalator.schema.upload import ParseResult, UploadResponse
from escalator.services.filters import FilterConfigStore
from escalator.services.upload_service import upload_service
from escalator.exceptions.upload_exceptions import NoFileProvidedException

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/parse", response_model=ParseResult)
async def parse_upload(file: Optional[UploadFile] = File(None)):

    if file is None:
        raise NoFileProvidedException()

    content = await file.read()

    return upload_service.parse(content, file.filename, file.content_type)


@router.post("", response_model=UploadResponse)
async def store_upload(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: FilterConfigStore = Depends(get_filter_store)
):

    if file is None:
        raise NoFileProvidedException()

    content = await file.read()

    return upload_service.store_upload(db, store, content, file.filename, file.content_type)
