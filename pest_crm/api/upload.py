"""Загрузка файлов договоров: фото и PDF до 10 МБ."""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from pest_crm.api.auth import require_auth
from pest_crm.schemas.common import ApiResponse
from pest_crm.schemas.upload import StoredFile, UploadResponse
from pest_crm.services import file_storage

router = APIRouter(prefix="/api/upload", tags=["upload"], dependencies=[Depends(require_auth)])


@router.post("", response_model=ApiResponse[UploadResponse])
async def upload_file(file: Optional[UploadFile] = File(None)):
    stored = await file_storage.save_upload(file)
    return ApiResponse(data=UploadResponse(**stored))


@router.get("/list", response_model=ApiResponse[List[StoredFile]])
def list_files():
    return ApiResponse(data=[StoredFile(**f) for f in file_storage.list_files()])


@router.delete("/{filename}", response_model=ApiResponse[None])
def delete_file(filename: str):
    file_storage.delete_file(filename)
    return ApiResponse(message="Файл удалён")
