from datetime import datetime

from pest_crm.schemas.common import CamelModel


class UploadResponse(CamelModel):
    filename: str
    original_name: str
    url: str
    size: int
    mimetype: str


class StoredFile(CamelModel):
    filename: str
    url: str
    size: int
    created_at: datetime
