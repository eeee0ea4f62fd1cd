# songpig/schemas/upload.py
from pydantic import BaseModel


class UploadUrlRequest(BaseModel):
    room_id: str
    file_name: str
    content_type: str = "audio/mpeg"


class UploadUrlOut(BaseModel):
    upload_url: str
    storage_key: str
    public_url: str
    content_type: str
