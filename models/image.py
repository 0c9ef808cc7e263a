from pydantic import BaseModel, Field, field_validator
from typing import Optional


class ImageResponse(BaseModel):
    success: bool
    dataUrl: Optional[str] = None
    error: Optional[str] = None


class ImageUpload(BaseModel):
    path: str = Field(..., min_length=1)
    dataUrl: str

    @field_validator('dataUrl')
    @classmethod
    def check_data_url(cls, value: str) -> str:
        if not value.startswith("data:"):
            raise ValueError("dataUrl must be a data: URL")
        return value


class ImageUploadResponse(BaseModel):
    success: bool = True
    path: str
