from fastapi import APIRouter, Body, Depends, Request, Response
from fastapi.responses import JSONResponse
import logging

from managers.image_store import ImageStore, get_image_store, normalize_image_path
from models.image import ImageResponse, ImageUpload, ImageUploadResponse
from utils.errors import InvalidRequest

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
    'Access-Control-Allow-Methods': 'GET, OPTIONS',
}

# CORSを自前で返す関数のパス
SELF_CORS_PATHS = ["/get-image"]


def image_response(status_code: int, body: ImageResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=CORS_HEADERS)


@router.api_route("/get-image", methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"], tags=["images"])
def get_image(request: Request, store: ImageStore = Depends(get_image_store)):
    """保存済みのdata URLを論理パスで取得する（開発用）"""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    if request.method != "GET":
        return image_response(405, ImageResponse(success=False, error="Method not allowed"))

    try:
        image_path = request.query_params.get("path")
        if not image_path or not image_path.strip():
            return image_response(400, ImageResponse(success=False, error="Missing image path parameter"))

        data_url = store.get(normalize_image_path(image_path))
        if not data_url:
            return image_response(404, ImageResponse(success=False, error="Image not found"))

        return image_response(200, ImageResponse(success=True, dataUrl=data_url))

    except Exception:
        logger.exception("[Get Image] Error")
        return image_response(500, ImageResponse(success=False, error="Internal server error"))


@router.post("/upload-image", response_model=ImageUploadResponse, status_code=201, tags=["images"])
def upload_image(upload: ImageUpload = Body(...), store: ImageStore = Depends(get_image_store)):
    """data URLを論理パスで保存する（開発用）"""
    key = normalize_image_path(upload.path)
    if not key:
        raise InvalidRequest("Invalid image path")
    store.put(key, upload.dataUrl)
    logger.info("Stored image %s (%d chars)", key, len(upload.dataUrl))
    return ImageUploadResponse(path=key)
