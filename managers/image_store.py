from typing import Dict, Optional
from threading import Lock
from azure.storage.blob import ContainerClient, ContentSettings
from azure.core.exceptions import ResourceNotFoundError
import logging
import re

from managers.blob_manager import BLOBConnectionManager
from utils.settings import get_settings

logger = logging.getLogger(__name__)

_PATH_PREFIX = re.compile(r"^/?(images/)?")


def normalize_image_path(path: str) -> str:
    """先頭の `/` と `images/` を取り除いた論理パスを返す

    Examples:
        >>> normalize_image_path("/images/foo.png")
        'foo.png'
    """
    return _PATH_PREFIX.sub("", path.strip(), count=1)


class ImageStore:
    """論理パス → data URL を保持するストアのインターフェース"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, data_url: str) -> None:
        raise NotImplementedError


class InMemoryImageStore(ImageStore):
    """開発用。プロセスが生きている間だけ保持され、再起動で消える"""

    def __init__(self):
        self._images: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._images.get(key)

    def put(self, key: str, data_url: str) -> None:
        self._images[key] = data_url


class BlobImageStore(ImageStore):
    """Azure Blob Storageに1キー1BLOBでdata URLを保存する"""

    def __init__(self, container: ContainerClient):
        self.container = container

    def get(self, key: str) -> Optional[str]:
        try:
            downloader = self.container.get_blob_client(key).download_blob()
        except ResourceNotFoundError:
            return None
        return downloader.readall().decode("utf-8")

    def put(self, key: str, data_url: str) -> None:
        self.container.get_blob_client(key).upload_blob(
            data_url.encode("utf-8"),
            overwrite=True,
            content_settings=ContentSettings(content_type="text/plain; charset=utf-8"),
        )


_store: Optional[ImageStore] = None
_store_lock = Lock()


def get_image_store() -> ImageStore:
    """設定に応じたイメージストアを返す（FastAPIの依存関係として使う）"""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                settings = get_settings()
                if settings.image_store_backend == "blob":
                    container = BLOBConnectionManager().get_container(settings.image_container_name)
                    _store = BlobImageStore(container)
                else:
                    _store = InMemoryImageStore()
                logger.info("Image store backend: %s", type(_store).__name__)
    return _store
