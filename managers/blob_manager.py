from typing import Optional
from threading import Lock
from azure.storage.blob import BlobServiceClient, ContainerClient
from azure.core.exceptions import ResourceExistsError

from utils.errors import ConfigurationError
from utils.settings import get_settings


class BLOBConnectionManager:
    _instance: Optional['BLOBConnectionManager'] = None
    _lock = Lock()
    client: Optional[BlobServiceClient] = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    conn_str = get_settings().storage_connection_string
                    if not conn_str:
                        raise ConfigurationError(detail="AZURE_STORAGE_CONNECTION_STRING is not set")
                    instance = super().__new__(cls)
                    instance.client = BlobServiceClient.from_connection_string(conn_str)
                    cls._instance = instance
        return cls._instance

    def __init__(self):
        pass

    def get_container(self, container_name: str) -> ContainerClient:
        """コンテナを取得する。存在しなければ作成する"""
        container = self.client.get_container_client(container_name)
        try:
            container.create_container()
        except ResourceExistsError:
            pass
        return container
