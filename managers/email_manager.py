from typing import Optional
from azure.communication.email import EmailClient
from threading import Lock

from utils.errors import ConfigurationError
from utils.settings import get_settings


class EmailManager:
    _instance: Optional['EmailManager'] = None
    _lock = Lock()
    client: Optional[EmailClient] = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    connection_string = get_settings().email_connection_string
                    if not connection_string:
                        raise ConfigurationError(detail="EMAIL_CONNECTION_STRING is not set")
                    instance = super().__new__(cls)
                    instance.client = EmailClient.from_connection_string(connection_string)
                    cls._instance = instance
        return cls._instance

    def __init__(self):
        pass
