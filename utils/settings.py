from pydantic import BaseModel
from typing import List, Optional
import os

from utils.errors import ConfigurationError


class Settings(BaseModel):
    """環境変数から読み込むプロセス全体の設定"""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    razorpay_webhook_secret: Optional[str] = None
    image_store_backend: str = "memory"
    storage_connection_string: Optional[str] = None
    image_container_name: str = "images"
    email_connection_string: Optional[str] = None
    sender_address: Optional[str] = None
    recipients_address: Optional[str] = None
    cors_allow_origins: List[str] = ["*"]

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
        return cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
            razorpay_key_id=os.getenv("RAZORPAY_KEY_ID"),
            razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET"),
            razorpay_webhook_secret=os.getenv("RAZORPAY_WEBHOOK_SECRET"),
            image_store_backend=os.getenv("IMAGE_STORE_BACKEND", "memory").lower(),
            storage_connection_string=os.getenv("AZURE_STORAGE_CONNECTION_STRING"),
            image_container_name=os.getenv("AZURE_BLOB_IMAGE_CONTAINER_NAME", "images"),
            email_connection_string=os.getenv("EMAIL_CONNECTION_STRING"),
            sender_address=os.getenv("SENDER_ADDRESS"),
            recipients_address=os.getenv("RECIPIENTS_ADDRESS"),
            cors_allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )

    def require_supabase(self):
        """データサービスの接続情報を返す。未設定なら起動エラー"""
        missing = [name for name, value in (("SUPABASE_URL", self.supabase_url), ("SUPABASE_SERVICE_ROLE_KEY", self.supabase_key)) if not value]
        if missing:
            raise ConfigurationError(detail=f"Missing data service configuration: {', '.join(missing)}")
        return self.supabase_url, self.supabase_key


def get_settings() -> Settings:
    return Settings.from_env()
