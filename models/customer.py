from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class Customer(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Customer":
        return cls.model_validate({**row, "id": str(row["id"])})


class CustomerContact(BaseModel):
    """チェックアウト時に入力された連絡先"""
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    def to_rpc_params(self) -> Dict[str, Any]:
        return {
            "p_email": self.email,
            "p_first_name": self.first_name or "",
            "p_last_name": self.last_name or "",
            "p_phone": self.phone or "",
        }
