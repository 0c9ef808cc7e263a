from typing import Any, Dict, Optional


class AppError(Exception):
    """ハンドラ境界でJSONレスポンスに変換されるエラーの基底クラス

    ``public_message`` は呼び出し元に返す文言、``detail`` はサーバ側ログにのみ出す情報。
    """
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, public_message: Optional[str] = None, detail: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
        self.public_message = public_message or self.default_message
        self.detail = detail
        self.extra = extra or {}
        super().__init__(detail or self.public_message)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.public_message}
        body.update(self.extra)
        return body


class InvalidRequest(AppError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class MethodNotAllowed(AppError):
    status_code = 405
    default_message = "Method not allowed"


class DuplicatePayment(AppError):
    status_code = 409
    default_message = "Order has already been paid"


class ConstraintViolation(AppError):
    status_code = 409
    default_message = "Request conflicts with existing data"

    def __init__(self, public_message: Optional[str] = None, detail: Optional[str] = None, code: Optional[str] = None, **kwargs):
        super().__init__(public_message, detail, **kwargs)
        self.code = code

    @property
    def is_unique_violation(self) -> bool:
        return self.code == "23505"


class GatewayError(AppError):
    status_code = 502
    default_message = "Payment gateway error"


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"


class ConfigurationError(InternalError):
    pass


class DataServiceError(InternalError):
    pass
