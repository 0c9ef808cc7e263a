from typing import Any, Dict, List, Optional, Union, Iterable
from threading import Lock
from supabase import create_client, Client
from postgrest.exceptions import APIError
import logging

from utils.errors import ConstraintViolation, DataServiceError
from utils.settings import get_settings

logger = logging.getLogger(__name__)

# 書き込み拒否として扱うPostgresのエラーコード
CONSTRAINT_CODES = {
    "23505": "unique_violation",
    "23502": "not_null_violation",
    "23503": "foreign_key_violation",
    "23514": "check_violation",
    "22P02": "invalid_text_representation",
}

Row = Dict[str, Any]


def translate_api_error(error: APIError, operation: str) -> Exception:
    """postgrestのAPIErrorをアプリケーションのエラー分類に変換する"""
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    detail = f"{operation} failed: [{code}] {message}"
    if code in CONSTRAINT_CODES:
        return ConstraintViolation(detail=detail, code=code)
    return DataServiceError(detail=detail)


class DataServiceManager:
    """ホスト型リレーショナルDB（Supabase）へのアクセスをまとめるシングルトン"""
    _instance: Optional['DataServiceManager'] = None
    _lock = Lock()
    client: Optional[Client] = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    url, key = get_settings().require_supabase()
                    instance = super().__new__(cls)
                    instance.client = create_client(url, key)
                    cls._instance = instance
        return cls._instance

    def __init__(self):
        pass

    @classmethod
    def reset(cls):
        with cls._lock:
            cls._instance = None

    def _execute(self, query, operation: str):
        try:
            return query.execute()
        except APIError as e:
            raise translate_api_error(e, operation) from e
        except Exception as e:
            raise DataServiceError(detail=f"{operation} failed: {str(e)}") from e

    def select(
            self,
            table: str,
            columns: str = "*",
            filters: Optional[Dict[str, Any]] = None,
            in_filters: Optional[Dict[str, Iterable[Any]]] = None,
            exclude: Optional[Dict[str, Any]] = None,
            order_by: Optional[str] = None,
            descending: bool = False,
            limit: Optional[int] = None,
        ) -> List[Row]:
        """行を取得する

        Examples:
            >>> select("settings", "key, value", filters={"category": "payment"}, in_filters={"key": ["razorpay_enabled"]})
        """
        query = self.client.table(table).select(columns)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        for column, values in (in_filters or {}).items():
            query = query.in_(column, list(values))
        for column, value in (exclude or {}).items():
            query = query.neq(column, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        response = self._execute(query, f"select {table}")
        return response.data or []

    def select_one(self, table: str, filters: Dict[str, Any], columns: str = "*", exclude: Optional[Dict[str, Any]] = None) -> Optional[Row]:
        rows = self.select(table, columns, filters=filters, exclude=exclude, limit=1)
        return rows[0] if rows else None

    def insert(self, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        response = self._execute(self.client.table(table).insert(rows), f"insert {table}")
        return response.data or []

    def update(self, table: str, values: Row, filters: Dict[str, Any]) -> List[Row]:
        if not filters:
            raise DataServiceError(detail=f"update {table} refused: no filter given")
        query = self.client.table(table).update(values)
        for column, value in filters.items():
            query = query.eq(column, value)
        response = self._execute(query, f"update {table}")
        return response.data or []

    def rpc(self, function_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """ストアドプロシージャを呼び出す"""
        response = self._execute(self.client.rpc(function_name, params or {}), f"rpc {function_name}")
        return response.data

    def execute_sql(self, sql: str) -> Any:
        """`exec_sql` プロシージャ経由で生SQLを実行する"""
        return self.rpc("exec_sql", {"sql": sql})
