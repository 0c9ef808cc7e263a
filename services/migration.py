from typing import List
from pathlib import Path
import logging

from managers.data_service import DataServiceManager
from models.migration import MigrationReport, MigrationMode, StatementResult
from repository import analytics as analytics_repo
from utils.errors import AppError
from utils.sql import split_sql_statements

logger = logging.getLogger(__name__)


def _error_text(error: Exception) -> str:
    if isinstance(error, AppError):
        return error.detail or error.public_message
    return str(error)


def _apply_best_effort(manager: DataServiceManager, statements: List[str]) -> MigrationReport:
    report = MigrationReport(mode='best_effort')
    for index, statement in enumerate(statements):
        try:
            manager.execute_sql(statement)
        except Exception as e:
            # 失敗した文は記録して次の文に進む
            logger.error("Statement %d failed: %s\n%s", index + 1, _error_text(e), statement)
            report.results.append(StatementResult(index=index, statement=statement, ok=False, error=_error_text(e)))
            continue
        logger.info("Executed statement %d: %s", index + 1, statement[:60])
        report.results.append(StatementResult(index=index, statement=statement, ok=True))
    return report


def _apply_all_or_nothing(manager: DataServiceManager, statements: List[str]) -> MigrationReport:
    report = MigrationReport(mode='all_or_nothing')
    # exec_sql は1回の呼び出しが1トランザクション。関数内ではBEGIN/COMMITを使えない
    # 区切りは改行してから置く（行末の -- コメントに飲み込まれないように）
    batch = "\n;\n".join(statements) + "\n;"
    try:
        manager.execute_sql(batch)
    except Exception as e:
        logger.error("Migration batch rolled back: %s", _error_text(e))
        report.results = [StatementResult(index=i, statement=s, ok=False, error=_error_text(e)) for i, s in enumerate(statements)]
        return report
    report.results = [StatementResult(index=i, statement=s, ok=True) for i, s in enumerate(statements)]
    return report


def apply_sql(sql_text: str, mode: MigrationMode = 'best_effort') -> MigrationReport:
    """SQLテキストを文単位に分割してデータサービスに送る

    best_effort: 1文ずつ送信し、失敗しても残りを続行する（トランザクションなし）。
        途中で失敗するとスキーマが中途半端な状態で残る可能性がある。
    all_or_nothing: 全文を1回のexec_sql呼び出しでまとめて送信する。途中で失敗すれば全体がロールバックされる。
    """
    statements = split_sql_statements(sql_text)
    manager = DataServiceManager()
    logger.info("Applying %d statements (%s)", len(statements), mode)
    if mode == 'all_or_nothing':
        report = _apply_all_or_nothing(manager, statements)
    else:
        report = _apply_best_effort(manager, statements)
    logger.info("Migration finished: %s", report.summary())
    return report


def apply_sql_file(path, mode: MigrationMode = 'best_effort') -> MigrationReport:
    sql_text = Path(path).read_text(encoding="utf-8")
    logger.info("Read %s (%d bytes)", path, len(sql_text))
    return apply_sql(sql_text, mode)


def verify_analytics_views(limit: int = 3) -> bool:
    """適用後の確認として分析ビューを読み出す"""
    ok = True
    for name, query in (("recent orders", analytics_repo.recent_orders), ("top products", analytics_repo.top_products)):
        try:
            rows = query(limit)
            logger.info("%s view: %d rows", name, len(rows))
        except AppError as e:
            logger.error("%s view check failed: %s", name, _error_text(e))
            ok = False
    return ok
