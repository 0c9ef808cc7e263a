from pydantic import BaseModel
from typing import List, Optional, Literal

MigrationMode = Literal['best_effort', 'all_or_nothing']


class StatementResult(BaseModel):
    index: int
    statement: str
    ok: bool
    error: Optional[str] = None


class MigrationReport(BaseModel):
    mode: MigrationMode
    results: List[StatementResult] = []

    @property
    def succeeded(self) -> List[StatementResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[StatementResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return f"{len(self.succeeded)} succeeded, {len(self.failed)} failed ({self.mode})"
