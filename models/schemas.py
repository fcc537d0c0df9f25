"""
資料結構定義
"""

import math
from typing import List, Optional, Dict, Any, Tuple
from dataclasses import dataclass, field, asdict


@dataclass
class LogEntry:
    """單次查詢執行記錄"""
    time: Optional[str] = None
    user: Optional[str] = None
    host: Optional[str] = None
    ip: Optional[str] = None
    thread_id: Optional[int] = None
    schema: Optional[str] = None
    query_time: Optional[float] = None
    lock_time: Optional[float] = None
    rows_sent: Optional[int] = None
    rows_examined: Optional[int] = None
    rows_affected: Optional[int] = None
    bytes_sent: Optional[int] = None
    tmp_tables: Optional[int] = None
    tmp_disk_tables: Optional[int] = None
    full_scan: bool = False
    full_join: bool = False
    tmp_table: bool = False
    filesort: bool = False
    timestamp: Optional[int] = None
    sql: Optional[str] = None
    normalized_sql: Optional[str] = None
    tables_used: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class QueryGroup:
    """相同 SQL 樣板的查詢群組"""
    template: str
    type: str
    count: int = 0
    total_time: float = 0.0
    min_time: float = math.inf
    max_time: float = 0.0
    avg_time: float = 0.0
    total_rows_examined: int = 0
    max_rows_examined: int = 0
    avg_rows_examined: float = 0.0
    queries: List[LogEntry] = field(default_factory=list)
    tables_used: List[str] = field(default_factory=list)

    def add(self, entry: LogEntry) -> None:
        """加入一筆執行記錄，平均值留待 finalize 計算"""
        query_time = entry.query_time or 0
        rows_examined = entry.rows_examined or 0

        self.count += 1
        self.total_time += query_time
        self.max_time = max(self.max_time, query_time)
        self.min_time = min(self.min_time, query_time)
        self.total_rows_examined += rows_examined
        self.max_rows_examined = max(self.max_rows_examined, rows_examined)
        self.queries.append(entry)

    def finalize(self) -> None:
        """由總計重新計算平均值"""
        if self.count:
            self.avg_time = self.total_time / self.count
            self.avg_rows_examined = self.total_rows_examined / self.count
        tables = set()
        for entry in self.queries:
            tables.update(entry.tables_used)
        self.tables_used = sorted(tables)

    def to_dict(self, include_queries: bool = False) -> Dict[str, Any]:
        data = {
            "template": self.template,
            "type": self.type,
            "count": self.count,
            "total_time": self.total_time,
            "min_time": 0.0 if self.min_time == math.inf else self.min_time,
            "max_time": self.max_time,
            "avg_time": self.avg_time,
            "total_rows_examined": self.total_rows_examined,
            "max_rows_examined": self.max_rows_examined,
            "avg_rows_examined": self.avg_rows_examined,
            "tables_used": self.tables_used
        }
        if include_queries:
            data["queries"] = [entry.to_dict() for entry in self.queries]
        return data


@dataclass
class TimeBucket:
    """每小時查詢統計"""
    time: str
    total_queries: int = 0
    slow_queries: int = 0
    total_time: float = 0.0
    avg_time: float = 0.0
    max_time: float = 0.0
    types: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Summary:
    """整體統計摘要"""
    total_queries: int = 0
    unique_queries: int = 0
    total_time: float = 0.0
    avg_time: float = 0.0
    max_time: float = 0.0
    total_rows_examined: int = 0
    is_empty: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class IssueReport:
    """查詢群組的效能問題報告"""
    critical: int = 0
    warning: int = 0
    info: int = 0
    has_suggestions: bool = False
    issues: List[Tuple[str, str]] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "critical": self.critical,
            "warning": self.warning,
            "info": self.info,
            "has_suggestions": self.has_suggestions,
            "issues": [
                {"severity": severity, "message": message}
                for severity, message in self.issues
            ],
            "suggestions": self.suggestions
        }


@dataclass
class AnalysisResult:
    """單次分析結果"""
    name: str
    entries: List[LogEntry] = field(default_factory=list)
    groups: Dict[str, QueryGroup] = field(default_factory=dict)
    summary: Summary = field(default_factory=Summary)
    original_filename: Optional[str] = None
    analyzed_at: Optional[str] = None
