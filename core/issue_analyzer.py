"""
查詢效能問題分析
"""

from typing import List, Optional
from models.schemas import LogEntry, IssueReport
from config import settings

CRITICAL = "critical"
WARNING = "warning"
INFO = "info"


class IssueAnalyzer:
    """依優化器旗標與掃描列數判斷樣板的效能問題"""

    def __init__(self, high_examine_ratio: Optional[float] = None, heavy_avg_rows: Optional[int] = None):
        self.high_examine_ratio = (
            settings.high_examine_ratio if high_examine_ratio is None else high_examine_ratio
        )
        self.heavy_avg_rows = settings.heavy_avg_rows if heavy_avg_rows is None else heavy_avg_rows

    def has_high_ratio(self, entry: LogEntry) -> bool:
        """掃描列數與回傳列數比例是否過高"""
        return (entry.rows_examined or 0) / max(entry.rows_sent or 0, 1) > self.high_examine_ratio

    def analyze_issues(self, queries: List[LogEntry]) -> IssueReport:
        """
        統計群組內各執行記錄的問題數量

        Args:
            queries: 同一樣板的執行記錄

        Returns:
            IssueReport: 問題數量與建議
        """
        report = IssueReport()

        for entry in queries:
            if (entry.tmp_disk_tables or 0) > 0:
                report.critical += 1
            if entry.full_scan:
                report.critical += 1
            if entry.full_join:
                report.critical += 1
            if entry.filesort:
                report.warning += 1
            if (entry.tmp_tables or 0) > 0:
                report.info += 1

        # 比例過高只計一次
        high_ratio = any(self.has_high_ratio(entry) for entry in queries)
        if high_ratio:
            report.warning += 1

        report.has_suggestions = (report.critical + report.warning + report.info) > 0
        report.issues = self._collect_issues(queries)
        report.suggestions = self._collect_suggestions(queries, high_ratio)
        return report

    @staticmethod
    def _collect_issues(queries: List[LogEntry]):
        issues = []
        if any((e.tmp_disk_tables or 0) > 0 for e in queries):
            issues.append((CRITICAL, "Temp tables created on disk (memory exhausted)"))
        if any(e.full_scan for e in queries):
            issues.append((CRITICAL, "Full table scans detected"))
        if any(e.full_join for e in queries):
            issues.append((CRITICAL, "Full joins without indexes"))
        if any(e.filesort for e in queries):
            issues.append((WARNING, "Filesort operations (ORDER BY/GROUP BY without index)"))
        if any((e.tmp_tables or 0) > 0 for e in queries):
            issues.append((INFO, "Temporary tables created"))
        if not issues:
            issues.append((INFO, "No major performance issues detected"))
        return issues

    def _collect_suggestions(self, queries: List[LogEntry], high_ratio: bool) -> List[str]:
        suggestions = []
        if any(e.full_scan or e.full_join for e in queries):
            suggestions.append("Add indexes on JOIN/WHERE columns")
        if any(e.filesort for e in queries):
            suggestions.append("Create composite index for ORDER BY/GROUP BY")
        if any((e.tmp_disk_tables or 0) > 0 for e in queries):
            suggestions.append("Increase tmp_table_size and max_heap_table_size")
        if queries:
            avg_rows = sum(e.rows_examined or 0 for e in queries) / len(queries)
            if avg_rows > self.heavy_avg_rows:
                suggestions.append(f"Consider query optimization (examining {avg_rows:,.0f} rows avg)")
        if high_ratio:
            suggestions.append("High examine-to-result ratio - review WHERE conditions")
        return suggestions
