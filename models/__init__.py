"""
資料模型模組
"""

from models.schemas import (
    LogEntry,
    QueryGroup,
    TimeBucket,
    Summary,
    IssueReport,
    AnalysisResult,
)

__all__ = ['LogEntry', 'QueryGroup', 'TimeBucket', 'Summary', 'IssueReport', 'AnalysisResult']
