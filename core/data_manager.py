"""
分析資料管理器
"""

from pathlib import Path
from typing import List, Optional, Dict, Any, Union
from datetime import datetime
from models.schemas import AnalysisResult, IssueReport, QueryGroup, TimeBucket
from core.log_parser import LogParser
from core.sql_analyzer import SQLAnalyzer
from core.issue_analyzer import IssueAnalyzer
from utils.logging_utils import get_logger

logger = get_logger("data_manager")

DEFAULT_ANALYSIS_NAME = "預設分析"


class LogSourceError(Exception):
    """無法讀取 LOG 來源（與 LOG 內容格式錯誤不同）"""


class DataManager:
    """分析資料管理器，保存目前的分析結果於記憶體中"""

    def __init__(self):
        self.log_parser = LogParser()
        self.sql_analyzer = SQLAnalyzer()
        self.issue_analyzer = IssueAnalyzer()
        self.current_analysis = AnalysisResult(name=DEFAULT_ANALYSIS_NAME)
        self._timeline: Optional[List[TimeBucket]] = None

    def analyze_content(
        self,
        content: str,
        analysis_name: str = DEFAULT_ANALYSIS_NAME,
        original_filename: Optional[str] = None
    ) -> AnalysisResult:
        """
        解析 LOG 內容並建立統計，結果成為目前分析

        Args:
            content: LOG 檔案內容
            analysis_name: 分析名稱
            original_filename: 原始檔案名稱

        Returns:
            AnalysisResult: 分析結果
        """
        entries = self.log_parser.parse_slow_log(content)
        groups = self.sql_analyzer.group_by_shape(entries)
        summary = self.sql_analyzer.summarize(entries, groups)

        self.current_analysis = AnalysisResult(
            name=analysis_name,
            entries=entries,
            groups=groups,
            summary=summary,
            original_filename=original_filename,
            analyzed_at=datetime.now().isoformat()
        )
        self._timeline = None

        logger.info(
            "分析完成 %s: %d 筆查詢, %d 個樣板",
            analysis_name, summary.total_queries, summary.unique_queries
        )
        return self.current_analysis

    def analyze_file(self, path: Union[str, Path], analysis_name: Optional[str] = None) -> AnalysisResult:
        """
        讀取 LOG 檔案並分析

        Args:
            path: LOG 檔案路徑
            analysis_name: 分析名稱，預設為檔名

        Returns:
            AnalysisResult: 分析結果

        Raises:
            LogSourceError: 檔案無法讀取
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.error("無法讀取 LOG 檔案 %s: %s", path, e)
            raise LogSourceError(f"無法讀取 LOG 檔案: {path}") from e

        return self.analyze_content(content, analysis_name or path.name, path.name)

    def reset(self) -> None:
        """清除目前分析"""
        self.current_analysis = AnalysisResult(name=DEFAULT_ANALYSIS_NAME)
        self._timeline = None

    def get_timeline(self) -> List[TimeBucket]:
        """取得每小時統計（首次呼叫時計算）"""
        if self._timeline is None:
            self._timeline = self.sql_analyzer.bucket_by_hour(self.current_analysis.entries)
        return self._timeline

    def get_group(self, template_index: int, order: str = "total_time") -> QueryGroup:
        """
        依排名位置取得樣板群組

        Raises:
            LookupError: 索引超出範圍
        """
        ranked = self.rank_groups(order)
        if not 0 <= template_index < len(ranked):
            raise LookupError(f"模板索引無效: {template_index}")
        return ranked[template_index]

    def get_issues(self, template: str) -> IssueReport:
        """取得指定樣板的問題報告"""
        group = self.current_analysis.groups.get(template)
        if group is None:
            raise LookupError(f"樣板不存在: {template}")
        return self.issue_analyzer.analyze_issues(group.queries)

    def rank_groups(self, order: str = "total_time", limit: Optional[int] = None) -> List[QueryGroup]:
        """
        依指定欄位排序樣板群組

        Raises:
            ValueError: 不支援的排序欄位
        """
        groups = self.current_analysis.groups
        if order == "total_time":
            ranked = self.sql_analyzer.top_by_total_time(groups, len(groups))
        elif order == "avg_time":
            ranked = self.sql_analyzer.top_by_avg_time(groups, len(groups))
        elif order == "count":
            ranked = self.sql_analyzer.top_by_count(groups)
        else:
            raise ValueError(f"不支援的排序欄位: {order}")
        return ranked if limit is None else ranked[:limit]

    def get_current_analysis_info(self) -> Dict[str, Any]:
        """獲取當前分析的基本資訊"""
        return {
            "name": self.current_analysis.name,
            "original_filename": self.current_analysis.original_filename,
            "total_queries": self.current_analysis.summary.total_queries,
            "total_templates": self.current_analysis.summary.unique_queries,
            "analyzed_at": self.current_analysis.analyzed_at or "未知"
        }

    def get_basic_stats(self) -> Dict[str, Any]:
        """獲取基本統計資訊"""
        query_times = sorted(
            item.query_time for item in self.current_analysis.entries
            if item.query_time is not None
        )
        if not query_times:
            return {
                "total_queries": len(self.current_analysis.entries),
                "avg_time": 0.0,
                "max_time": 0.0,
                "median_time": 0.0
            }

        return {
            "total_queries": len(self.current_analysis.entries),
            "avg_time": sum(query_times) / len(query_times),
            "max_time": query_times[-1],
            "median_time": query_times[len(query_times) // 2]
        }
