"""
SQL 查詢分析器
"""

import re
from collections import Counter, defaultdict
from typing import List, Dict, Optional, Iterable
from models.schemas import LogEntry, QueryGroup, TimeBucket, Summary
from config import settings


# 依序比對開頭關鍵字，第一個符合者為準
_TYPE_PREFIXES = (
    ("select", "SELECT"),
    ("insert", "INSERT"),
    ("update", "UPDATE"),
    ("delete", "DELETE"),
    ("call", "STORED_PROC"),
    ("create", "CREATE"),
    ("alter", "ALTER"),
    ("drop", "DROP"),
)

_TIME_PATTERN = re.compile(r"(\d{6})\s+(\d{1,2}):(\d{2}):(\d{2})")

_TIME_RANGES = (
    ("0-1s", 1),
    ("1-5s", 5),
    ("5-10s", 10),
    ("10-30s", 30),
)


class SQLAnalyzer:
    """SQL 查詢分析器"""

    @staticmethod
    def normalize_sql(sql: Optional[str]) -> str:
        """
        SQL 樣板轉換函式

        Args:
            sql: 原始 SQL 語句

        Returns:
            str: 正規化後的 SQL 樣板
        """
        if not sql:
            return ""
        sql = re.sub(r"\s+", " ", sql).strip()
        sql = re.sub(r"'[^']*'", "?", sql)
        sql = re.sub(r'"[^"]*"', "?", sql)
        sql = re.sub(r"\b\d+\.?\d*\b", "?", sql)
        sql = re.sub(r"\(\s*\?\s*(?:,\s*\?\s*)+\)", "(?)", sql)
        # 日期時間字面值在數字替換後會變成 ?-?-? ?:?:?
        sql = re.sub(r"\?-\?-\?\s+\?:\?:\?(?:\.\?)?", "?", sql)
        sql = re.sub(r"\bLIMIT\s+\?\s*,?\s*\?", "LIMIT ?", sql, flags=re.IGNORECASE)
        sql = re.sub(r"\bOFFSET\s+\?", "OFFSET ?", sql, flags=re.IGNORECASE)
        return sql.lower()

    @staticmethod
    def get_sql_type(sql: Optional[str]) -> str:
        """
        判斷 SQL 類型

        Args:
            sql: SQL 語句

        Returns:
            str: SQL 類型 (SELECT, INSERT, UPDATE, DELETE, STORED_PROC,
                 CREATE, ALTER, DROP, OTHER, UNKNOWN)
        """
        if not sql:
            return "UNKNOWN"
        lowered = sql.lower().strip()
        if not lowered:
            return "UNKNOWN"
        for prefix, sql_type in _TYPE_PREFIXES:
            if lowered.startswith(prefix):
                return sql_type
        return "OTHER"

    def group_by_shape(self, entries: Iterable[LogEntry]) -> Dict[str, QueryGroup]:
        """
        依 SQL 樣板分組統計

        Args:
            entries: 查詢記錄列表

        Returns:
            Dict[str, QueryGroup]: 樣板對應群組（依首次出現順序）
        """
        groups: Dict[str, QueryGroup] = {}

        for entry in entries:
            template = entry.normalized_sql or "unknown"
            group = groups.get(template)
            if group is None:
                group = QueryGroup(template=template, type=self.get_sql_type(template))
                groups[template] = group
            group.add(entry)

        for group in groups.values():
            group.finalize()

        return groups

    def bucket_by_hour(self, entries: Iterable[LogEntry]) -> List[TimeBucket]:
        """
        依小時彙整查詢，無法解析時間或缺少查詢時間的記錄略過

        Args:
            entries: 查詢記錄列表

        Returns:
            List[TimeBucket]: 依時間排序的統計列表
        """
        timeline: Dict[str, TimeBucket] = {}
        type_counts: Dict[str, Counter] = defaultdict(Counter)

        for entry in entries:
            if not entry.time or entry.query_time is None:
                continue
            match = _TIME_PATTERN.search(entry.time)
            if not match:
                continue

            date, hour = match.group(1), match.group(2)
            key = f"{date} {hour.zfill(2)}:00"
            bucket = timeline.get(key)
            if bucket is None:
                bucket = TimeBucket(time=key)
                timeline[key] = bucket

            bucket.total_queries += 1
            bucket.total_time += entry.query_time
            bucket.max_time = max(bucket.max_time, entry.query_time)
            if entry.query_time > settings.slow_query_threshold:
                bucket.slow_queries += 1

            type_counts[key][self.get_sql_type(entry.normalized_sql or entry.sql)] += 1

        for bucket in timeline.values():
            bucket.avg_time = bucket.total_time / bucket.total_queries
            bucket.types = dict(type_counts[bucket.time])

        # YYMMDD HH:00 為固定寬度，字串排序即為時間順序
        return [timeline[key] for key in sorted(timeline)]

    def summarize(
        self,
        entries: List[LogEntry],
        groups: Optional[Dict[str, QueryGroup]] = None
    ) -> Summary:
        """
        計算整體統計摘要

        Args:
            entries: 查詢記錄列表
            groups: 已計算的樣板群組，未提供時重新分組

        Returns:
            Summary: 統計摘要，無資料時平均與最大值為 0 且 is_empty 為 True
        """
        if groups is None:
            groups = self.group_by_shape(entries)

        if not entries:
            return Summary(unique_queries=len(groups))

        query_times = [entry.query_time or 0 for entry in entries]
        total_time = sum(query_times)

        return Summary(
            total_queries=len(entries),
            unique_queries=len(groups),
            total_time=total_time,
            avg_time=total_time / len(entries),
            max_time=max(query_times),
            total_rows_examined=sum(entry.rows_examined or 0 for entry in entries),
            is_empty=False
        )

    @staticmethod
    def top_by_total_time(groups: Dict[str, QueryGroup], limit: Optional[int] = None) -> List[QueryGroup]:
        """總執行時間最高的樣板"""
        if limit is None:
            limit = settings.top_total_time_limit
        ranked = sorted(groups.values(), key=lambda g: (-g.total_time, g.template))
        return ranked[:limit]

    @staticmethod
    def top_by_avg_time(groups: Dict[str, QueryGroup], limit: Optional[int] = None) -> List[QueryGroup]:
        """平均執行時間最高的樣板"""
        if limit is None:
            limit = settings.top_avg_time_limit
        ranked = sorted(groups.values(), key=lambda g: (-g.avg_time, g.template))
        return ranked[:limit]

    @staticmethod
    def top_by_count(groups: Dict[str, QueryGroup], limit: Optional[int] = None) -> List[QueryGroup]:
        """執行次數最多的樣板"""
        ranked = sorted(groups.values(), key=lambda g: (-g.count, g.template))
        return ranked if limit is None else ranked[:limit]

    @staticmethod
    def type_distribution(groups: Dict[str, QueryGroup]) -> Dict[str, int]:
        """各 SQL 類型的執行次數"""
        types = Counter()
        for group in groups.values():
            types[group.type] += group.count
        return dict(sorted(types.items(), key=lambda item: (-item[1], item[0])))

    @staticmethod
    def time_ranges(entries: Iterable[LogEntry]) -> Dict[str, int]:
        """查詢時間分布統計"""
        ranges = {label: 0 for label, _ in _TIME_RANGES}
        ranges["30s+"] = 0

        for entry in entries:
            if entry.query_time is None:
                continue
            for label, upper in _TIME_RANGES:
                if entry.query_time < upper:
                    ranges[label] += 1
                    break
            else:
                ranges["30s+"] += 1

        return ranges

    @staticmethod
    def sorted_executions(group: QueryGroup) -> List[LogEntry]:
        """群組內執行記錄，依查詢時間降序"""
        return sorted(group.queries, key=lambda e: e.query_time or 0, reverse=True)
