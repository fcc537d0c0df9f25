"""
MySQL 慢查詢 LOG 解析器
"""

import re
from typing import List, Iterable
from models.schemas import LogEntry
from core.sql_analyzer import SQLAnalyzer
from utils.logging_utils import get_logger

logger = get_logger("log_parser")

# 格式: user@client @ host [ip]
_USER_HOST_PATTERN = re.compile(r"# User@Host: ([^@]+)@([^@]+) @ ([^\[]+) \[([^\]]+)\]")
# MySQL 預設格式: priv_user[user] @ host [ip]，上述格式不符時額外接受
_MYSQL_USER_HOST_PATTERN = re.compile(r"# User@Host: ([^\[\s]+)\[[^\]]*\]\s+@\s+(\S*)\s*\[([^\]]*)\]")
_THREAD_PATTERN = re.compile(r"Thread_id: (\d+)\s+Schema: (\w+)")
_QUERY_TIME_PATTERN = re.compile(
    r"Query_time: ([\d.]+)\s+Lock_time: ([\d.]+)\s+Rows_sent: (\d+)\s+Rows_examined: (\d+)"
)
_ROWS_AFFECTED_PATTERN = re.compile(r"Rows_affected: (\d+)\s+Bytes_sent: (\d+)")
_TMP_TABLES_PATTERN = re.compile(r"Tmp_tables: (\d+)\s+Tmp_disk_tables: (\d+)")
_SET_TIMESTAMP_PATTERN = re.compile(r"^SET timestamp=(\d+);\s*", re.IGNORECASE)


class LogParser:
    """MySQL 慢查詢 LOG 解析器"""

    def __init__(self):
        self.table_pattern = re.compile(
            r"(?:from|join)\s+`?(\w+)`?(?:\s+as|\s+\w+)?",
            re.IGNORECASE
        )
        self.discarded = 0

    def parse_slow_log(self, content: str) -> List[LogEntry]:
        """
        解析慢查詢 LOG 內容

        Args:
            content: LOG 檔案內容

        Returns:
            List[LogEntry]: 解析後的查詢記錄列表
        """
        if not content:
            return []
        return self.parse_slow_log_lines(content.split("\n"))

    def parse_slow_log_lines(self, lines: Iterable[str]) -> List[LogEntry]:
        """
        逐行解析慢查詢 LOG，以 `# Time:` 作為記錄分界

        Args:
            lines: LOG 行序列

        Returns:
            List[LogEntry]: 含時間與 SQL 的查詢記錄
        """
        entries: List[LogEntry] = []
        current = LogEntry()
        query_lines: List[str] = []
        in_explain = False
        self.discarded = 0

        for raw_line in lines:
            line = raw_line.strip()

            if line.startswith("# Time:"):
                self._finalize(current, query_lines, entries)
                current = LogEntry(time=line[len("# Time:"):].strip())
                query_lines = []
                in_explain = False
            elif line.startswith("# User@Host:"):
                self._parse_user_host(line, current)
            elif line.startswith("# Thread_id:"):
                if m := _THREAD_PATTERN.search(line):
                    current.thread_id = int(m.group(1))
                    current.schema = m.group(2)
            elif line.startswith("# Query_time:"):
                if m := _QUERY_TIME_PATTERN.search(line):
                    current.query_time = float(m.group(1))
                    current.lock_time = float(m.group(2))
                    current.rows_sent = int(m.group(3))
                    current.rows_examined = int(m.group(4))
            elif line.startswith("# Rows_affected:"):
                if m := _ROWS_AFFECTED_PATTERN.search(line):
                    current.rows_affected = int(m.group(1))
                    current.bytes_sent = int(m.group(2))
            elif line.startswith("# Tmp_tables:"):
                if m := _TMP_TABLES_PATTERN.search(line):
                    current.tmp_tables = int(m.group(1))
                    current.tmp_disk_tables = int(m.group(2))
            elif line.startswith("# Full_scan:"):
                current.full_scan = "Full_scan: Yes" in line
                current.full_join = "Full_join: Yes" in line
                current.tmp_table = "Tmp_table: Yes" in line
                current.filesort = "Filesort: Yes" in line
            elif line.startswith("# Filesort:"):
                # MariaDB 將 Filesort 旗標寫在下一行
                current.filesort = current.filesort or "Filesort: Yes" in line
            elif line.startswith("# explain:"):
                in_explain = True
            elif line == "#" and in_explain:
                in_explain = False
            elif line and not line.startswith("#"):
                # 非註解行即為 SQL，同時結束 explain 區塊
                in_explain = False
                query_lines.append(line)

        self._finalize(current, query_lines, entries)

        logger.debug("解析完成: %d 筆記錄, 捨棄 %d 筆", len(entries), self.discarded)
        return entries

    @staticmethod
    def _parse_user_host(line: str, entry: LogEntry) -> None:
        """解析用戶、主機與 IP，格式不符時保留空值"""
        if m := _USER_HOST_PATTERN.match(line):
            entry.user = m.group(1).strip()
            entry.host = m.group(3).strip()
            entry.ip = m.group(4).strip()
        elif m := _MYSQL_USER_HOST_PATTERN.match(line):
            entry.user = m.group(1).strip()
            entry.host = m.group(2).strip() or None
            entry.ip = m.group(3).strip() or None

    def _finalize(self, entry: LogEntry, query_lines: List[str], entries: List[LogEntry]) -> None:
        """
        完成單筆記錄並加入結果列表

        Args:
            entry: 解析中的記錄
            query_lines: 收集到的 SQL 行
            entries: 結果列表
        """
        if not entry.time or not query_lines:
            if entry.time:
                self.discarded += 1
            return

        sql = " ".join(query_lines)
        if m := _SET_TIMESTAMP_PATTERN.match(sql):
            entry.timestamp = int(m.group(1))
            sql = sql[m.end():]

        sql = sql.split(";")[0].strip()
        if not sql:
            self.discarded += 1
            return

        entry.sql = sql
        entry.normalized_sql = SQLAnalyzer.normalize_sql(sql)
        entry.tables_used = sorted(set(self.table_pattern.findall(sql)))
        entries.append(entry)
