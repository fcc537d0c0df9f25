"""測試共用 fixtures"""

import pytest

from core.data_manager import DataManager
from core.log_parser import LogParser
from core.sql_analyzer import SQLAnalyzer
from core.issue_analyzer import IssueAnalyzer


# =============================================================================
# LOG 內容
# =============================================================================

ORDERS_LOG = """\
/usr/sbin/mysqld, Version: 10.6.12-MariaDB-log (MariaDB Server). started with:
Tcp port: 3306  Unix socket: /run/mysqld/mysqld.sock
Time                Id Command  Argument
# Time: 250531 10:15:02
# User@Host: app@appsrv @ web01 [10.0.0.5]
# Thread_id: 1201  Schema: shop  QC_hit: No
# Query_time: 12.5  Lock_time: 0.001  Rows_sent: 1  Rows_examined: 500000
# Rows_affected: 0  Bytes_sent: 512
SET timestamp=1748686502;
SELECT * FROM orders WHERE id = 42;
# Time: 250531 10:47:55
# User@Host: app@appsrv @ web01 [10.0.0.5]
# Thread_id: 1202  Schema: shop  QC_hit: No
# Query_time: 0.8  Lock_time: 0.000  Rows_sent: 1  Rows_examined: 1
# Rows_affected: 0  Bytes_sent: 480
SET timestamp=1748688475;
SELECT * FROM orders WHERE id = 99;
"""

MARIADB_LOG = """\
# Time: 250531  9:05:11
# User@Host: report[report] @ batch01 [10.0.0.9]
# Thread_id: 77  Schema: analytics  QC_hit: No
# Query_time: 35.250000  Lock_time: 0.000120  Rows_sent: 20  Rows_examined: 2400000
# Rows_affected: 0  Bytes_sent: 4096
# Tmp_tables: 1  Tmp_disk_tables: 1  Tmp_table_sizes: 16777216
# Full_scan: Yes  Full_join: No  Tmp_table: Yes  Tmp_table_on_disk: Yes
# Filesort: Yes  Filesort_on_disk: No  Merge_passes: 0  Priority_queue: No
#
# explain: id	select_type	table	type	possible_keys	key	key_len	ref	rows	Extra
# explain: 1	SIMPLE	events	ALL	NULL	NULL	NULL	NULL	2400000	Using where; Using filesort
#
SET timestamp=1748682311;
SELECT user_id, COUNT(*) FROM events
  WHERE created_at > '2025-05-01 00:00:00'
  GROUP BY user_id ORDER BY 2 DESC LIMIT 20;
# Time: 250531  9:40:00
# User@Host: app@appsrv @ web01 [10.0.0.5]
# Thread_id: 78  Schema: shop  QC_hit: No
# Query_time: 2.1  Lock_time: 0.3  Rows_sent: 0  Rows_examined: 4
# Rows_affected: 4  Bytes_sent: 52
SET timestamp=1748684400;
DELETE FROM logs WHERE id IN (1,2,3,4);
# Time: 250531 11:02:13
# User@Host: app@appsrv @ web01 [10.0.0.5]
# Thread_id: 79  Schema: shop  QC_hit: No
# Query_time: 1.4  Lock_time: 0.2  Rows_sent: 0  Rows_examined: 2
# Rows_affected: 2  Bytes_sent: 52
SET timestamp=1748689333;
DELETE FROM logs WHERE id IN (5,6);
"""


@pytest.fixture
def orders_log() -> str:
    return ORDERS_LOG


@pytest.fixture
def mariadb_log() -> str:
    return MARIADB_LOG


@pytest.fixture
def parser() -> LogParser:
    return LogParser()


@pytest.fixture
def analyzer() -> SQLAnalyzer:
    return SQLAnalyzer()


@pytest.fixture
def issue_analyzer() -> IssueAnalyzer:
    return IssueAnalyzer(high_examine_ratio=1000, heavy_avg_rows=1_000_000)


@pytest.fixture
def data_manager() -> DataManager:
    return DataManager()


def make_block(time: str, sql: str, query_time: float = 1.0) -> str:
    """產生一筆格式正確的 LOG 記錄"""
    return (
        f"# Time: {time}\n"
        "# User@Host: app@appsrv @ web01 [10.0.0.5]\n"
        "# Thread_id: 1  Schema: shop  QC_hit: No\n"
        f"# Query_time: {query_time}  Lock_time: 0.0  Rows_sent: 1  Rows_examined: 10\n"
        "SET timestamp=1748686502;\n"
        f"{sql};\n"
    )
