"""
查詢相關 API 路由
"""

from typing import Optional
from fastapi import APIRouter, Query, HTTPException
from core.data_manager import DataManager
from core.sql_analyzer import SQLAnalyzer


def create_query_routes(data_manager: DataManager):
    """創建查詢相關路由"""

    router = APIRouter(prefix="/api", tags=["queries"])

    @router.get("/query_groups")
    async def get_query_groups(
        order: str = Query("total_time", description="排序欄位: total_time, avg_time, count"),
        limit: Optional[int] = Query(None, ge=1, le=1000)
    ):
        """取得樣板統計列表與問題數量"""
        try:
            ranked = data_manager.rank_groups(order, limit)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        groups = []
        for group in ranked:
            issues = data_manager.issue_analyzer.analyze_issues(group.queries)
            data = group.to_dict()
            data["issues"] = {
                "critical": issues.critical,
                "warning": issues.warning,
                "info": issues.info,
                "has_suggestions": issues.has_suggestions
            }
            groups.append(data)

        return {"order": order, "groups": groups}

    @router.get("/query_groups/{template_index}")
    async def get_query_group(
        template_index: int,
        order: str = Query("total_time", description="排序欄位: total_time, avg_time, count")
    ):
        """取得指定樣板的執行記錄與問題報告"""
        try:
            group = data_manager.get_group(template_index, order)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except LookupError as e:
            raise HTTPException(status_code=404, detail=str(e))

        data = group.to_dict()
        data["executions"] = [
            entry.to_dict() for entry in data_manager.sql_analyzer.sorted_executions(group)
        ]
        data["issues"] = data_manager.get_issues(group.template).to_dict()
        return data

    @router.get("/raw_queries")
    async def get_raw_queries(
        page: int = Query(1, ge=1),
        size: int = Query(50, ge=1, le=1000),
        search: str = Query("", description="搜尋關鍵字"),
        min_time: float = Query(0, ge=0, description="最小查詢時間"),
        sql_type: str = Query("", description="SQL類型篩選"),
        user_filter: str = Query("", description="用戶篩選"),
        table_filter: str = Query("", description="表格篩選")
    ):
        """取得原始查詢列表，支援分頁和篩選"""
        table_filters = [t.strip().lower() for t in table_filter.split(",") if t.strip()]

        filtered_data = []
        for item in data_manager.current_analysis.entries:
            if (item.query_time or 0) < min_time:
                continue

            if sql_type and SQLAnalyzer.get_sql_type(item.sql) != sql_type.upper():
                continue

            if user_filter and user_filter.lower() not in (item.user or "").lower():
                continue

            if table_filters and not any(
                filter_table in table_name.lower()
                for table_name in item.tables_used
                for filter_table in table_filters
            ):
                continue

            if search and search.lower() not in (item.sql or "").lower():
                continue

            filtered_data.append(item)

        # 排序（依查詢時間降序）
        filtered_data.sort(key=lambda x: x.query_time or 0, reverse=True)

        total = len(filtered_data)
        start = (page - 1) * size
        page_data = filtered_data[start:start + size]

        formatted_data = []
        for item in page_data:
            data = item.to_dict()
            data["sql_type"] = SQLAnalyzer.get_sql_type(item.sql)
            formatted_data.append(data)

        return {
            "data": formatted_data,
            "total": total,
            "page": page,
            "size": size,
            "total_pages": (total + size - 1) // size
        }

    @router.get("/tables_list")
    async def get_tables_list():
        """取得所有使用的表格列表"""
        tables_set = set()
        for item in data_manager.current_analysis.entries:
            tables_set.update(item.tables_used)
        return {"tables": sorted(tables_set)}

    return router
