"""
分析結果相關 API 路由
"""

from fastapi import APIRouter
from core.data_manager import DataManager


def create_analysis_routes(data_manager: DataManager):
    """創建分析結果相關路由"""

    router = APIRouter(prefix="/api", tags=["analysis"])

    @router.get("/current_analysis")
    async def get_current_analysis():
        """取得目前分析的基本資訊"""
        return data_manager.get_current_analysis_info()

    @router.delete("/current_analysis")
    async def clear_current_analysis():
        """清除目前分析"""
        data_manager.reset()
        return {
            "success": True,
            "message": "已清除目前分析",
            "current_analysis": data_manager.current_analysis.name
        }

    @router.get("/summary")
    async def get_summary():
        """取得整體統計摘要"""
        return {
            "summary": data_manager.current_analysis.summary.to_dict(),
            "basic_stats": data_manager.get_basic_stats()
        }

    @router.get("/timeline")
    async def get_timeline():
        """取得每小時查詢統計"""
        return {"timeline": [bucket.to_dict() for bucket in data_manager.get_timeline()]}

    @router.get("/type_distribution")
    async def get_type_distribution():
        """取得 SQL 類型分布"""
        groups = data_manager.current_analysis.groups
        return {"types": data_manager.sql_analyzer.type_distribution(groups)}

    @router.get("/time_ranges")
    async def get_time_ranges():
        """取得查詢時間分布"""
        entries = data_manager.current_analysis.entries
        return {"time_ranges": data_manager.sql_analyzer.time_ranges(entries)}

    return router
