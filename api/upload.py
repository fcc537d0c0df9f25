"""
檔案上傳相關 API 路由
"""

from typing import Optional
from fastapi import APIRouter, UploadFile, File, Form, HTTPException
from core.data_manager import DataManager
from config import settings
from utils.logging_utils import get_logger

logger = get_logger("api.upload")


def create_upload_routes(data_manager: DataManager):
    """創建上傳相關路由"""

    router = APIRouter(prefix="/api", tags=["upload"])

    @router.post("/upload_log")
    async def upload_log(
        file: UploadFile = File(...),
        analysis_name: Optional[str] = Form(None)
    ):
        """上傳 LOG 檔案並分析"""
        # 讀取內容前先以宣告大小檢查
        if file.size is not None and file.size > settings.max_upload_bytes:
            raise HTTPException(status_code=413, detail="上傳檔案過大")

        try:
            content = await file.read()
        except OSError as e:
            logger.error("讀取上傳檔案失敗: %s", e)
            raise HTTPException(status_code=400, detail=f"無法讀取上傳檔案: {str(e)}")

        if not content:
            raise HTTPException(status_code=400, detail="上傳檔案為空")
        if len(content) > settings.max_upload_bytes:
            raise HTTPException(status_code=413, detail="上傳檔案過大")

        filename = file.filename or "unknown_file"
        log_content = content.decode("utf-8", errors="ignore")

        result = data_manager.analyze_content(log_content, analysis_name or filename, filename)

        return {
            "success": True,
            "message": f"LOG檔案 '{filename}' 上傳並分析完成",
            "analysis_name": result.name,
            "total_queries": result.summary.total_queries,
            "total_templates": result.summary.unique_queries
        }

    return router
