"""
SQL 慢查詢分析服務
"""

from fastapi import FastAPI
from core.data_manager import DataManager, LogSourceError
from api.upload import create_upload_routes
from api.analysis import create_analysis_routes
from api.queries import create_query_routes
from config import settings
from utils.logging_utils import get_logger

logger = get_logger("server")


def create_app(data_manager: DataManager = None) -> FastAPI:
    """建立 FastAPI 應用程式"""
    if data_manager is None:
        data_manager = DataManager()

    if settings.preload_log:
        try:
            data_manager.analyze_file(settings.preload_log)
        except LogSourceError as e:
            logger.warning("⚠️ 無法載入預設資料: %s", e)

    app = FastAPI(title="SQL 慢查詢分析")
    app.state.data_manager = data_manager

    app.include_router(create_upload_routes(data_manager))
    app.include_router(create_analysis_routes(data_manager))
    app.include_router(create_query_routes(data_manager))

    @app.get("/health")
    async def health():
        return {"status": "ok", "current_analysis": data_manager.current_analysis.name}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logger.info("啟動 SQL 慢查詢分析服務: http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
