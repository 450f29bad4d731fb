"""
SQL报表服务 - 主入口
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from dotenv import load_dotenv

from .database import init_database
from .services.report_service import get_report_service
from .utils.logger import setup_logger
from .routes import reports_router

# 加载环境变量
load_dotenv()

# 初始化日志
logger = setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    worker_id = os.getpid()
    logger.info(f"Worker {worker_id} 正在启动...")

    try:
        init_database()
        # 加载数据库连接配置，之后只读
        service = get_report_service()
        logger.info(f"Worker {worker_id} 已加载 {len(service.connections)} 个数据库连接")
    except Exception as e:
        logger.error(f"Worker {worker_id} 初始化失败: {e}", exc_info=True)
        raise

    logger.info(f"Worker {worker_id} 启动完成")

    yield

    logger.info(f"Worker {worker_id} 正在关闭...")


app = FastAPI(
    title="SQL报表服务 API",
    description="由带头部注释的查询文件生成HTML报表",
    version="1.0.0",
    lifespan=lifespan
)

# 注册路由
app.include_router(reports_router)


@app.get("/")
async def root():
    return {"message": "SQL报表服务 API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    host = os.getenv("BACKEND_HOST", "0.0.0.0")
    port = int(os.getenv("BACKEND_PORT", 8000))
    workers = int(os.getenv("BACKEND_WORKERS", 1))
    log_level = os.getenv("LOG_LEVEL", "info").lower()

    logger.info(f"启动服务器: {host}:{port}, workers={workers}, log_level={log_level}")

    uvicorn.run(
        "sqlreports.main:app",
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
        access_log=log_level == "debug"
    )
