"""FastAPI主应用"""
from __future__ import annotations

import time
from http import HTTPStatus
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from enrollment_api.app.core.config import Settings, settings as default_settings
from enrollment_api.app.common.log import logger, setup_logging
from enrollment_api.app.common.auth import build_token_verifier
from enrollment_api.app.common.exception.errors import BaseErrorException, ErrorCode
from enrollment_api.app.common.response.response_schema import response_error
from enrollment_api.app.database import create_engine, create_session_factory, init_db
from enrollment_api.app.enroll.crud import EnrollmentStore
from enrollment_api.app.enroll.service import MaintenanceLog
from enrollment_api.app.api import api_router
from enrollment_api.app.utils.timezone import utcnow


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动
    logger.info("正在启动应用...")

    # 初始化数据库
    try:
        await init_db(app.state.engine)
        logger.info("数据库初始化完成")
    except Exception as e:
        logger.error(f"数据库初始化失败: {str(e)}")
        raise

    logger.info(f"服务运行于端口 {app.state.settings.port}")

    yield

    # 关闭
    logger.info("正在关闭应用...")
    await app.state.engine.dispose()
    logger.info("数据库连接已关闭")


def register_exception_handlers(app: FastAPI) -> None:
    """注册异常处理"""

    @app.exception_handler(BaseErrorException)
    async def custom_exception_handler(request: Request, exc: BaseErrorException):
        """自定义异常处理"""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"请求异常: {request.url.path} - {exc.error} - 原因: {exc.reason}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers=exc.headers
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """框架抛出的HTTP错误（路由不存在、方法不允许等）"""
        phrase = HTTPStatus(exc.status_code).phrase
        return JSONResponse(
            status_code=exc.status_code,
            content=response_error(phrase.replace(" ", ""), phrase),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求参数校验失败"""
        logger.warning(f"请求参数错误: {request.url.path} - {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content=response_error(*ErrorCode.INVALID_REQUEST)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """通用异常处理"""
        logger.exception(f"未处理的异常: {request.url.path} - {str(exc)}")
        return JSONResponse(
            status_code=500,
            content=response_error(*ErrorCode.INTERNAL_ERROR)
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """创建应用实例"""
    settings = settings or default_settings
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="设备注册与维护API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    # 运行期状态，随进程重启而重置
    engine = create_engine(settings.database_url, echo=settings.debug)
    app.state.settings = settings
    app.state.engine = engine
    app.state.enrollment_store = EnrollmentStore(create_session_factory(engine))
    app.state.token_verifier = build_token_verifier(settings)
    app.state.maintenance_log = MaintenanceLog(settings.maintenance_log_capacity)
    app.state.started_at = utcnow()

    # 添加CORS中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # 请求日志中间件
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """请求日志中间件"""
        start_time = time.perf_counter()

        # 记录请求
        logger.info(f"请求开始: {request.method} {request.url.path}")

        # 处理请求
        response = await call_next(request)

        # 记录响应
        process_time = time.perf_counter() - start_time
        logger.info(
            f"请求完成: {request.method} {request.url.path} - "
            f"状态码: {response.status_code} - "
            f"处理时间: {process_time:.3f}s"
        )

        # 添加处理时间头
        response.headers["X-Process-Time"] = f"{process_time:.6f}"

        return response

    # 注册路由
    app.include_router(api_router)

    # 挂载静态文件
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    else:
        logger.debug(f"静态文件目录不存在，跳过挂载: {static_dir}")

    return app


def run() -> None:
    """启动服务"""
    import uvicorn

    uvicorn.run(
        "enrollment_api.main:create_app",
        factory=True,
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.reload,
        log_level=default_settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
