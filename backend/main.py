"""
Persona Media Studio - FastAPI主应用
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.api.v1.router import api_router
from app.core.ai.credentials import SettingsCredentialBroker
from app.core.ai.registry import register_all_providers
from app.core.log_utils import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """启动时登记Provider并检查凭证，凭证缺失不阻止启动"""
    register_all_providers()

    if not SettingsCredentialBroker().has_selected_credential():
        logger.warning("未配置Gemini API密钥，生成接口将返回401，请设置 GEMINI_API_KEY")

    logger.info(
        "应用启动完成",
        operation="startup",
        image_model=settings.image_fast_model,
        video_model=settings.video_fast_model,
        text_model=settings.text_model
    )
    yield
    logger.info("应用关闭", operation="shutdown")


def create_app() -> FastAPI:
    """组装应用：CORS、v1路由、根路径与健康检查"""
    application = FastAPI(
        title=settings.project_name,
        version=settings.app_version,
        description="基于Gemini/Veo的角色一致性图片、视频与对话生成服务",
        openapi_url=f"{settings.api_v1_str}/openapi.json",
        docs_url=f"{settings.api_v1_str}/docs",
        redoc_url=f"{settings.api_v1_str}/redoc",
        lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router, prefix=settings.api_v1_str)

    @application.get("/")
    def read_root():
        return {
            "message": settings.project_name,
            "version": settings.app_version,
            "docs": f"{settings.api_v1_str}/docs"
        }

    @application.get("/health")
    def health_check():
        return {"status": "healthy"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower()
    )
