import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skybrief.config import settings
from skybrief.constants import APP_SETTINGS
from skybrief.dependencies import ServiceContainer, build_services
from skybrief.exceptions import AppError
from skybrief.routes import auth, health, sms, weather

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s"
)

logger = logging.getLogger(__name__)


def create_app(services: Optional[ServiceContainer] = None, start_scheduler: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-wired collaborators (built from settings when omitted)
        start_scheduler: Start the notification scheduler on startup
    """
    app = FastAPI(
        title=APP_SETTINGS.APP_NAME,
        version=APP_SETTINGS.VERSION,
        description=APP_SETTINGS.DESCRIPTION
    )
    app.state.services = services

    # The frontend is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        """Validate configuration and start the notification scheduler"""
        if app.state.services is None:
            from skybrief.config import validate_required_keys
            try:
                validate_required_keys()
                logger.info("✅ Configuration validation passed")
            except Exception as e:
                logger.error(f"❌ Configuration validation failed: {e}")
                raise
            app.state.services = build_services(settings)

        scheduler = app.state.services.scheduler
        if start_scheduler and scheduler is not None and app.state.services.settings.NOTIFICATIONS_ENABLED:
            scheduler.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        """Stop background work on shutdown"""
        logger.info("🔄 Shutting down gracefully...")
        if app.state.services is not None and app.state.services.scheduler is not None:
            await app.state.services.scheduler.stop()

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        body = {"error": exc.message}
        details = getattr(exc, "details", None)
        if details is not None:
            body["details"] = details
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_errors(exc)},
        )

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {APP_SETTINGS.APP_NAME}"}

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(weather.router, prefix="/weather", tags=["Weather"])
    app.include_router(sms.router, prefix="/sms", tags=["SMS"])
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


app = create_app()


def main():
    import uvicorn

    uvicorn.run(
        "skybrief.main:app",
        host="0.0.0.0",
        port=settings.APP_PORT,
        reload=settings.APP_ENV == "development"
    )


if __name__ == "__main__":
    main()
