from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from taskvault.app import App
from taskvault.config import Config
from taskvault.errors import UserError
from taskvault.web.error_handlers import general_exception_handler, request_validation_error_handler, user_error_handler
from taskvault.web.gate import RequestGateMiddleware
from taskvault.web.openapi import set_custom_openapi
from taskvault.web.routers import auth_router, tasks_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="TaskVault API",
        lifespan=lifespan,
    )
    # Store app instance and config in app state
    app.state.app = app_instance
    app.state.config = config

    # The gate must run inside CORS so preflight requests never hit it
    app.add_middleware(
        RequestGateMiddleware,
        verify_token=app_instance.verify_session_token,
        login_path=config.login_path,
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health check endpoint (public)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(tasks_router, prefix="/api")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
