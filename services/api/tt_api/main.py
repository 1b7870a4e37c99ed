from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tt_core.db import init_db

from .core.config import get_settings
from .routers import admin, records


def create_app() -> FastAPI:
    init_db()
    settings = get_settings()
    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )
    app.include_router(admin.router)
    app.include_router(records.router)
    return app


app = create_app()
