import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.api_v1.api import api_router
from app.core.config import settings
from app.core.exceptions import AppException, app_exception_handler
from app.initialization import ApplicationInitializer
from settings import APIConfig

# Initialize logger for uvicorn
uvicorn_logger = logging.getLogger("uvicorn")
uvicorn_logger.setLevel(settings.LOG_LEVEL)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""

    initializer = ApplicationInitializer()

    try:
        uvicorn_logger.info("🚀 Starting Form Master Pro API initialization...")

        # Step 1: Own tables
        db_status = initializer.initialize_database()
        if not db_status["database_ready"]:
            uvicorn_logger.warning("⚠️ Database initialization incomplete")

        # Step 2: Legacy student_id schema
        app.state.legacy_schema_report = initializer.check_legacy_schema()

        # Step 3: Discovery services and monitor
        initializer.build_services(app.state)

        app.state.initializer = initializer
        uvicorn_logger.info("🎉 Form Master Pro API initialization completed! 🚀")

        yield

    except Exception as e:
        uvicorn_logger.error(f"🔥 Startup error: {e}")
        raise

# FastAPI app setup
app = FastAPI(
    title=APIConfig.TITLE,
    description="Field discovery, form templates and form/data compatibility checks over a live relational schema",
    version=APIConfig.VERSION,
    lifespan=lifespan
)

app.add_exception_handler(AppException, app_exception_handler)

# CORS Middleware Setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API Router Setup
app.include_router(api_router, prefix=APIConfig.PREFIX)

@app.get("/")
def read_root():
    """Root endpoint with API information."""
    return {
        "message": "Form Master Pro API is running!",
        "version": APIConfig.VERSION,
        "features": [
            "Dynamic field discovery",
            "Field categorization and search",
            "Field drift checks",
            "Form templates",
            "Form/client compatibility",
            "Role-based permission checks",
            "Performance metrics",
        ],
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health")
def health_check():
    """Health check endpoint with component status."""
    try:
        initializer = getattr(app.state, "initializer", None) or ApplicationInitializer()
        summary = initializer.get_initialization_summary(app.state)
        return {
            "status": "healthy",
            "version": APIConfig.VERSION,
            "components": summary,
        }
    except Exception as e:
        uvicorn_logger.error(f"❌ Health check failed: {e}")
        return {
            "status": "error",
            "error": str(e),
            "version": APIConfig.VERSION
        }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
