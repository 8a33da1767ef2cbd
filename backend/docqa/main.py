from __future__ import annotations
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docqa.db.config import get_settings

# ============================================================
# 🪵 Logging Setup
# ============================================================
settings = get_settings()
logging.basicConfig(
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
logger = logging.getLogger("docqa.app")

# ============================================================
# 📦 Core Imports (Dependency Injection)
# ============================================================
from docqa.container import build_container

# ============================================================
# 🌐 Routers
# ============================================================
from docqa.router.health import router as health_router
from docqa.router.answer import router as answer_router
from docqa.router.qa_repository import router as qa_router

startup_time = time.time()


# ============================================================
# 🚀 Startup / Shutdown Lifecycle
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Initializing Trial Document Q&A API...")
    try:
        app.state.container = build_container(settings)
    except Exception as e:
        logger.error(f"❌ Container init failed: {e}", exc_info=True)
        raise
    logger.info("🎯 API is ready and accepting requests")

    try:
        yield
    finally:
        await app.state.container.aclose()
        logger.info("🧹 Application shutdown complete")


# ============================================================
# 🌍 FastAPI App Definition
# ============================================================
app = FastAPI(
    title="Trial Document Q&A API",
    description="Answers questions about trial PDFs with page-level, verifiable citations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(answer_router)
app.include_router(qa_router)


# ============================================================
# 🏠 Root Endpoint
# ============================================================
@app.get("/")
def root():
    return {
        "app": "Trial Document Q&A API",
        "version": "1.0.0",
        "uptime_seconds": time.time() - startup_time,
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "status": "/status",
            "answer": "/answer",
            "extract_sources": "/sources/extract",
            "probe": "/documents/probe",
            "qa": "/qa",
        },
    }


# ============================================================
# 🏁 Entrypoint
# ============================================================
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Trial Document Q&A API on port 8080...")
    uvicorn.run("docqa.main:app", host="0.0.0.0", port=8080, reload=False, log_config=None)
