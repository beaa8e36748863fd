"""
colorlab — Graph Coloring Playground Backend
============================================

FastAPI entry point.
Start with:  uvicorn main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from colorlab.api.routes import router
from colorlab.config import get_settings

settings = get_settings()

# ── Logging ────────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

for problem in settings.validate():
    logger.warning("Configuration: %s", problem)

# ── App ────────────────────────────────────────────────────────────
app = FastAPI(
    title="colorlab",
    description=(
        "Interactive graph coloring backend.  Runs Las Vegas, Monte Carlo "
        "and local-search colorings, streams their progress, analyses manual "
        "recolors and lays out graphs."
    ),
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount all routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": "colorlab",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)
