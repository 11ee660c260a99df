"""
Progress Analytics — physical assessment analysis for personal trainers.
FastAPI backend entry point.
"""

import logging
import os

from dotenv import load_dotenv

# Load environment before route modules read their settings.
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from core.goals import DEFAULT_GOAL
from core.metrics import TRACKED_METRICS
from routes.analyze import router as analyze_router
from routes.assessments import router as assessments_router
from routes.reports import REPORTS_DIR, router as reports_router

STUDIO_NAME = os.getenv("STUDIO_NAME", "Personal Trainer")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
SERVE_REPORTS = os.getenv("SERVE_REPORTS", "false").strip().lower() in {"1", "true", "yes", "on"}

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title="Progress Analytics API",
    description=(
        "Physical assessment progress analytics — trends, projections and "
        "insights computed deterministically from assessment history."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Optional static file serving. Disabled by default; reports hold health data.
if SERVE_REPORTS:
    app.mount("/reports", StaticFiles(directory=str(REPORTS_DIR)), name="reports")

# Register route modules
app.include_router(assessments_router, prefix="/api", tags=["Assessments"])
app.include_router(analyze_router, prefix="/api/analysis", tags=["Analysis"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "studio_name": STUDIO_NAME,
    }


@app.get("/api/config")
async def get_config():
    """Return server configuration to the frontend."""
    return {
        "studio_name": STUDIO_NAME,
        "default_goal": DEFAULT_GOAL,
        "tracked_metrics": [m.value for m in TRACKED_METRICS],
    }
