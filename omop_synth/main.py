"""
FastAPI application entrypoint.

Run locally:  uvicorn omop_synth.main:app --reload
"""

import logging

from fastapi import FastAPI

from omop_synth.api.routes import router
from omop_synth.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s"
)

app = FastAPI(
    title="OMOP Synth",
    description=(
        "Synthetic OMOP Common Data Model databases for testing and "
        "demonstration, with summary statistics over the generated tables."
    ),
    version="1.0.0",
)

app.include_router(router, prefix="/api/v1")
