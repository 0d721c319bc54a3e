from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    # "sqlite://" is SQLAlchemy's in-memory SQLite database
    CDM_DATABASE_URL: str = os.getenv("CDM_DATABASE_URL", "sqlite://")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    REFERENCE_YEAR: int = int(os.getenv("REFERENCE_YEAR", "2024"))
    MAX_API_PATIENTS: int = int(os.getenv("MAX_API_PATIENTS", "100000"))
    # Per table, for visit/condition/drug rows derived from the multipliers
    MAX_API_ROWS: int = int(os.getenv("MAX_API_ROWS", "1000000"))
    # Local cache handed to external dataset providers; None lets them choose
    EUNOMIA_DATA_FOLDER: str | None = os.getenv("EUNOMIA_DATA_FOLDER")


settings = Settings()
