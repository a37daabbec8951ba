from __future__ import annotations

import os
from pathlib import Path

# ---------------- App Info ----------------
APP_NAME = "SalesPro"
APP_VERSION = "1.0"


# ---------------- Paths ----------------
BASE_DIR = Path(__file__).resolve().parent  # .../salespro
PROJECT_DIR = BASE_DIR.parent  # project root

DATA_DIR = Path(os.environ.get("SALESPRO_DATA_DIR", PROJECT_DIR / "data"))
DB_PATH = Path(os.environ.get("SALESPRO_DB_PATH", DATA_DIR / "salespro.db"))

EXPORTS_DIR = Path(os.environ.get("SALESPRO_EXPORTS_DIR", PROJECT_DIR / "exports"))


# ---------------- Logging ----------------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


# ---------------- Geolocation ----------------
# Upper bound for a device position fix before the check-in gives up.
GEOLOCATION_TIMEOUT_SECONDS = float(os.environ.get("SALESPRO_GEO_TIMEOUT", "20"))


# ---------------- Assistant (text completion) ----------------
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
ASSISTANT_MODEL = os.environ.get("SALESPRO_ASSISTANT_MODEL", "gemini-3-flash-preview")
ASSISTANT_API_URL = "https://generativelanguage.googleapis.com/v1beta"
ASSISTANT_TIMEOUT_SECONDS = 30.0
