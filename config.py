"""
Configuration for the scheduling service.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# =============================
# Server Configuration
# =============================
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))

# Comma separated, "*" allows every origin
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# =============================
# Database Configuration
# =============================
# Required at startup, see database.build_engine
DATABASE_URL = os.environ.get("DATABASE_URL")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# =============================
# Scheduling Constants
# =============================
SLOT_MINUTES = 30
PATIENT_ROLE = "patient"
