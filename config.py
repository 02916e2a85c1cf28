import os

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "medtrack")

PORT = int(os.getenv("PORT", 8000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Dose logs older than this are not loaded for the dashboard or analytics
ANALYTICS_WINDOW_DAYS = int(os.getenv("ANALYTICS_WINDOW_DAYS", 90))
UPCOMING_LIMIT = int(os.getenv("UPCOMING_LIMIT", 3))
RECENT_LOGS_LIMIT = int(os.getenv("RECENT_LOGS_LIMIT", 10))
