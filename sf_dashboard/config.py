"""
Runtime configuration for the dashboard client.

All values come from environment variables (a local .env is honoured).

    API_BASE_URL                base URL of the REST backend, including /api
    API_TIMEOUT                 per-request timeout in seconds
    NOTIFICATION_POLL_INTERVAL  seconds between notification fetches
    SESSION_FILE                optional JSON file for a durable session
    LOG_LEVEL                   root log level for the Streamlit entry point
"""

import os
from dotenv import load_dotenv

load_dotenv()

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8070/api").rstrip("/")
TIMEOUT = float(os.getenv("API_TIMEOUT", "15"))  # seconds
POLL_INTERVAL = float(os.getenv("NOTIFICATION_POLL_INTERVAL", "30"))  # seconds
SESSION_FILE = os.getenv("SESSION_FILE", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
