"""
Application settings, read from the environment.

main.py calls load_dotenv() before importing this module, so values from a
local .env file are visible here. Example .env:
  LOG_LEVEL=DEBUG
  ALLOWED_ORIGINS=http://localhost:3000,http://localhost:5173
  BUCKET_INTERVAL_MINUTES=5
"""

import os

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 50 * 1024 * 1024))

# Overrides bucketConfig.intervalMinutes of the startup config when set
_bucket_interval = os.environ.get("BUCKET_INTERVAL_MINUTES")
BUCKET_INTERVAL_MINUTES = float(_bucket_interval) if _bucket_interval else None
