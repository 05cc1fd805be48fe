# quiz_engine/config.py
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Minimum resolved matchups before a user's ratings are used for
# population-wide event predictions.
QUALIFIED_MIN_MATCHUPS = int(os.getenv("QUALIFIED_MIN_MATCHUPS", "10"))
