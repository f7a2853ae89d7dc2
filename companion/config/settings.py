"""Environment-driven settings for the companion client."""

import os

# Agent service (channel info, start/stop agent)
AGENT_SERVICE_URL = os.getenv("AGENT_SERVICE_URL", "http://localhost:3000/api/agora").rstrip("/")
AGENT_SERVICE_TIMEOUT = float(os.getenv("AGENT_SERVICE_TIMEOUT", "10.0"))

# Transcript history bounds: evict down to KEEP once MAX is exceeded
TRANSCRIPT_HISTORY_MAX = int(os.getenv("TRANSCRIPT_HISTORY_MAX", "200"))
TRANSCRIPT_HISTORY_KEEP = int(os.getenv("TRANSCRIPT_HISTORY_KEEP", "150"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
