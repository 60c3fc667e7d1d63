import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

SERVICE_NAME = os.getenv("SERVICE_NAME", "room-signaling-server")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Liveness (seconds)
HEARTBEAT_TIMEOUT = float(os.getenv("HEARTBEAT_TIMEOUT", 30))
CLEANUP_INTERVAL = float(os.getenv("CLEANUP_INTERVAL", 10))

# Upper bound on a single subscriber send during fan-out (seconds)
BROADCAST_SEND_TIMEOUT = float(os.getenv("BROADCAST_SEND_TIMEOUT", 5))

# Room defaults
DEFAULT_MAX_PLAYERS = 4
DEFAULT_PLAYERS = 1
DEFAULT_MODE = "P2P"
