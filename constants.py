import os

from dotenv import find_dotenv, load_dotenv

# .env in the working directory; real environment variables win
load_dotenv(find_dotenv(usecwd=True))


def parse_origins(raw: str):
    """Split a comma separated origin list. No usable entry means allow all."""
    origins = [origin.strip() for origin in (raw or "").split(",")]
    origins = [origin for origin in origins if origin]
    return origins if origins else ["*"]


HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3001))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

ALLOWED_ORIGINS = parse_origins(os.getenv("ORIGIN", ""))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)
