# Process-wide settings, read once from the environment (and backend/.env if present)
import os

from dotenv import load_dotenv

load_dotenv()

QUIZ_VERSION = os.getenv("QUIZ_VERSION", "2025.02")     # echoed in every response "meta" block

DATABASE_URL = os.getenv("DATABASE_URL") or "sqlite:///./carnival_quiz.db"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# comma separated; "*" keeps the dev-friendly behaviour of accepting any origin
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

# sessions untouched for this long are dropped (abandoned quizzes)
SESSION_IDLE_TTL_SECONDS = int(os.getenv("SESSION_IDLE_TTL_SECONDS", "3600"))
