# ------------------------------
# FastAPI app for the carnival quiz
# Run with: uvicorn carnival_quiz.main:app --reload
# ------------------------------
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carnival_quiz.api import quiz
from carnival_quiz.api.debug import router as debug_router
from carnival_quiz.core import config
from carnival_quiz.core.logging_setup import configure_logging
from carnival_quiz.db.session import init_db

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info("carnival quiz %s ready (database: %s)", config.QUIZ_VERSION, config.DATABASE_URL.split(":", 1)[0])
    yield


app = FastAPI(
    title="Carnival Quiz API",
    version=config.QUIZ_VERSION,
    lifespan=lifespan,
)

# The quiz front end is served separately and calls this API from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/")
def root():
    return {"message": "API is running. Go to /docs for Swagger UI."}


app.include_router(quiz.router, prefix="/api")
app.include_router(debug_router)
