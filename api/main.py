# api/main.py
from dotenv import load_dotenv
import os

env = os.getenv("APP_ENV", "local")
if env == "local":
    load_dotenv(".env.local")
else:
    load_dotenv(".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from database.db import init_db
from fastapi.middleware.cors import CORSMiddleware

from api.routers import (
    health,
    personalized_papers,
    papers,
    syllabus,
    survey,
    persona,
    interview_bot,
    chatbot,
    square,
    persona_interactions,
    student_projects,
)
from services.errors import CourseAppError
from services.llm_service import LLMGenerationError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
logger.info(f"🔧 Loaded environment: {env}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting Course Companion backend, initializing DB")
    try:
        init_db()
    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {e}", exc_info=True)
        raise
    yield
    logger.info("🛑 Shutting down Course Companion backend")


app = FastAPI(
    title="Course Companion API",
    version="1.0.0",
    description="Backend API for the course web app: profiles, The Square and personalized readings.",
    lifespan=lifespan
)

# CORS Configuration
origins = []
if env == "local":
    origins = ["http://localhost:3000", "http://localhost:5173"]  # Common dev ports
else:
    origins_str = os.getenv("ALLOWED_ORIGINS", "")
    origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CourseAppError)
async def course_error_handler(request: Request, exc: CourseAppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(LLMGenerationError)
async def llm_error_handler(request: Request, exc: LLMGenerationError):
    logger.error(f"{request.method} {request.url.path}: LLM call failed: {exc}")
    return JSONResponse(status_code=502, content={"error": "AI service unavailable"})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected payload for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request payload"})


app.include_router(health.router)
app.include_router(personalized_papers.router, prefix="/personalized-papers", tags=["Personalized Papers"])
app.include_router(papers.router, tags=["Papers"])
app.include_router(syllabus.router, prefix="/syllabus", tags=["Syllabus"])
app.include_router(survey.router, prefix="/survey", tags=["Survey"])
app.include_router(persona.router, tags=["Persona"])
app.include_router(interview_bot.router, prefix="/interview-bot", tags=["Interview Bot"])
app.include_router(chatbot.router, prefix="/chatbot", tags=["Chatbot"])
app.include_router(square.router, prefix="/square", tags=["The Square"])
app.include_router(persona_interactions.router, tags=["Persona Interactions"])
app.include_router(student_projects.router, prefix="/student-projects", tags=["Student Projects"])


@app.get("/")
async def root():
    return {"message": "Course Companion Backend Running Successfully 🚀"}
