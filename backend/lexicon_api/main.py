import logging

from fastapi import FastAPI

from .db import Base, engine
from .errors import register_exception_handlers
from .ratelimit import init_rate_limiter
from .scheduler import job_runner
from .settings import settings
from .routers import admin
from .routers import auth
from .routers import content
from .routers import daily
from .routers import progress
from .routers import quiz
from .routers import words

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ENDPOINTS = [
	"/words",
	"/quiz",
	"/daily",
	"/stories",
	"/grammar",
	"/pronunciation",
	"/idioms",
	"/progress",
	"/auth/register",
	"/auth/login",
]

app = FastAPI(title="Lexicon API", version="2.0.0")
register_exception_handlers(app)
init_rate_limiter(app)
app.include_router(auth.router)
app.include_router(words.router)
app.include_router(quiz.router)
app.include_router(daily.router)
app.include_router(content.router)
app.include_router(progress.router)
app.include_router(admin.router)


@app.get("/", include_in_schema=False)
def root():
	return {"message": "Lexicon English Learning API", "version": app.version, "endpoints": ENDPOINTS}

@app.get("/info")
def info():
	return {"status": "ok", "completion_configured": bool(settings.groq_api_key), "jobs": job_runner.states()}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	if settings.scheduler_enabled:
		job_runner.start()
	else:
		logger.info("Scheduler disabled")

@app.on_event("shutdown")
async def shutdown_event():
	await job_runner.stop()
