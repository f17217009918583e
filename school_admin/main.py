import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from school_admin.core.config import settings
from school_admin.core.context import RequestContextMiddleware
from school_admin.core.errors import register_exception_handlers
from school_admin.core.logger import logger
from school_admin.db.init_db import init_db
from school_admin.routers import academic_sessions, classes, institutes, students, teachers, users


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        init_db()
    logger.info(f"APP STARTED | env={settings.ENV}")
    yield


app = FastAPI(
    title="School Admin Backend",
    version="1.0.0",
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} | status={response.status_code} | {elapsed_ms:.1f}ms"
    )
    return response


# added last so it wraps everything, including the request logger
app.add_middleware(RequestContextMiddleware)

register_exception_handlers(app)

app.include_router(users.router)
app.include_router(institutes.router)
app.include_router(academic_sessions.router)
app.include_router(classes.router)
app.include_router(teachers.router)
app.include_router(students.router)


@app.get("/")
def root():
    return {"service": "school-admin-backend", "status": "running"}


@app.get("/ping")
def ping():
    return {"status": "ok"}
