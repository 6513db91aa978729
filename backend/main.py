import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from escalator.api.v1 import filters, mail, records, uploads
from escalator.core.config import settings
from escalator.database import Base, engine
from escalator.exceptions.base import AppException
import escalator.models  # noqa: F401  registers tables on Base


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
    yield


app = FastAPI(
    title = "TAT Escalator",
    description= "Escalation tracking API for records past their turnaround time",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins= settings.CORS_ORIGINS,
    allow_credentials = True,
    allow_methods = ["*"],
    allow_headers = ["*"],
)

app.include_router(filters.router, prefix="/api/v1")
app.include_router(uploads.router, prefix="/api/v1")
app.include_router(records.router, prefix="/api/v1")
app.include_router(mail.router, prefix="/api/v1")

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    content = {"detail": exc.detail}
    if exc.reason:
        content["reason"] = exc.reason
    return JSONResponse(
        status_code=exc.status_code,
        content=content
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())}
    )

@app.get("/")
def root():
    return {"message": "TAT Escalator API"}
