# backend/main.py
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config import settings
from database import init_db
from utils.api_error import error_response, register_exception_handlers

# Router imports
from routes.healthcheck import router as healthcheck_router
from routes.user import router as user_router
from routes.guard import router as guard_router
from routes.admin import router as admin_router
from routes.logs import router as logs_router
from routes.location import router as location_router
from routes.liveloc import router as liveloc_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialization
init_db()

app = FastAPI(title="Guard Management API", version="1.0.0")

# Static assets, make sure the directories exist before mounting
Path(settings.STATIC_DIR).mkdir(parents=True, exist_ok=True)
Path(settings.UPLOAD_TEMP_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

# CORS with credentials, origins from settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# JSON bodies are small by contract, multipart uploads are not limited here.
# Only a declared Content-Length is checked; chunked bodies pass through unchecked.
@app.middleware("http")
async def limit_json_body(request: Request, call_next):
    content_type = request.headers.get("content-type", "")
    content_length = request.headers.get("content-length")
    if content_type.startswith("application/json") and content_length and content_length.isdigit():
        if int(content_length) > settings.MAX_JSON_BODY_BYTES:
            return error_response(413, "Request body too large")
    return await call_next(request)


register_exception_handlers(app)

# Router registration
API_PREFIX = "/api/v1"
app.include_router(healthcheck_router, prefix=f"{API_PREFIX}/healthcheck")
app.include_router(user_router, prefix=f"{API_PREFIX}/user")
app.include_router(guard_router, prefix=f"{API_PREFIX}/guard")
app.include_router(admin_router, prefix=f"{API_PREFIX}/admin")
app.include_router(logs_router, prefix=f"{API_PREFIX}/admin")
app.include_router(location_router, prefix=f"{API_PREFIX}/location")
app.include_router(liveloc_router, prefix=f"{API_PREFIX}/liveloc")


@app.get("/")
def read_root():
    return {"message": "Guard Management API is running"}
