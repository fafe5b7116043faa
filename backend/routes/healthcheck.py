# backend/routes/healthcheck.py
from fastapi import APIRouter

from utils.api_response import api_response

router = APIRouter(tags=["Healthcheck"])


@router.get("")
def healthcheck():
    return api_response(200, "OK", "Health check passed")
