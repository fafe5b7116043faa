# backend/utils/cloudinary.py
import hashlib
import logging
import os
import shutil
import time
import uuid
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import httpx
from fastapi import UploadFile

from config import settings

logger = logging.getLogger(__name__)


def sign_params(params: dict, api_secret: str) -> str:
    # Cloudinary signature: sha1 of the sorted "key=value" pairs joined with "&", secret appended
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


def stage_upload(file: UploadFile, temp_dir: Optional[str] = None) -> Path:
    """Copy an incoming multipart file to the temp directory and return its path."""
    target_dir = Path(temp_dir or settings.UPLOAD_TEMP_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(file.filename or "").suffix.lower()
    local_path = target_dir / f"{uuid.uuid4().hex}{suffix}"
    with local_path.open("wb") as buffer:
        shutil.copyfileobj(file.file, buffer)
    return local_path


class MediaClient:
    def __init__(self):
        self.api_url = settings.CLOUDINARY_API_URL
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME
        self.api_key = settings.CLOUDINARY_API_KEY
        self.api_secret = settings.CLOUDINARY_API_SECRET

    @property
    def upload_url(self) -> str:
        return urljoin(self.api_url, f"/v1_1/{self.cloud_name}/image/upload")

    async def upload_image(self, local_path: Path, folder: Optional[str] = None) -> dict:
        """Upload a staged file to Cloudinary and always remove the local copy.

        Returns the Cloudinary JSON response (``url``, ``secure_url``,
        ``public_id``...). Transport and HTTP errors are logged and re-raised.
        """
        params = {"timestamp": int(time.time()), "folder": folder}
        data = {k: v for k, v in params.items() if v not in (None, "")}
        data["signature"] = sign_params(params, self.api_secret)
        data["api_key"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                with open(local_path, "rb") as fh:
                    response = await client.post(
                        self.upload_url,
                        data=data,
                        files={"file": (os.path.basename(local_path), fh)},
                    )
                response.raise_for_status()
                return response.json()
        except (httpx.RequestError, httpx.HTTPStatusError) as e:
            try:
                resp_text = e.response.text if isinstance(e, httpx.HTTPStatusError) else str(e)
            except Exception:
                resp_text = str(e)
            logger.error(f"Cloudinary upload error: {resp_text}")
            raise
        finally:
            try:
                os.remove(local_path)
            except FileNotFoundError:
                pass


media_client = MediaClient()
