"""Upload collaborators: turn a file into a URL the editor can store."""

import logging
import mimetypes
from abc import ABC, abstractmethod
from typing import Optional

import requests

from ..errors import UploadError

logger = logging.getLogger(__name__)


class Uploader(ABC):
    """Stores a binary file and returns its public URL."""

    @abstractmethod
    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Upload the file and return its URL; raise UploadError on failure."""


class RestUploader(Uploader):
    """Multipart upload to an HTTP endpoint that answers ``{"url": ...}``."""

    def __init__(self, upload_url: str, api_key: Optional[str] = None, timeout: int = 30):
        self.upload_url = upload_url
        self.timeout = timeout
        self.headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        try:
            response = requests.post(
                self.upload_url,
                files={"file": (filename, data, content_type)},
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            url = response.json().get("url")
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Upload failed for {filename}: {e}")
            raise UploadError(f"Upload failed for {filename}: {e}") from e

        if not url:
            raise UploadError(f"Upload of {filename} returned no URL")
        logger.info(f"Uploaded {filename} -> {url}")
        return url
