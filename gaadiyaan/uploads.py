# gaadiyaan/uploads.py
"""Filesystem store for listing images.

Images are written under the configured upload root and exposed through the
static mount at `url_path`; the public URL is what ends up in a listing's
`images` field.
"""
import os
import random
import time
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional

from .exceptions import ValidationError
from .utils import logger

CHUNK_SIZE = 64 * 1024


class ImageStore:
    def __init__(self, root: str, public_base_url: str, url_path: str = "/uploads/vehicles",
                 max_bytes: int = 5 * 1024 * 1024):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self.url_path = "/" + url_path.strip("/")
        self.max_bytes = max_bytes

    @property
    def url_prefix(self) -> str:
        return f"{self.public_base_url}{self.url_path}/"

    def _unique_name(self, filename: Optional[str]) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"

    def save(self, upload) -> str:
        """Store one uploaded image and return its public URL."""
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed", ["vehicleImages"])
        self.root.mkdir(parents=True, exist_ok=True)
        name = self._unique_name(upload.filename)
        path = self.root / name
        try:
            self._copy(upload.file, path)
        except ValidationError:
            path.unlink(missing_ok=True)
            raise
        return self.url_prefix + name

    def _copy(self, source: BinaryIO, path: Path):
        written = 0
        with open(path, "wb") as fh:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_bytes:
                    raise ValidationError(
                        f"Image exceeds the {self.max_bytes} byte limit", ["vehicleImages"]
                    )
                fh.write(chunk)

    def save_all(self, uploads: Iterable) -> List[str]:
        """Store every upload; if one fails, the ones already stored are removed."""
        urls = []
        try:
            for upload in uploads:
                urls.append(self.save(upload))
        except Exception:
            self.delete(urls)
            raise
        return urls

    def path_for(self, url: str) -> Optional[Path]:
        if not url.startswith(self.url_prefix):
            return None
        name = url[len(self.url_prefix):]
        if not name or "/" in name or name in (".", ".."):
            return None
        return self.root / name

    def delete(self, urls: Iterable[str]):
        """Remove stored images; failures are logged, never raised."""
        for url in urls:
            path = self.path_for(url)
            if path is None:
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Error deleting file %s: %s", path, e)
