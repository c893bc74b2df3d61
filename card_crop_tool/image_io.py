"""
Qt-free image I/O utilities.

Provides helpers to decode a crop source, download remote images into
local blobs, track and release those blobs, and derive output file names.

Remote images are always materialized as local files before the editor
sees them: the editor and the export step only ever read local bytes.
"""

import logging
import re
import shutil
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests
from PIL import Image

from card_crop_tool.config import FETCH_TIMEOUT, OUTPUT_EXTENSIONS
from card_crop_tool.errors import FetchError, LoadError
from card_crop_tool.models import NaturalImage

logger = logging.getLogger(__name__)

# Allow very large images (Pillow's default limit is ~178MP)
Image.MAX_IMAGE_PIXELS = None

_REMOTE_RE = re.compile(r"^https?://", re.IGNORECASE)

_CONTENT_TYPE_SUFFIXES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


@dataclass
class LoadedImage:
    """A decoded source image and its natural size."""
    image: Image.Image
    natural: NaturalImage
    name: str


# =============================================================================
# Blob registry
# =============================================================================
class BlobRegistry:
    """Owns temporary files that stand in for in-memory object references.

    Every ``create`` must be paired with a ``revoke`` (or ``revoke_all`` /
    ``close``); nothing is released implicitly.
    """

    def __init__(self, prefix: str = "card-crop-"):
        self._dir = Path(tempfile.mkdtemp(prefix=prefix))
        self._paths: set[Path] = set()

    @property
    def directory(self) -> Path:
        return self._dir

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path) -> bool:
        return Path(path) in self._paths

    def create(self, data: bytes, suffix: str = "") -> Path:
        """Write *data* to a new blob file and return its path."""
        path = self._dir / f"{uuid.uuid4().hex}{suffix}"
        path.write_bytes(data)
        self._paths.add(path)
        logger.debug("Created blob %s (%d bytes)", path, len(data))
        return path

    def revoke(self, path) -> None:
        """Release one blob.  Unknown or already-revoked paths are ignored."""
        if path is None:
            return
        path = Path(path)
        if path not in self._paths:
            return
        self._paths.discard(path)
        try:
            path.unlink(missing_ok=True)
            logger.debug("Revoked blob %s", path)
        except OSError as exc:
            logger.warning("Failed to remove blob %s: %s", path, exc)

    def revoke_all(self) -> None:
        for path in list(self._paths):
            self.revoke(path)

    def close(self) -> None:
        """Revoke everything and remove the backing directory."""
        self.revoke_all()
        shutil.rmtree(self._dir, ignore_errors=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# =============================================================================
# Loading
# =============================================================================
def is_remote(source) -> bool:
    """True for http(s) URLs, which must be fetched before cropping."""
    return isinstance(source, str) and bool(_REMOTE_RE.match(source))


def source_path(source) -> Path:
    """Turn a path or ``file:`` URL into a local Path."""
    if isinstance(source, Path):
        return source
    if source.lower().startswith("file:"):
        return Path(unquote(urlparse(source).path))
    return Path(source)


def load_source(source) -> LoadedImage:
    """
    Decode a local image and discover its natural size.

    Raises LoadError if the source is remote, missing, or not an image.
    """
    if is_remote(source):
        raise LoadError("Remote images must be downloaded before cropping.")

    path = source_path(source)
    try:
        with Image.open(path) as img:
            img.load()
            decoded = img.copy()
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Could not decode %s: %s", path, exc)
        raise LoadError() from exc

    natural = NaturalImage(decoded.width or 1, decoded.height or 1)
    logger.debug("Loaded %s (%dx%d)", path, natural.w, natural.h)
    return LoadedImage(decoded, natural, path.name)


def fetch_remote(url: str, registry: BlobRegistry, timeout: float = FETCH_TIMEOUT,
                 session: requests.Session | None = None) -> Path:
    """
    Download *url* and store the bytes as a local blob.

    Returns the blob path; the caller owns it and must revoke it through
    *registry*.  Raises FetchError on network failure or a non-2xx status.
    """
    http = session or requests
    try:
        response = http.get(url, headers={"Cache-Control": "no-store"}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Download of %s failed: %s", url, exc)
        raise FetchError() from exc

    data = response.content
    if not data:
        raise FetchError("The image download was empty.")

    content_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
    suffix = _CONTENT_TYPE_SUFFIXES.get(content_type) or Path(urlparse(url).path).suffix.lower()
    logger.info("Fetched %s (%d bytes)", url, len(data))
    return registry.create(data, suffix)


def remote_name(url: str) -> str:
    """Last path segment of a URL, or ``image.jpg`` when there is none."""
    name = Path(unquote(urlparse(url).path)).name
    return name or "image.jpg"


# =============================================================================
# Naming
# =============================================================================
def output_name(original_name: str, output_format: str) -> str:
    """Original stem with the extension of *output_format*. ``photo.png`` → ``photo.jpg``"""
    stem = Path(original_name or "").stem or "image"
    return f"{stem}{OUTPUT_EXTENSIONS[output_format]}"


def unique_path(out_path: Path) -> Path:
    """Return a unique path by appending -01, -02, etc. if file already exists."""
    if not out_path.exists():
        return out_path
    stem = out_path.stem
    suffix = out_path.suffix
    parent = out_path.parent
    counter = 1
    while True:
        candidate = parent / f"{stem}-{counter:02d}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1
