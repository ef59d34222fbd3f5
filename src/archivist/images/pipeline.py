"""Turn user-selected image files into catalog images."""

from __future__ import annotations

import io
import logging
from pathlib import PurePath
from typing import Callable, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from archivist.catalog.models import ArchiveImage, ImageState
from archivist.config.models import ImageSettings
from archivist.remote.client import RemoteStore
from archivist.remote.errors import RemoteStoreError

from .encoding import JPEG_MIME, EncodedImage, encode_jpeg, scale_to_fit, shrink_to_budget
from .errors import ImageDecodeError

LOGGER = logging.getLogger(__name__)

HEIF_SUFFIXES = {".heic", ".heif"}
HEIF_MIME_TYPES = {"image/heic", "image/heif", "image/heic-sequence", "image/heif-sequence"}

FormatConverter = Callable[[bytes], bytes]


def is_heif(filename: str, mime_type: Optional[str] = None) -> bool:
    """Return True when the file name or MIME type denotes HEIC/HEIF."""
    if mime_type and mime_type.lower() in HEIF_MIME_TYPES:
        return True
    return PurePath(filename).suffix.lower() in HEIF_SUFFIXES


class ImagePipeline:
    """Decode, resize, budget-encode and optionally upload an image file.

    Args:
        settings: Size and quality limits.
        remote: Remote store used for uploads; ``None`` keeps every image local.
        converter: Callable turning HEIC/HEIF bytes into a format Pillow reads.
    """

    def __init__(
        self,
        settings: ImageSettings,
        *,
        remote: Optional[RemoteStore] = None,
        converter: Optional[FormatConverter] = None,
    ) -> None:
        self._settings = settings
        self._remote = remote
        self._converter = converter

    def decode(self, data: bytes, filename: str, mime_type: Optional[str] = None) -> Image.Image:
        """Decode ``data`` into an upright RGB bitmap.

        Raises:
            ImageDecodeError: If the input is empty, HEIF without a converter, or unreadable.
        """
        if not data:
            raise ImageDecodeError(f"{filename}: file is empty.")

        if is_heif(filename, mime_type):
            if self._converter is None:
                raise ImageDecodeError(f"{filename}: HEIC/HEIF images need a format converter.")
            try:
                data = self._converter(data)
            except Exception as exc:
                raise ImageDecodeError(f"{filename}: HEIC/HEIF conversion failed: {exc}") from exc

        try:
            with Image.open(io.BytesIO(data)) as opened:
                opened.load()
                bitmap = ImageOps.exif_transpose(opened) or opened
                return _flatten(bitmap)
        except Image.DecompressionBombError as exc:
            raise ImageDecodeError(f"{filename}: image is too large to decode: {exc}") from exc
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageDecodeError(f"{filename}: unable to decode image: {exc}") from exc

    def encode(self, bitmap: Image.Image) -> EncodedImage:
        """Resize to the maximum dimension and encode within the character budget."""
        scaled = scale_to_fit(bitmap, self._settings.max_dimension)
        if self._settings.enforce_budget:
            return shrink_to_budget(scaled, self._settings.max_encoded_chars, self._settings)
        return EncodedImage(
            data=encode_jpeg(scaled, self._settings.initial_quality),
            width=scaled.size[0],
            height=scaled.size[1],
            quality=self._settings.initial_quality,
        )

    def ingest(
        self,
        data: bytes,
        filename: str,
        *,
        caption: str = "",
        mime_type: Optional[str] = None,
    ) -> ArchiveImage:
        """Produce a catalog image from raw file bytes.

        The image is uploaded when the remote store accepts uploads; otherwise,
        or when the upload fails, it is returned as a local data URI.
        """
        encoded = self.encode(self.decode(data, filename, mime_type))
        if not encoded.within_budget:
            LOGGER.warning(
                "%s still exceeds %d characters after %d reductions.",
                filename,
                self._settings.max_encoded_chars,
                encoded.iterations,
            )

        upload_name = f"{PurePath(filename).stem or 'image'}.jpg"
        if self._remote is not None and self._remote.uploads_enabled:
            try:
                result = self._remote.upload_image(
                    filename=upload_name, mime_type=JPEG_MIME, data=encoded.data
                )
            except RemoteStoreError as exc:
                LOGGER.warning("Keeping %s local; upload failed: %s", filename, exc)
            else:
                return ArchiveImage(url=result.url, caption=caption, state=ImageState.REMOTE)

        return ArchiveImage(url=encoded.data_uri, caption=caption, state=ImageState.LOCAL)


def _flatten(bitmap: Image.Image) -> Image.Image:
    if bitmap.mode in ("RGBA", "LA") or (bitmap.mode == "P" and "transparency" in bitmap.info):
        rgba = bitmap.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return bitmap.convert("RGB")


__all__ = ["FormatConverter", "ImagePipeline", "is_heif"]
