"""Image-list helpers that keep exactly one primary image."""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import ArchiveImage, ArchiveObject


def normalize_primary(images: Iterable[ArchiveImage]) -> list[ArchiveImage]:
    """Return images with exactly one primary entry when the list is non-empty.

    The first image already flagged primary keeps the flag; any later flags are
    cleared. When no image is flagged the first one is promoted.
    """
    items = list(images)
    if not items:
        return []
    chosen = next((index for index, image in enumerate(items) if image.is_primary), 0)
    return [
        image
        if image.is_primary == (index == chosen)
        else image.model_copy(update={"is_primary": index == chosen})
        for index, image in enumerate(items)
    ]


def add_image(images: Sequence[ArchiveImage], image: ArchiveImage) -> list[ArchiveImage]:
    """Append ``image``; it becomes primary only when the list was empty."""
    added = image.model_copy(update={"is_primary": not images})
    return normalize_primary([*images, added])


def remove_image(images: Sequence[ArchiveImage], index: int) -> list[ArchiveImage]:
    """Drop the image at ``index`` and promote a new primary if needed.

    Raises:
        IndexError: If ``index`` does not address an image.
    """
    if not 0 <= index < len(images):
        raise IndexError(f"No image at position {index}.")
    return normalize_primary(image for position, image in enumerate(images) if position != index)


def set_primary(images: Sequence[ArchiveImage], index: int) -> list[ArchiveImage]:
    """Make the image at ``index`` the only primary one.

    Raises:
        IndexError: If ``index`` does not address an image.
    """
    if not 0 <= index < len(images):
        raise IndexError(f"No image at position {index}.")
    return [
        image.model_copy(update={"is_primary": position == index})
        for position, image in enumerate(images)
    ]


def strip_local_images(obj: ArchiveObject) -> ArchiveObject:
    """Return a copy of ``obj`` without images that only exist locally."""
    remote = [image for image in obj.images if not image.is_local]
    if len(remote) == len(obj.images):
        return obj
    return obj.model_copy(update={"images": normalize_primary(remote)})


__all__ = [
    "add_image",
    "normalize_primary",
    "remove_image",
    "set_primary",
    "strip_local_images",
]
