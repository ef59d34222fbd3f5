"""Configuration models describing Archivist settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ArchivistBaseModel(BaseModel):
    """Shared configuration for Archivist settings models."""

    model_config = ConfigDict(extra="forbid")


class RemoteSettings(ArchivistBaseModel):
    """Options for the spreadsheet-backed remote endpoint.

    Attributes:
        endpoint_url: Web app URL of the scripting endpoint. ``None`` leaves the
            remote store unconfigured and every operation falls back locally.
        timeout_seconds: Timeout applied to each HTTP request.
        upload_images: Whether images are uploaded through the ``uploadImage`` action.
        batch_upload_on_save: Whether pending local images are uploaded when an
            object is saved.
        sheet_path: Optional JSON sheet file served in-process when no
            endpoint URL is set.
    """

    endpoint_url: Optional[str] = None
    sheet_path: Optional[str] = None
    timeout_seconds: float = 15.0
    upload_images: bool = False
    batch_upload_on_save: bool = False


class StorageSettings(ArchivistBaseModel):
    """Local persistence options.

    Attributes:
        data_dir: Directory holding the local key/value documents.
        store_full_images_remotely: When True, embedded image payloads are sent to
            the remote store and kept in the local cache instead of being withheld.
        cache_ttl_seconds: Age after which the object cache is considered stale.
        objects_key: Storage key for the object-list cache.
        local_images_key: Storage key for the pending local image map.
    """

    data_dir: str = "~/.archivist"
    store_full_images_remotely: bool = False
    cache_ttl_seconds: int = 300
    objects_key: str = "archive-objects-cache"
    local_images_key: str = "archive-local-images"


class ImageSettings(ArchivistBaseModel):
    """Image ingestion limits.

    Attributes:
        max_dimension: Largest width or height after the initial resize.
        initial_quality: JPEG quality used for the first encode.
        min_quality: Lowest JPEG quality reached before shrinking pixels.
        quality_step: Amount subtracted from the quality on each reduction.
        min_dimension: Smallest width or height reached while shrinking.
        shrink_factor: Multiplier applied to the dimensions on each shrink.
        max_encoded_chars: Character budget for an encoded data URI.
        max_iterations: Upper bound on re-encodes while fitting the budget.
        enforce_budget: Whether the character budget is enforced at all.
    """

    max_dimension: int = Field(default=800, gt=0)
    initial_quality: float = Field(default=0.82, gt=0, le=1)
    min_quality: float = Field(default=0.5, gt=0, le=1)
    quality_step: float = Field(default=0.08, gt=0)
    min_dimension: int = Field(default=240, gt=0)
    shrink_factor: float = Field(default=0.8, gt=0, lt=1)
    max_encoded_chars: int = Field(default=42_000, gt=0)
    max_iterations: int = Field(default=30, ge=0)
    enforce_budget: bool = True


class LoggingSettings(ArchivistBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(ArchivistBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class ArchivistConfig(ArchivistBaseModel):
    """Top-level configuration struct for Archivist.

    Attributes:
        remote: Remote endpoint settings.
        storage: Local cache settings.
        images: Image ingestion settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    images: ImageSettings = Field(default_factory=ImageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "ArchivistBaseModel",
    "RemoteSettings",
    "StorageSettings",
    "ImageSettings",
    "LoggingSettings",
    "CLIOptions",
    "ArchivistConfig",
]
