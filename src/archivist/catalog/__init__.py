"""Archive catalog models, image-list helpers and browse search."""

from .errors import CatalogError, InvalidObjectError, ObjectNotFoundError
from .images import add_image, normalize_primary, remove_image, set_primary, strip_local_images
from .models import ArchiveImage, ArchiveObject, ImageState, generate_object_id, parse_json_list
from .samples import load_sample_objects
from .search import facet_values, filter_objects, related_objects
from .validation import validate_object

__all__ = [
    "ArchiveImage",
    "ArchiveObject",
    "CatalogError",
    "ImageState",
    "InvalidObjectError",
    "ObjectNotFoundError",
    "add_image",
    "facet_values",
    "filter_objects",
    "generate_object_id",
    "load_sample_objects",
    "normalize_primary",
    "parse_json_list",
    "related_objects",
    "remove_image",
    "set_primary",
    "strip_local_images",
    "validate_object",
]
