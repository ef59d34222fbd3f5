"""Image ingestion: decoding, budget-bounded encoding and upload."""

from .encoding import EncodedImage, encode_jpeg, parse_data_uri, scale_to_fit, shrink_to_budget
from .errors import ImageDecodeError
from .pipeline import ImagePipeline, is_heif

__all__ = [
    "EncodedImage",
    "ImageDecodeError",
    "ImagePipeline",
    "encode_jpeg",
    "is_heif",
    "parse_data_uri",
    "scale_to_fit",
    "shrink_to_budget",
]
