"""kevimage — URL-addressed image compression cache."""

from kevimage.core import Kevimage, compress_url
from kevimage.types import Artifact, CacheStatus, ImageRecord

__version__ = "0.1.0"

__all__ = ["Artifact", "CacheStatus", "ImageRecord", "Kevimage", "compress_url", "__version__"]
