"""docnav utility modules."""

from docnav.utils.pub_utils import (
    compute_out_path,
    compute_published_url,
    compute_version_segment,
    is_hidden,
    is_publishable_family,
)
from docnav.utils.url_utils import (
    is_indexified,
    is_url,
    relativize,
    strip_hash,
)

__all__ = [
    "compute_out_path",
    "compute_published_url",
    "compute_version_segment",
    "is_hidden",
    "is_publishable_family",
    "is_indexified",
    "is_url",
    "relativize",
    "strip_hash",
]
