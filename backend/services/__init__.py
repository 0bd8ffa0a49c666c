"""Business logic services."""

from .errors import (
    DuplicateConstraint,
    Forbidden,
    InvalidOperation,
    NotFound,
    ServiceError,
    Unauthorized,
    UpstreamFailure,
)
from .images import (
    JPEG_CONTENT_TYPE,
    MAX_IMAGE_DIMENSION,
    UploadTooLargeError,
    process_image_bytes,
    read_upload_file,
)
from .pagination import (
    DEFAULT_COMMENT_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    Page,
    PageRequest,
)
from .rate_limiter import (
    RateLimitMiddleware,
    RateLimiter,
    get_rate_limiter,
    set_rate_limiter,
)
from .storage import (
    delete_object,
    ensure_bucket,
    get_minio_client,
    upload_object,
)
from .viewer import ANONYMOUS, Anonymous, Identified, Viewer, viewer_id_of

__all__ = [
    "ServiceError",
    "NotFound",
    "Forbidden",
    "InvalidOperation",
    "DuplicateConstraint",
    "Unauthorized",
    "UpstreamFailure",
    "get_minio_client",
    "ensure_bucket",
    "delete_object",
    "upload_object",
    "process_image_bytes",
    "read_upload_file",
    "MAX_IMAGE_DIMENSION",
    "JPEG_CONTENT_TYPE",
    "UploadTooLargeError",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_COMMENT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "Page",
    "PageRequest",
    "RateLimiter",
    "RateLimitMiddleware",
    "get_rate_limiter",
    "set_rate_limiter",
    "ANONYMOUS",
    "Anonymous",
    "Identified",
    "Viewer",
    "viewer_id_of",
]
