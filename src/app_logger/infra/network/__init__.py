from __future__ import annotations

"""
Network Communication Infrastructure.

Thin wrappers over requests used by the remote sink and the log uploader.
"""

from app_logger.infra.network.common import build_headers, is_success_status
from app_logger.infra.network.http_client import post_json, post_multipart

__all__ = [
    "build_headers",
    "is_success_status",
    "post_json",
    "post_multipart",
]
