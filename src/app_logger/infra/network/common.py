from __future__ import annotations

from typing import Dict, Mapping, Optional

from app_logger.domain.constants import SUCCESS_STATUS_CODES, USER_AGENT


def is_success_status(status_code: int) -> bool:
    """Collectors acknowledge a batch with 200 or 201 only."""
    return status_code in SUCCESS_STATUS_CODES


def build_headers(
        extra: Optional[Mapping[str, str]] = None,
        content_type: Optional[str] = None,
) -> Dict[str, str]:
    """Merge caller headers over the defaults sent with every request."""
    headers = {"User-Agent": USER_AGENT}
    if content_type:
        headers["Content-Type"] = content_type
    if extra:
        headers.update(extra)
    return headers
