from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

import requests

from app_logger.infra.network.common import build_headers

logger = logging.getLogger(__name__)


def post_json(
        url: str,
        payload: Any,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 10,
) -> requests.Response:
    """
    Send a JSON document with a POST request.

    Raises:
        requests.exceptions.RequestException: On transport failure or timeout.
    """
    logger.debug(f"POST {url} (json, timeout={timeout}s)")
    return requests.post(
        url,
        json=payload,
        headers=build_headers(headers, content_type="application/json"),
        timeout=timeout,
    )


def post_multipart(
        url: str,
        file_field: str,
        file_path: str,
        fields: Mapping[str, str],
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30,
) -> requests.Response:
    """
    Upload one file plus text fields as multipart/form-data.

    The Content-Type header is left to requests so the boundary is set.

    Raises:
        requests.exceptions.RequestException: On transport failure or timeout.
        OSError: If the file cannot be opened.
    """
    merged = {k: v for k, v in build_headers(headers).items() if k.lower() != "content-type"}
    file_name = os.path.basename(file_path)
    logger.debug(f"POST {url} (multipart '{file_name}', timeout={timeout}s)")

    with open(file_path, "rb") as fh:
        return requests.post(
            url,
            data=dict(fields),
            files={file_field: (file_name, fh, "application/octet-stream")},
            headers=merged,
            timeout=timeout,
        )
