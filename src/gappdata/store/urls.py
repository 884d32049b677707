"""Drive v3 endpoints and request URL construction."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlencode

API_BASE = "https://www.googleapis.com/drive/v3"
FILES_URL = f"{API_BASE}/files"

# Content updates must go through the upload endpoint
UPLOAD_FILES_URL = "https://www.googleapis.com/upload/drive/v3/files"


def build_url(
    base_url: str,
    file_id: str | None = None,
    params: Mapping[str, str] | None = None,
) -> str:
    """Build a request URL.

    Args:
        base_url: Endpoint to start from.
        file_id: Appended as a path segment when given.
        params: Encoded as the query string when given.

    Returns:
        ``base_url[/file_id][?params]``
    """
    url = base_url
    if file_id:
        url = f"{url}/{file_id}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url
