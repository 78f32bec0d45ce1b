"""
HTTP helpers shared across pipelines
"""

from typing import Optional

import requests


USER_AGENT = "school-meal-viewer/0.1"


def fetch_text(url: str, timeout: Optional[float] = None) -> str:
    """
    Fetch a URL and return the decoded response body

    Args:
        url: URL to fetch
        timeout: Seconds to wait for the server (None waits indefinitely)

    Returns:
        Response body as text

    Raises:
        requests.RequestException: On network failure or a non-2xx status
    """
    response = requests.get(url, timeout=timeout, headers={'User-Agent': USER_AGENT})
    response.raise_for_status()

    # The proxy does not always declare a charset; NEIS payloads are UTF-8
    if not response.encoding or response.encoding.lower() == 'iso-8859-1':
        response.encoding = 'utf-8'

    return response.text
