"""
Extension identifier resolution
Turns a Chrome Web Store detail URL or a bare extension ID into a canonical ID
"""

import re

from .errors import InvalidInputError

# Store hosts we are willing to resolve detail URLs for
ALLOWED_HOSTS = (
    "chrome.google.com",
    "chromewebstore.google.com",
)

DETAIL_URL_PATTERN = re.compile(
    r'^https?://([^/?#]+)(?:/webstore)?/detail/[a-zA-Z0-9\-_]+/([a-zA-Z0-9]+)/?(?:[?#].*)?$'
)
BARE_ID_PATTERN = re.compile(r'^[a-zA-Z0-9]+$')


def get_extension_id(url_or_id):
    """
    Resolve a store URL or bare ID to a canonical extension ID

    Args:
        url_or_id (str): Detail page URL or the extension ID itself

    Returns:
        str: Extension ID as written in the input, surrounding whitespace removed

    Raises:
        InvalidInputError: Neither pattern matches, or the URL host is not allowed
    """
    if not isinstance(url_or_id, str):
        raise InvalidInputError("Invalid or disallowed extension URL")

    candidate = url_or_id.strip()

    url_match = DETAIL_URL_PATTERN.match(candidate)
    if url_match and url_match.group(1).lower() in ALLOWED_HOSTS:
        return url_match.group(2)

    if BARE_ID_PATTERN.match(candidate):
        return candidate

    raise InvalidInputError("Invalid or disallowed extension URL")
