"""
Chrome Extension Downloader
Fetches .crx packages from the Chrome Web Store update service
"""

import logging

import requests
from tqdm import tqdm

from .errors import FetchError
from .utils import format_bytes

logger = logging.getLogger(__name__)

DOWNLOAD_URL = "https://clients2.google.com/service/update2/crx"
CHUNK_SIZE = 8192


class ExtensionDownloader:
    """Downloads extension packages into memory, enforcing a size ceiling"""

    def __init__(self, max_bytes=50 * 1024 * 1024, timeout=30, prodversion="120.0",
                 show_progress=False, session=None):
        self.max_bytes = max_bytes
        self.timeout = timeout
        self.prodversion = prodversion
        self.show_progress = show_progress
        self.session = session or requests.Session()

        # User agent to mimic browser
        self.headers = {
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
        }

    def build_params(self, extension_id):
        """Query parameters for the update service redirect"""
        # the update service expects the lower-case form of the ID
        return {
            'response': 'redirect',
            'prodversion': self.prodversion,
            'acceptformat': 'crx2,crx3',
            'x': f'id={extension_id.lower()}&installsource=ondemand&uc',
        }

    def download_extension(self, extension_id):
        """
        Download a Chrome extension package by its ID

        Args:
            extension_id (str): Canonical extension ID

        Returns:
            bytes: Raw CRX package

        Raises:
            FetchError: Transport failure, missing extension, or size ceiling exceeded
        """
        logger.info("Downloading extension %s", extension_id)

        try:
            response = self.session.get(
                DOWNLOAD_URL,
                params=self.build_params(extension_id),
                headers=self.headers,
                stream=True,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Download failed: {e}") from e

        with response:
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as e:
                if response.status_code == 404:
                    raise FetchError(f"Extension {extension_id} not found in store") from e
                raise FetchError(f"Download failed: {e}") from e

            # The store answers unknown IDs with an HTML page
            content_type = response.headers.get('content-type', '')
            if 'text/html' in content_type.lower():
                raise FetchError(f"Extension {extension_id} not found in store")

            declared = response.headers.get('content-length')
            total_size = int(declared) if declared and declared.isdigit() else 0
            if total_size > self.max_bytes:
                raise FetchError(
                    f"Package size {format_bytes(total_size)} exceeds limit of {format_bytes(self.max_bytes)}"
                )

            data = self._read_limited(response, extension_id, total_size)

        logger.info("Downloaded %s (%s)", extension_id, format_bytes(len(data)))
        return data

    def _read_limited(self, response, extension_id, total_size):
        """Read the streamed body, aborting as soon as the ceiling is crossed"""
        buffer = bytearray()
        pbar = None
        if self.show_progress and total_size:
            pbar = tqdm(total=total_size, unit='B', unit_scale=True, desc=extension_id)

        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                buffer.extend(chunk)
                if len(buffer) > self.max_bytes:
                    raise FetchError(
                        f"Package exceeds limit of {format_bytes(self.max_bytes)}"
                    )
                if pbar is not None:
                    pbar.update(len(chunk))
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Download interrupted: {e}") from e
        finally:
            if pbar is not None:
                pbar.close()

        return bytes(buffer)
