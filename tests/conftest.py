"""
Shared fixtures: in-memory CRX packages and fake external scanners
"""

import io
import json
import zipfile

import pytest

from extension_risk.config import Settings
from extension_risk.external_tools import StaticLinter, VulnerabilityScanner, summarize_lint_results


def build_zip(files):
    """ZIP archive bytes from a {name: text} mapping"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def build_corrupt_deflate_zip(name="background.js"):
    """ZIP whose single deflated member has an invalid block type"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(name, "chrome.runtime.sendMessage({}); " * 50)
    data = bytearray(buffer.getvalue())
    # local file header is 30 bytes + file name, no extra field from writestr
    data[30 + len(name)] = 0xFF
    return bytes(data)


def build_crx(payload, version=3, key=b'', signature=b'', header=b''):
    """Wrap a payload in a CRX2 or CRX3 header"""
    magic = b'Cr24'
    if version == 2:
        return (magic + (2).to_bytes(4, 'little')
                + len(key).to_bytes(4, 'little') + len(signature).to_bytes(4, 'little')
                + key + signature + payload)
    return (magic + version.to_bytes(4, 'little')
            + len(header).to_bytes(4, 'little') + header + payload)


class FakeScanner(VulnerabilityScanner):
    def __init__(self, data=None, error=None):
        self.data = data or []
        self.error = error
        self.directories = []

    async def scan(self, directory):
        self.directories.append(directory)
        if self.error:
            raise self.error
        return self.data


class FakeLinter(StaticLinter):
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error

    async def lint(self, directory):
        if self.error:
            raise self.error
        return summarize_lint_results(self.results)


class FakeDownloader:
    def __init__(self, data=b'', error=None):
        self.data = data
        self.error = error
        self.requested = []

    def download_extension(self, extension_id):
        self.requested.append(extension_id)
        if self.error:
            raise self.error
        return self.data


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def sample_manifest():
    return {
        "name": "Sample Extension",
        "version": "1.2.3",
        "description": "Does sample things",
        "manifest_version": 2,
        "permissions": ["tabs", "debugger", "alarms"],
        "content_security_policy": "script-src 'self' example.com; object-src 'none'",
        "background": {"scripts": ["bg.js"]},
        "content_scripts": [{"matches": ["https://*.example.com/*"], "js": ["content.js"]}],
    }


@pytest.fixture
def sample_files():
    return {
        "bg.js": "chrome.tabs.query({}, cb); chrome.tabs.query({}); fetch('https://example.com');",
        "content.js": "localStorage.setItem('a', 1); document.cookie;",
        "lib/vendor.js": "var x = 1;",
    }


@pytest.fixture
def sample_crx(sample_manifest, sample_files):
    files = {"manifest.json": json.dumps(sample_manifest)}
    files.update(sample_files)
    return build_crx(build_zip(files), version=3, header=b'\x00' * 10)
