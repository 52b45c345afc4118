"""
Utility functions for the analyzer
"""

import json
import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


def create_temp_directory(prefix="extension-risk-"):
    """Create a fresh, exclusively owned extraction directory"""
    return Path(tempfile.mkdtemp(prefix=prefix))


def delete_temp_directory(directory):
    """
    Remove an extraction directory and everything in it

    Safe to call more than once, or on a path that was never created.
    """
    if directory is None:
        return
    directory = Path(directory)
    if not directory.exists():
        return
    shutil.rmtree(directory, ignore_errors=True)
    logger.debug("Removed extraction directory %s", directory)


@contextmanager
def extraction_workspace(on_cleanup=None):
    """
    Scoped extraction directory, deleted on every exit path

    Args:
        on_cleanup: Optional callable invoked once after the directory is removed
    """
    directory = create_temp_directory()
    try:
        yield directory
    finally:
        delete_temp_directory(directory)
        if on_cleanup is not None:
            on_cleanup()


def save_json(data, file_path):
    """Save data to JSON file"""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def format_bytes(bytes_size):
    """Format bytes to human readable"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_size < 1024:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024
    return f"{bytes_size:.2f} TB"
