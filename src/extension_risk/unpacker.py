"""
Chrome Extension Unpacker
Strips the CRX header, extracts the embedded ZIP and reads its contents
"""

import io
import zlib
import json
import logging
import zipfile
from pathlib import Path

from .errors import AnalysisError, ExtractionError, FormatError

logger = logging.getLogger(__name__)

# "Cr24" read as a little-endian uint32
CRX_MAGIC = 0x34327243


def _read_uint32(buffer, offset):
    if len(buffer) < offset + 4:
        raise FormatError(f"Truncated CRX header: need 4 bytes at offset {offset}")
    return int.from_bytes(buffer[offset:offset + 4], 'little')


def crx_payload_offset(buffer):
    """
    Compute where the ZIP archive starts inside a CRX package

    CRX2: magic, version, public key length, signature length, key, signature, ZIP
    CRX3: magic, version, header size, protobuf header, ZIP

    Raises:
        FormatError: Bad magic number or unsupported version
    """
    if len(buffer) < 4 or _read_uint32(buffer, 0) != CRX_MAGIC:
        raise FormatError("Not a valid CRX file")

    version = _read_uint32(buffer, 4)
    logger.debug("CRX version: %s", version)

    if version == 2:
        public_key_length = _read_uint32(buffer, 8)
        signature_length = _read_uint32(buffer, 12)
        return 16 + public_key_length + signature_length
    if version == 3:
        header_size = _read_uint32(buffer, 8)
        return 12 + header_size

    raise FormatError(f"Unsupported CRX version: {version}")


def parse_crx(buffer):
    """
    Return the archive payload of a CRX package

    No signature or integrity check is performed.

    Args:
        buffer (bytes): Raw package

    Returns:
        bytes: Everything from the payload offset to end of buffer
    """
    return bytes(buffer[crx_payload_offset(buffer):])


class ExtensionUnpacker:
    """Unpacks CRX packages into an extraction directory and reads them back"""

    def unpack(self, crx_bytes, output_dir):
        """
        Strip the CRX header and extract the embedded archive

        Args:
            crx_bytes (bytes): Raw package
            output_dir (Path): Destination directory

        Returns:
            int: Number of files extracted
        """
        return self.extract_archive(parse_crx(crx_bytes), output_dir)

    def extract_archive(self, archive_bytes, output_dir):
        """
        Extract every entry of a ZIP archive, overwriting existing files

        Args:
            archive_bytes (bytes): ZIP payload returned by parse_crx
            output_dir (Path): Destination directory

        Returns:
            int: Number of files extracted
        """
        output_dir = Path(output_dir)
        try:
            with zipfile.ZipFile(io.BytesIO(archive_bytes), 'r') as zip_ref:
                zip_ref.extractall(output_dir)
                file_count = sum(1 for info in zip_ref.infolist() if not info.is_dir())
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, zlib.error) as e:
            raise ExtractionError(f"Corrupt extension archive: {e}") from e
        except NotImplementedError as e:
            # unsupported compression method
            raise ExtractionError(f"Unsupported extension archive: {e}") from e
        except OSError as e:
            raise ExtractionError(f"Failed to write archive contents: {e}") from e

        logger.info("Extracted %d files to %s", file_count, output_dir)
        return file_count

    def read_manifest(self, extension_dir):
        """
        Read and parse manifest.json

        Args:
            extension_dir (Path): Directory containing unpacked extension

        Returns:
            dict: Parsed manifest data

        Raises:
            AnalysisError: Missing file, invalid JSON, or not a JSON object
        """
        manifest_path = Path(extension_dir) / "manifest.json"

        if not manifest_path.exists():
            raise AnalysisError(f"manifest.json not found in {extension_dir}")

        try:
            # utf-8-sig: some packers prepend a BOM
            with open(manifest_path, 'r', encoding='utf-8-sig') as f:
                manifest = json.load(f)
        except (OSError, ValueError) as e:
            raise AnalysisError(f"Failed to read manifest: {e}") from e

        if not isinstance(manifest, dict):
            raise AnalysisError("manifest.json must contain a JSON object")

        logger.info("Extension: %s %s", manifest.get('name', 'Unknown'), manifest.get('version', 'Unknown'))
        return manifest

    def get_file_list(self, extension_dir, suffix='.js'):
        """
        Read every file with the given suffix below the extraction root

        Returns:
            dict: POSIX path relative to the root -> file text
        """
        extension_dir = Path(extension_dir)
        file_contents = {}

        for file_path in sorted(extension_dir.rglob(f'*{suffix}')):
            if not file_path.is_file():
                continue
            relative_path = file_path.relative_to(extension_dir).as_posix()
            try:
                file_contents[relative_path] = file_path.read_text(encoding='utf-8', errors='replace')
            except OSError as e:
                raise ExtractionError(f"Failed to read {relative_path}: {e}") from e

        return file_contents
