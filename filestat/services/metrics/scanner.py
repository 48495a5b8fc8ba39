"""Content Scanner: checksum and line count of a file in one streaming pass."""

import zlib
from dataclasses import dataclass
from typing import Optional

from filestat.core.logging_config import get_logger

logger = get_logger(__name__)

# bounded read size, independent of the file size
CHUNK_SIZE = 32 * 1024

LINE_SEPARATOR = b"\n"


@dataclass(frozen=True)
class ContentScan:
    """Result of a scan; a field is None when it was not requested or was abandoned."""
    crc32: Optional[int] = None
    line_number: Optional[int] = None


def scan_content(path: str, want_crc32: bool, want_lines: bool) -> ContentScan:
    """Read ``path`` once, computing the requested content metrics.

    The line count is the number of ``\\n`` bytes, so a last line without a
    trailing newline is not counted. The checksum is CRC-32 with the IEEE
    802.3 polynomial. A checksum failure only drops the checksum; the line
    count keeps going.

    Args:
        path: File to read
        want_crc32: Compute the CRC-32 checksum
        want_lines: Count newline bytes

    Raises:
        OSError: If the file cannot be opened or a read fails; nothing partial is returned
    """
    crc = 0
    line_number = 0

    with open(path, "rb") as f:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            if want_lines:
                line_number += chunk.count(LINE_SEPARATOR)
            if want_crc32:
                try:
                    crc = zlib.crc32(chunk, crc)
                except (zlib.error, OverflowError, TypeError) as e:
                    logger.debug(f"Error generating CRC32 hash of file {path}: {e}")
                    want_crc32 = False

    return ContentScan(
        crc32=crc if want_crc32 else None,
        line_number=line_number if want_lines else None,
    )
