import logging

logger = logging.getLogger(__name__)


def parse_header(window: bytes, delimiter: str) -> list[str]:
    """Header fields from the first line of window, trimmed and lower-cased."""
    first_line = window.split(b"\n", 1)[0]
    text = first_line.decode("utf-8", errors="replace").strip()
    if not text:
        logger.error("No header line found at the head of the object")
        return []
    return text.lower().split(delimiter)
