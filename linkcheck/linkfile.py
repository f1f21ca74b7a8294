"""
Link-list file: plain UTF-8 text, one absolute URL per line.
"""

from pathlib import Path
from typing import Iterable


class MissingLinkFileError(FileNotFoundError):
    """Raised when the link file requested for verification does not exist."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"File does not exist: {path}")


class InvalidLinkFileError(ValueError):
    """Raised when the link file is not UTF-8 text."""

    def __init__(self, path: Path | str, cause: UnicodeDecodeError):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Link file is not valid UTF-8: {path} (byte {cause.start}: {cause.reason})")


def read_link_file(path: Path | str) -> list[str]:
    """
    Read links in file order, skipping blank lines.

    Raises:
        MissingLinkFileError: path does not exist
        InvalidLinkFileError: content is not UTF-8
    """
    p = Path(path)
    if not p.is_file():
        raise MissingLinkFileError(p)

    links = []
    try:
        with open(p, encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line:
                    links.append(line)
    except UnicodeDecodeError as exc:
        raise InvalidLinkFileError(p, exc) from exc
    return links


def write_link_file(path: Path | str, links: Iterable[str]) -> Path:
    """Write links one per line, truncating any previous content."""
    p = Path(path)
    if p.parent != Path('.'):
        p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, 'w', encoding='utf-8', newline='\n') as f:
        for link in links:
            f.write(link + '\n')
    return p
