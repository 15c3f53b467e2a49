"""Resume file intake: classify, read, and materialize CandidateFiles."""

import asyncio
import base64
import logging
import mimetypes
import uuid
from pathlib import Path

from src.core.schemas import CandidateFile, FileKind

logger = logging.getLogger(__name__)

_TEXT_SUFFIXES = {".txt", ".md"}


def generate_id() -> str:
    return uuid.uuid4().hex


def classify(name: str, mime_type: str | None = None) -> FileKind | None:
    """Classify a file as text, image or pdf.

    Returns None for unsupported files.
    """
    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(name)
    mime_type = mime_type or ""

    if mime_type.startswith("image/"):
        return FileKind.IMAGE
    if mime_type == "application/pdf":
        return FileKind.PDF
    if mime_type == "text/plain" or Path(name).suffix.lower() in _TEXT_SUFFIXES:
        return FileKind.TEXT
    return None


def load_file(path: str | Path, mime_type: str | None = None) -> CandidateFile:
    """Read a resume from disk.

    Args:
        path: Path to a text, image or PDF file.
        mime_type: Override the MIME type guessed from the file name.

    Returns:
        CandidateFile with raw text (text files) or base64 content.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file type is not supported.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Resume file not found: {path}"
        raise FileNotFoundError(msg)

    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(path.name)

    kind = classify(path.name, mime_type)
    if kind is None:
        msg = f"Unsupported resume file type: {path.name} ({mime_type or 'unknown'})"
        raise ValueError(msg)

    if kind is FileKind.TEXT:
        return CandidateFile(
            id=generate_id(),
            kind=kind,
            content=path.read_text(encoding="utf-8"),
            name=path.name,
        )

    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return CandidateFile(
        id=generate_id(),
        kind=kind,
        content=encoded,
        name=path.name,
        mime_type=mime_type,
    )


async def load_files(paths: list[str | Path]) -> list[CandidateFile]:
    """Decode several files concurrently, preserving submission order.

    Unsupported files are skipped with a warning; missing files raise.
    """

    async def _load(path: str | Path) -> CandidateFile | None:
        try:
            return await asyncio.to_thread(load_file, path)
        except ValueError as e:
            logger.warning("Skipping %s: %s", path, e)
            return None

    loaded = await asyncio.gather(*(_load(p) for p in paths))
    return [f for f in loaded if f is not None]


def candidate_from_text(name: str, text: str) -> CandidateFile:
    """Build a text CandidateFile from pasted resume text."""
    return CandidateFile(id=generate_id(), kind=FileKind.TEXT, content=text, name=name)
