from typing import List

from docstage.exception import ValidationError

SEPARATOR = "/"


def split(path: str) -> List[str]:
    segments = path.strip(SEPARATOR).split(SEPARATOR)
    if not path or any(not segment for segment in segments):
        raise ValidationError(f"Invalid path {path!r}")
    return segments


def document_path(path: str) -> str:
    segments = split(path)
    if len(segments) % 2:
        raise ValidationError(
            f"Document path must have an even number of segments: {path!r}"
        )
    return SEPARATOR.join(segments)


def collection_path(path: str) -> str:
    segments = split(path)
    if not len(segments) % 2:
        raise ValidationError(
            f"Collection path must have an odd number of segments: {path!r}"
        )
    return SEPARATOR.join(segments)


def parent(path: str) -> str:
    """Everything before the last separator"""
    return path[: path.rfind(SEPARATOR)] if SEPARATOR in path else ""


def join(*parts: str) -> str:
    return SEPARATOR.join(part.strip(SEPARATOR) for part in parts)
