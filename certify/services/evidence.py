"""Evidence tagging, row building and read-side merge.

Submitted evidence is tagged once as TextNote, LinkRef or FileRef. Storage
only knows FILE and LINK rows; a text note is a LINK row with an empty url.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from certify.models import Evidence
from certify.schemas.enums import EvidenceType
from certify.schemas.submission import EvidencePayload


@dataclass(frozen=True)
class TextNote:
    description: str


@dataclass(frozen=True)
class LinkRef:
    url: str
    description: str | None = None


@dataclass(frozen=True)
class FileRef:
    file_name: str
    file_size: int | None = None
    file_type: str | None = None
    url: str = ""
    description: str | None = None


EvidenceItem = TextNote | LinkRef | FileRef


def _clean(value: str | None) -> str:
    return (value or "").strip()


def tag_evidence(payload: EvidencePayload | None) -> list[EvidenceItem]:
    """Turn a submitted evidence bundle into tagged items; blank parts yield nothing."""
    if payload is None:
        return []
    items: list[EvidenceItem] = []
    if payload.text is not None and _clean(payload.text.description):
        items.append(TextNote(description=_clean(payload.text.description)))
    if payload.link is not None and _clean(payload.link.url):
        items.append(
            LinkRef(
                url=_clean(payload.link.url),
                description=_clean(payload.link.description) or None,
            )
        )
    if payload.file is not None and _clean(payload.file.file_name):
        items.append(
            FileRef(
                file_name=_clean(payload.file.file_name),
                file_size=payload.file.file_size,
                file_type=payload.file.file_type,
                url=_clean(payload.file.url),
                description=_clean(payload.file.description) or None,
            )
        )
    return items


def build_evidence_rows(
    items: Iterable[EvidenceItem], indicator_response_id: int, application_id: int
) -> list[Evidence]:
    """Build (unsaved) Evidence rows for tagged items."""
    rows = []
    for item in items:
        row = Evidence(indicator_response_id=indicator_response_id, application_id=application_id)
        if isinstance(item, TextNote):
            row.type = EvidenceType.LINK.value
            row.url = ""
            row.description = item.description
        elif isinstance(item, LinkRef):
            row.type = EvidenceType.LINK.value
            row.url = item.url
            row.description = item.description
        elif isinstance(item, FileRef):
            row.type = EvidenceType.FILE.value
            row.file_name = item.file_name
            row.file_size = item.file_size
            row.file_type = item.file_type
            row.url = item.url
            row.description = item.description
        else:
            raise TypeError(f"unsupported evidence item: {item!r}")
        rows.append(row)
    return rows


def row_to_item(row: Evidence) -> EvidenceItem | None:
    """Tag a stored row. Rows with nothing to show return None."""
    if row.type == EvidenceType.FILE.value:
        if not _clean(row.file_name):
            return None
        return FileRef(
            file_name=row.file_name,
            file_size=row.file_size,
            file_type=row.file_type,
            url=row.url or "",
            description=row.description,
        )
    if _clean(row.url):
        return LinkRef(url=row.url, description=row.description)
    if _clean(row.description):
        return TextNote(description=row.description)
    return None


def merge_evidence(rows: Iterable[Evidence]) -> dict[str, dict[str, Any]]:
    """Collapse stored rows into the UI evidence bundle {text, link, file}.

    Rows are applied in order: the last FILE wins, the last LINK with a url
    wins, and a LINK without a url is the text note.
    """
    bundle: dict[str, dict[str, Any]] = {}
    for row in rows:
        item = row_to_item(row)
        if isinstance(item, FileRef):
            bundle["file"] = {
                "fileName": item.file_name,
                "fileSize": item.file_size,
                "fileType": item.file_type,
                "url": item.url,
                "description": item.description or "",
            }
        elif isinstance(item, LinkRef):
            bundle["link"] = {"url": item.url, "description": item.description or ""}
        elif isinstance(item, TextNote):
            bundle["text"] = {"description": item.description}
    return bundle
