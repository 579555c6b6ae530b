"""
Reviewer annotations.

An ``Annotation`` holds the reviewer's edits for one finding. Each field is
optional and independent: a finding may have a saved status while its
comment is still being drafted. When a checklist is produced, a field set
on the annotation wins over the value embedded in the source document.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from stig_checklist.core.config import Cfg
from stig_checklist.core.constants import Status
from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import ValidationError
from stig_checklist.model.assessment import Finding
from stig_checklist.model.mapping import StatusMap
from stig_checklist.xml.sanitizer import San


@dataclass
class Annotation:
    """
    Reviewer-entered fields for one finding. ``None`` means "not edited".

    Attributes:
        status: Canonical status (legacy values are mapped on creation)
        finding_details: Finding details text
        comments: Comments text
    """

    status: Optional[Status] = None
    finding_details: Optional[str] = None
    comments: Optional[str] = None

    FIELDS = ("status", "finding_details", "comments")

    # camelCase keys written by the browser front end
    ALIASES = {
        "findingDetails": "finding_details",
        "FINDING_DETAILS": "finding_details",
        "COMMENTS": "comments",
        "STATUS": "status",
    }

    def __post_init__(self) -> None:
        if self.status is not None:
            self.status = StatusMap.map(self.status)
        if self.finding_details is not None:
            self.finding_details = San.text(self.finding_details)
        if self.comments is not None:
            self.comments = San.text(self.comments)

    def merged(self, other: "Annotation") -> "Annotation":
        """Copy of self with every field ``other`` sets replaced."""
        return Annotation(
            status=other.status if other.status is not None else self.status,
            finding_details=(
                other.finding_details if other.finding_details is not None else self.finding_details
            ),
            comments=other.comments if other.comments is not None else self.comments,
        )

    def as_dict(self) -> Dict[str, str]:
        data: Dict[str, str] = {}
        if self.status is not None:
            data["status"] = self.status.value
        if self.finding_details is not None:
            data["finding_details"] = self.finding_details
        if self.comments is not None:
            data["comments"] = self.comments
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Annotation":
        """
        Build an annotation from reviewer input, accepting camelCase aliases.

        Text fields are held to ``Cfg.MAX_FIND`` and ``Cfg.MAX_COMM``; values
        read from a source document are not.

        Raises:
            ValidationError: On unknown keys or over-long text
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = cls.ALIASES.get(key, key)
            if name not in cls.FIELDS:
                raise ValidationError(f"Unknown annotation field: {key}")
            values[name] = value
        for name, limit in (("finding_details", Cfg.MAX_FIND), ("comments", Cfg.MAX_COMM)):
            if values.get(name) is not None:
                values[name] = San.text(values[name], limit)
        return cls(**values)


class AnnotationStore:
    """
    Finding id -> ``Annotation``.

    Scoped to one ``Assessment``; replace the store when a new document is
    loaded.

    Example:
        >>> store = AnnotationStore()
        >>> _ = store.save("V-1", status="not finding")
        >>> _ = store.save("V-1", comments="checked by hand")
        >>> store.get("V-1").status
        <Status.NOT_A_FINDING: 'NotAFinding'>
    """

    def __init__(self, items: Optional[Mapping[str, Annotation]] = None):
        self._items: Dict[str, Annotation] = dict(items or {})

    def __contains__(self, finding_id: object) -> bool:
        return finding_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def get(self, finding_id: str) -> Optional[Annotation]:
        return self._items.get(finding_id)

    def save(self, finding_id: str, **changes: Any) -> Annotation:
        """Merge ``changes`` into the annotation for ``finding_id``, field by field."""
        if not finding_id:
            raise ValidationError("Annotation requires a finding id")
        update = Annotation.from_dict(changes)
        current = self._items.get(finding_id, Annotation())
        self._items[finding_id] = current.merged(update)
        return self._items[finding_id]

    def discard(self, finding_id: str) -> None:
        self._items.pop(finding_id, None)

    def clear(self) -> None:
        self._items.clear()

    def resolve(self, finding: Finding) -> Annotation:
        """
        Effective reviewer fields for ``finding``.

        Per field: the annotation's value if set, else the finding's own.
        """
        own = Annotation(
            status=finding.status,
            finding_details=finding.finding_details,
            comments=finding.comments,
        )
        edit = self._items.get(finding.id)
        return own.merged(edit) if edit is not None else own

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {fid: ann.as_dict() for fid, ann in self._items.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnnotationStore":
        """
        Raises:
            ValidationError: If ``data`` is not a mapping of mappings
        """
        if not isinstance(data, Mapping):
            raise ValidationError("Annotations must be an object keyed by finding id")
        items: Dict[str, Annotation] = {}
        for fid, entry in data.items():
            if isinstance(entry, Annotation):
                items[str(fid)] = entry
            elif isinstance(entry, Mapping):
                items[str(fid)] = Annotation.from_dict(entry)
            else:
                raise ValidationError("Annotation entry must be an object", {"id": fid})
        return cls(items)

    @classmethod
    def coerce(cls, value: Union["AnnotationStore", Mapping[str, Any], None]) -> "AnnotationStore":
        """Accept a store, a plain mapping, or None."""
        if isinstance(value, AnnotationStore):
            return value
        if value is None:
            return cls()
        return cls.from_dict(value)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AnnotationStore":
        """
        Read annotations from a JSON file.

        Raises:
            ValidationError: If the file is not valid annotation JSON
        """
        from stig_checklist.io.file_ops import FO

        text = FO.read(path)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid annotations JSON: {exc}", {"file": str(path)}) from exc
        store = cls.from_dict(data)
        LOG.d(f"Loaded {len(store)} annotation(s) from {path}")
        return store

    def dump(self, path: Union[str, Path]) -> Path:
        """Write annotations to a JSON file atomically."""
        from stig_checklist.io.file_ops import FO

        with FO.atomic(path) as handle:
            json.dump(self.to_dict(), handle, indent=2, ensure_ascii=False)
        return Path(path)
