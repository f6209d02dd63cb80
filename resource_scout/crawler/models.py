# resource_scout/crawler/models.py
"""
Data models for the ResourceScout fetch pipeline and the analysis run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from resource_scout.utils import file_name, file_type


@dataclass(slots=True)
class PageData:
    """The fetched root document: URL, decoded text and its UTF-8 byte size."""

    url: str
    content: str
    size: int


@dataclass(frozen=True, slots=True)
class ResourceRecord:
    """One recorded resource of the analysed page."""

    url: str
    name: str
    type: str
    size: int

    @classmethod
    def from_url(cls, url: str, size: int, *, resource_type: str | None = None) -> ResourceRecord:
        return cls(url=url, name=file_name(url), type=resource_type or file_type(url), size=size)

    def to_dict(self) -> dict:
        return {"url": self.url, "name": self.name, "type": self.type, "size": self.size}


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """A settled size fetch as reported by the batch scheduler (size 0 means failed)."""

    url: str
    name: str
    type: str
    size: int

    @property
    def succeeded(self) -> bool:
        return self.size > 0

    def to_record(self) -> ResourceRecord:
        return ResourceRecord(url=self.url, name=self.name, type=self.type, size=self.size)


@dataclass(slots=True)
class AnalysisResult:
    """Resources of one run; the root HTML document is always first."""

    resources: List[ResourceRecord] = field(default_factory=list)
    main_html_size: int = 0

    @property
    def total_size(self) -> int:
        return sum(r.size for r in self.resources)

    @property
    def total_files(self) -> int:
        return len(self.resources)

    def to_dict(self) -> dict:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "totalSize": self.total_size,
            "totalFiles": self.total_files,
            "mainHtmlSize": self.main_html_size,
        }


# --------------------------------------------------------------------------- #
# Events streamed by the engine                                               #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class Progress:
    message: str
    current: int
    total: int


@dataclass(frozen=True, slots=True)
class ResourceRecorded:
    resource: ResourceRecord
    successful_count: int
    total_expected: int
    running_total_size: int


@dataclass(frozen=True, slots=True)
class AnalysisFinished:
    result: AnalysisResult


AnalysisEvent = Union[Progress, ResourceRecorded, AnalysisFinished]

__all__ = (
    "PageData",
    "ResourceRecord",
    "FetchOutcome",
    "AnalysisResult",
    "Progress",
    "ResourceRecorded",
    "AnalysisFinished",
    "AnalysisEvent",
)
