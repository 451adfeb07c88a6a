"""IR records produced by the scanner and extractors.

All records are frozen; sequences are tuples so a returned tree cannot be
mutated after the scan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from lazybox.graph.describe import as_property, embedded


class FileKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class KeywordFrequency:
    keyword: str
    count: int


@dataclass(frozen=True)
class ReadabilityScores:
    flesch_kincaid_grade_level: float = 0.0
    gunning_fog_index: float = 0.0


@dataclass(frozen=True)
class SentimentAnalysis:
    polarity: float = 0.0  # -1 (negative) .. 1 (positive)
    subjectivity: float = 0.0  # 0 (objective) .. 1 (subjective)


@dataclass(frozen=True)
class TextAnalysis:
    line_count: int = 0
    word_count: int = 0
    char_count: int = 0
    keywords: tuple[KeywordFrequency, ...] = ()
    detected_language: Optional[str] = None
    readability: Optional[ReadabilityScores] = field(default=None, metadata=as_property())
    sentiment: Optional[SentimentAnalysis] = field(default=None, metadata=as_property())
    is_binary: bool = False
    mime_type: Optional[str] = None
    encoding: Optional[str] = None
    average_word_length: float = 0.0
    average_sentence_length: float = 0.0


@dataclass(frozen=True)
class FileEntry:
    name: str
    path: str
    absolute_path: str
    kind: FileKind = FileKind.OTHER
    size: int = 0
    mode: str = ""
    owner: str = ""
    group: str = ""
    mod_time: Optional[datetime] = None
    create_time: Optional[datetime] = None
    symlink_target: Optional[str] = None
    extension: Optional[str] = None
    error: Optional[str] = None
    # Directories only.
    is_git_repo: Optional[bool] = None
    git_remotes: dict[str, str] = field(default_factory=dict)
    git_branch: Optional[str] = None
    children: tuple["FileEntry", ...] = ()
    text_analysis: Optional[TextAnalysis] = None
    # Single-file reads only: full text, or a truncated summary when longer.
    content: Optional[str] = None
    content_summary: Optional[str] = None

    def __graph_labels__(self) -> tuple[str, ...]:
        return (self.kind.value,)

    @property
    def is_dir(self) -> bool:
        return self.kind is FileKind.DIRECTORY

    def walk(self):
        """Yield this entry and all descendants, depth-first, in scan order."""

        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class SourceSpan:
    """Where a descriptor was found; embedded into every descriptor record."""

    source_file: str = ""
    start_line: int = 0
    end_line: int = 0


@dataclass(frozen=True)
class FieldInfo:
    span: SourceSpan = field(metadata=embedded())
    name: str = ""
    type_name: str = ""


@dataclass(frozen=True)
class StructInfo:
    span: SourceSpan = field(metadata=embedded())
    name: str = ""
    fields: tuple[FieldInfo, ...] = ()


@dataclass(frozen=True)
class EnumValue:
    span: SourceSpan = field(metadata=embedded())
    name: str = ""
    ordinal: int = 0


@dataclass(frozen=True)
class EnumInfo:
    span: SourceSpan = field(metadata=embedded())
    name: str = ""
    values: tuple[EnumValue, ...] = ()


@dataclass(frozen=True)
class CodeInfo:
    name: str
    path: str
    language: str = "other"
    size: int = 0
    line_count: int = 0
    structs: tuple[StructInfo, ...] = ()
    enums: tuple[EnumInfo, ...] = ()
