"""Code descriptors via Tree-sitter.

Extraction is minimal:
- language inferred from the file extension
- Java: class declarations with their fields, enum declarations with their constants
- other languages: counts only

Descriptor names are qualified within the file (`Order.total`, `Color.RED`).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import structlog
from tree_sitter_language_pack import get_parser

from lazybox.core.records import CodeInfo, EnumInfo, EnumValue, FieldInfo, SourceSpan, StructInfo


logger = structlog.get_logger(__name__)

Language = str  # "java" | "go" | "python" | "javascript" | "cobol" | "xml" | "other"


def infer_language(path: str) -> Language:
    p = path.lower()
    if p.endswith(".java"):
        return "java"
    if p.endswith(".go"):
        return "go"
    if p.endswith((".py", ".pyi")):
        return "python"
    if p.endswith((".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx")):
        return "javascript"
    if p.endswith((".cbl", ".cob", ".cpy")):
        return "cobol"
    if p.endswith((".xml", ".xsd", ".wsdl")):
        return "xml"
    return "other"


def count_physical_lines(data: bytes) -> int:
    if not data:
        return 0
    n = data.count(b"\n")
    if data.endswith(b"\n"):
        return n
    return n + 1


def _text(node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _name_of(node) -> Optional[str]:
    name_node = node.child_by_field_name("name")
    return _text(name_node) if name_node is not None else None


class _JavaCollector:
    def __init__(self, source_file: str) -> None:
        self.source_file = source_file
        self.structs: list[StructInfo] = []
        self.enums: list[EnumInfo] = []

    def _span(self, node) -> SourceSpan:
        start_line = int(node.start_point[0]) + 1
        end_line = max(int(node.end_point[0]) + 1, start_line)
        return SourceSpan(source_file=self.source_file, start_line=start_line, end_line=end_line)

    def visit(self, node, prefix: str = "") -> None:
        if node.type == "class_declaration":
            self._class(node, prefix)
        elif node.type == "enum_declaration":
            self._enum(node, prefix)
        else:
            for child in node.children:
                self.visit(child, prefix)

    def _class(self, node, prefix: str) -> None:
        name = _name_of(node)
        body = node.child_by_field_name("body")
        if name is None or body is None:
            return
        qualified = prefix + name
        fields: list[FieldInfo] = []
        for member in body.children:
            if member.type != "field_declaration":
                continue
            type_node = member.child_by_field_name("type")
            type_name = _text(type_node) if type_node is not None else ""
            for declarator in member.children:
                if declarator.type != "variable_declarator":
                    continue
                field_name = _name_of(declarator)
                if field_name is None:
                    continue
                fields.append(
                    FieldInfo(
                        span=self._span(declarator),
                        name=f"{qualified}.{field_name}",
                        type_name=type_name,
                    )
                )
        self.structs.append(StructInfo(span=self._span(node), name=qualified, fields=tuple(fields)))
        for member in body.children:
            self.visit(member, qualified + ".")

    def _enum(self, node, prefix: str) -> None:
        name = _name_of(node)
        body = node.child_by_field_name("body")
        if name is None or body is None:
            return
        qualified = prefix + name
        values: list[EnumValue] = []
        for member in body.children:
            if member.type != "enum_constant":
                continue
            constant = _name_of(member)
            if constant is None:
                continue
            values.append(
                EnumValue(span=self._span(member), name=f"{qualified}.{constant}", ordinal=len(values))
            )
        self.enums.append(EnumInfo(span=self._span(node), name=qualified, values=tuple(values)))
        for member in body.children:
            if member.type != "enum_constant":
                self.visit(member, qualified + ".")


def extract_java(source_bytes: bytes, source_file: str) -> tuple[tuple[StructInfo, ...], tuple[EnumInfo, ...]]:
    tree = get_parser("java").parse(source_bytes)
    collector = _JavaCollector(source_file)
    collector.visit(tree.root_node)
    return tuple(collector.structs), tuple(collector.enums)


def extract_code(path: os.PathLike | str) -> CodeInfo:
    """Describe one source file. Raises OSError when the file cannot be read."""

    source_file = Path(path).as_posix()
    data = Path(path).read_bytes()
    language = infer_language(source_file)

    structs: tuple[StructInfo, ...] = ()
    enums: tuple[EnumInfo, ...] = ()
    if language == "java":
        structs, enums = extract_java(data, source_file)

    logger.debug(
        "code.extracted", path=source_file, language=language, structs=len(structs), enums=len(enums)
    )
    return CodeInfo(
        name=Path(path).name,
        path=source_file,
        language=language,
        size=len(data),
        line_count=count_physical_lines(data),
        structs=structs,
        enums=enums,
    )
