from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from pydantic import BaseModel, Field

from lazybox.core.records import (
    CodeInfo,
    FieldInfo,
    FileEntry,
    FileKind,
    KeywordFrequency,
    ReadabilityScores,
    SourceSpan,
    StructInfo,
    TextAnalysis,
)
from lazybox.core.stable_ids import name_node_id, path_node_id
from lazybox.graph.describe import embedded
from lazybox.graph.ingest import IngestionError, format_timestamp, to_graph


def _tree() -> FileEntry:
    return FileEntry(
        name="root",
        path=".",
        absolute_path="/tmp/root",
        kind=FileKind.DIRECTORY,
        children=(
            FileEntry(name="a.txt", path="a.txt", absolute_path="/tmp/root/a.txt", kind=FileKind.FILE, size=3),
            FileEntry(
                name="sub",
                path="sub",
                absolute_path="/tmp/root/sub",
                kind=FileKind.DIRECTORY,
                children=(
                    FileEntry(
                        name="b.txt",
                        path="sub/b.txt",
                        absolute_path="/tmp/root/sub/b.txt",
                        kind=FileKind.FILE,
                    ),
                ),
            ),
        ),
    )


@dataclass(frozen=True)
class Base:
    id: str


@dataclass(frozen=True)
class Item:
    base: Base = field(metadata=embedded())
    name: str = ""


@dataclass(frozen=True)
class Meta:
    name: str


@dataclass(frozen=True)
class Thing:
    meta: Meta = field(metadata=embedded())
    size: int = 0


@dataclass(frozen=True)
class Leaf:
    name: str


@dataclass
class Holder:
    name: str
    items: list = field(default_factory=list)


@dataclass(eq=False)
class Cell:
    name: str
    links: list = field(default_factory=list)


class Broken:
    def __graph_fields__(self):
        raise RuntimeError("boom")


@dataclass(frozen=True)
class Tagged:
    name: str
    tags: tuple = ()
    mixed: tuple = ()
    extra: Optional[Any] = None
    _private: str = "hidden"


def test_none_root_yields_empty_store() -> None:
    store = to_graph(None)
    assert store.nodes == {}
    assert store.edges == {}


def test_primitive_root_is_rejected() -> None:
    with pytest.raises(IngestionError):
        to_graph(42)


def test_file_tree_ingests_to_nodes_and_children_edges() -> None:
    root = _tree()
    store = to_graph(root)

    assert len(store.nodes) == 4
    children_edges = [e for e in store.edges.values() if e.label == "children"]
    assert len(children_edges) == 3
    assert len(store.edges) == 3

    by_path = {n.properties["path"]: n for n in store.nodes.values()}
    assert set(by_path) == {".", "a.txt", "sub", "sub/b.txt"}
    for entry in root.walk():
        assert by_path[entry.path].properties["name"] == entry.name

    root_id = path_node_id("FileEntry", ".")
    sub_id = path_node_id("FileEntry", "sub")
    assert list(store.nodes)[0] == root_id
    assert {e.target_id for e in store.outgoing_edges(root_id)} == {
        path_node_id("FileEntry", "a.txt"),
        sub_id,
    }
    assert [e.target_id for e in store.outgoing_edges(sub_id)] == [path_node_id("FileEntry", "sub/b.txt")]
    for e in children_edges:
        assert e.properties == {}
        assert "directory" in store.get_node(e.source_id).labels


def test_file_entry_labels_and_properties() -> None:
    store = to_graph(_tree())
    node = store.get_node(path_node_id("FileEntry", "a.txt"))

    assert node.labels == ["FileEntry", "file"]
    assert node.properties["kind"] == "file"
    assert node.properties["size"] == 3
    # None fields and empty mappings leave no property.
    assert "mod_time" not in node.properties
    assert "git_remotes" not in node.properties
    assert "is_git_repo" not in node.properties
    assert "children" not in node.properties


def test_reingesting_path_values_yields_identical_ids() -> None:
    first = to_graph(_tree())
    second = to_graph(_tree())
    assert set(first.nodes) == set(second.nodes)
    # Edge IDs are random.
    assert set(first.edges).isdisjoint(second.edges)


def test_sequence_of_n_records_yields_n_edges_to_distinct_children() -> None:
    analysis = TextAnalysis(
        keywords=(
            KeywordFrequency("alpha", 3),
            KeywordFrequency("beta", 2),
            KeywordFrequency("gamma", 1),
        )
    )
    store = to_graph(analysis)

    edges = [e for e in store.edges.values() if e.label == "keywords"]
    assert len(edges) == 3
    assert len({e.target_id for e in edges}) == 3
    keywords = sorted(store.get_node(e.target_id).properties["keyword"] for e in edges)
    assert keywords == ["alpha", "beta", "gamma"]


def test_embedded_record_is_flattened_into_one_node() -> None:
    store = to_graph(Item(base=Base(id="b-1"), name="widget"))

    assert len(store.nodes) == 1
    node = store.get_node(name_node_id("Item", "widget"))
    assert node.properties == {"id": "b-1", "name": "widget"}


def test_natural_key_is_found_through_embedded_record() -> None:
    store = to_graph(Thing(meta=Meta(name="x"), size=2))
    assert list(store.nodes) == ["Thing_x"]
    assert store.get_node("Thing_x").properties == {"name": "x", "size": 2}


def test_descriptors_carry_embedded_span() -> None:
    span = SourceSpan(source_file="Order.java", start_line=1, end_line=4)
    info = CodeInfo(
        name="Order.java",
        path="Order.java",
        language="java",
        structs=(
            StructInfo(
                span=span,
                name="Order",
                fields=(FieldInfo(span=SourceSpan("Order.java", 2, 2), name="Order.total", type_name="int"),),
            ),
        ),
    )
    store = to_graph(info)

    struct = store.get_node("StructInfo_Order")
    assert struct.properties == {"source_file": "Order.java", "start_line": 1, "end_line": 4, "name": "Order"}
    assert [n.id for n in store.children_of("StructInfo_Order", "fields")] == ["FieldInfo_Order.total"]
    assert [n.id for n in store.children_of(path_node_id("CodeInfo", "Order.java"), "structs")] == [
        "StructInfo_Order"
    ]


def test_property_conversions() -> None:
    entry = FileEntry(
        name="repo",
        path=".",
        absolute_path="/r",
        kind=FileKind.DIRECTORY,
        mod_time=datetime(2024, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2))),
        is_git_repo=True,
        git_remotes={"origin": "https://example.com/repo.git"},
        text_analysis=TextAnalysis(readability=ReadabilityScores(1.5, 2.5)),
    )
    store = to_graph(entry)
    props = store.get_node(path_node_id("FileEntry", ".")).properties

    assert props["mod_time"] == "2024-01-02T03:04:05Z"
    assert props["is_git_repo"] is True
    assert props["git_remotes"] == {"origin": "https://example.com/repo.git"}

    [analysis_edge] = store.outgoing_edges(path_node_id("FileEntry", "."))
    assert analysis_edge.label == "text_analysis"
    analysis = store.get_node(analysis_edge.target_id)
    assert analysis.properties["readability"] == {
        "flesch_kincaid_grade_level": 1.5,
        "gunning_fog_index": 2.5,
    }
    assert "sentiment" not in analysis.properties


def test_primitive_sequences_and_unsupported_values() -> None:
    store = to_graph(Tagged(name="t", tags=("a", "b"), mixed=(Leaf("x"), "dropped"), extra=object()))
    node = store.get_node("Tagged_t")

    assert node.properties["tags"] == ["a", "b"]
    assert "extra" not in node.properties
    assert "_private" not in node.properties
    assert "mixed" not in node.properties
    assert [n.id for n in store.children_of("Tagged_t", "mixed")] == ["Leaf_x"]


def test_sequence_root_ingests_each_element() -> None:
    store = to_graph([Leaf("x"), Leaf("y")])
    assert set(store.nodes) == {"Leaf_x", "Leaf_y"}
    assert store.edges == {}


def test_error_names_field_and_element_index() -> None:
    with pytest.raises(IngestionError) as excinfo:
        to_graph(Holder(name="h", items=[Leaf("ok"), Broken()]))

    err = excinfo.value
    assert err.field == "items"
    assert err.index == 1
    assert "items" in str(err)
    assert "element 1" in str(err)
    assert "boom" in str(err)
    assert isinstance(err.__cause__, IngestionError)


def test_back_reference_links_without_reentering() -> None:
    a = Cell("a")
    b = Cell("b")
    a.links.append(b)
    b.links.append(a)

    store = to_graph(a)

    assert set(store.nodes) == {"Cell_a", "Cell_b"}
    assert len(store.edges) == 2
    assert [n.id for n in store.children_of("Cell_a", "links")] == ["Cell_b"]
    assert [n.id for n in store.children_of("Cell_b", "links")] == ["Cell_a"]


def test_shared_reference_merges_by_natural_key() -> None:
    shared = Leaf("shared")
    store = to_graph(Holder(name="h", items=[shared, shared]))

    assert set(store.nodes) == {"Holder_h", "Leaf_shared"}
    assert len(store.outgoing_edges("Holder_h")) == 2


class Tag(BaseModel):
    name: str


class Doc(BaseModel):
    name: str
    tags: list[Tag] = []
    secret: str = Field(default="s3cret", json_schema_extra={"graph": "skip"})


def test_pydantic_models_are_described_from_fields() -> None:
    store = to_graph(Doc(name="d", tags=[Tag(name="t1"), Tag(name="t2")]))

    assert set(store.nodes) == {"Doc_d", "Tag_t1", "Tag_t2"}
    assert store.get_node("Doc_d").properties == {"name": "d"}
    assert [n.id for n in store.children_of("Doc_d", "tags")] == ["Tag_t1", "Tag_t2"]


def test_format_timestamp_treats_naive_as_utc() -> None:
    assert format_timestamp(datetime(2023, 12, 31, 23, 59, 58)) == "2023-12-31T23:59:58Z"
