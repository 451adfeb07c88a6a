"""lazybox: filesystem/text metadata extraction into a labeled property graph."""

from lazybox.core.scanner import ScanError, ScanOptions, scan
from lazybox.extract.code import extract_code
from lazybox.extract.file import read_file
from lazybox.extract.text import analyze_text
from lazybox.graph.ingest import IngestionError, to_graph
from lazybox.graph.store import GraphEdge, GraphNode, GraphStore

__version__ = "0.1.0"

__all__ = [
    "GraphEdge",
    "GraphNode",
    "GraphStore",
    "IngestionError",
    "ScanError",
    "ScanOptions",
    "analyze_text",
    "extract_code",
    "read_file",
    "scan",
    "to_graph",
]
