"""
Semantic analysis of changed files using Tree-sitter.

Produces a language-neutral summary of a source file for the reviewer:

    {
        "language": "python",
        "functions": [{"name", "line_start", "line_end", "parameters"}],
        "classes": [{"name", "line_start", "line_end", "methods": [...]}],
        "imports": ["from os import path", ...],
        "calls": ["print", "self.save", ...],
        "has_errors": False,
    }

Line numbers are 1-based. ``functions`` holds top-level functions only;
functions defined inside a class body are reported under that class's
``methods``. Nested classes are reported as separate entries in ``classes``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

from tree_sitter import Node

from src.parser.exceptions import ParseError, SemanticAnalysisError, UnsupportedLanguageError
from src.parser.file_types import FileTypes
from src.parser.tree_sitter_parser import parse_source, support_file
from src.utils.logging import get_logger

logger = get_logger(__name__)

MAX_CALLS = 100


@dataclass(frozen=True)
class LanguageNodes:
    """Grammar node types that carry definitions for one language."""
    functions: FrozenSet[str]
    classes: FrozenSet[str]
    methods: FrozenSet[str]
    imports: FrozenSet[str]
    calls: Dict[str, str] = field(default_factory=dict)


_JS_NODES = LanguageNodes(
    functions=frozenset({"function_declaration", "generator_function_declaration"}),
    classes=frozenset({"class_declaration", "abstract_class_declaration", "interface_declaration"}),
    methods=frozenset({"method_definition"}),
    imports=frozenset({"import_statement"}),
    calls={"call_expression": "function"},
)

LANGUAGE_NODES: Dict[FileTypes, LanguageNodes] = {
    FileTypes.PYTHON: LanguageNodes(
        functions=frozenset({"function_definition"}),
        classes=frozenset({"class_definition"}),
        methods=frozenset({"function_definition"}),
        imports=frozenset({"import_statement", "import_from_statement"}),
        calls={"call": "function"},
    ),
    FileTypes.JAVASCRIPT: _JS_NODES,
    FileTypes.TYPESCRIPT: _JS_NODES,
    FileTypes.TSX: _JS_NODES,
    FileTypes.JAVA: LanguageNodes(
        functions=frozenset(),
        classes=frozenset({
            "class_declaration", "interface_declaration", "enum_declaration", "record_declaration",
        }),
        methods=frozenset({"method_declaration", "constructor_declaration"}),
        imports=frozenset({"import_declaration"}),
        calls={"method_invocation": "name"},
    ),
    FileTypes.GO: LanguageNodes(
        functions=frozenset({"function_declaration", "method_declaration"}),
        classes=frozenset({"type_spec"}),
        methods=frozenset(),
        imports=frozenset({"import_spec"}),
        calls={"call_expression": "function"},
    ),
    FileTypes.PHP: LanguageNodes(
        functions=frozenset({"function_definition"}),
        classes=frozenset({
            "class_declaration", "interface_declaration", "trait_declaration", "enum_declaration",
        }),
        methods=frozenset({"method_declaration"}),
        imports=frozenset({"namespace_use_declaration"}),
        calls={
            "function_call_expression": "function",
            "member_call_expression": "name",
            "nullsafe_member_call_expression": "name",
            "scoped_call_expression": "name",
        },
    ),
}


class SemanticAnalyzer:
    """Extracts functions, classes, imports and calls from source text."""

    DEFAULT_MAX_DEPTH = 500

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth

    def supports(self, path: str) -> bool:
        return support_file(path)

    def analyze_file(self, content: str, path: str) -> Optional[Dict[str, Any]]:
        """Analyze one file.

        Returns:
            Semantic summary, or None when the language is unsupported or
            the source cannot be analyzed.
        """
        if not support_file(path):
            return None

        try:
            tree, file_type, source = parse_source(content, path)
            return self._summarize(tree.root_node, file_type, source, path)
        except UnsupportedLanguageError:
            return None
        except (ParseError, SemanticAnalysisError) as e:
            logger.warning(f"SemanticAnalyzer: Failed to analyze {path}: {e}")
            return None

    def analyze_files(self, files: Dict[str, str]) -> Dict[str, Dict[str, Any]]:
        """Analyze ``path -> content`` pairs, omitting files that yield nothing."""
        results = {}
        for path, content in files.items():
            result = self.analyze_file(content, path)
            if result is not None:
                results[path] = result
        return results

    def _summarize(self, root: Node, file_type: FileTypes, source: bytes, path: str) -> Dict[str, Any]:
        nodes = LANGUAGE_NODES[file_type]
        summary: Dict[str, Any] = {
            "language": file_type.display_name,
            "functions": [],
            "classes": [],
            "imports": [],
            "calls": self._collect_calls(root, nodes, source),
            "has_errors": bool(root.has_error),
        }
        self._walk(root, nodes, source, summary, current_class=None, depth=0, path=path)
        return summary

    def _walk(
        self,
        node: Node,
        nodes: LanguageNodes,
        source: bytes,
        summary: Dict[str, Any],
        current_class: Optional[Dict[str, Any]],
        depth: int,
        path: str,
    ) -> None:
        depth += 1
        if depth > self.max_depth:
            raise SemanticAnalysisError(
                f"Recursion depth exceeded: {depth} > {self.max_depth}",
                language=summary["language"],
                file_path=path,
            )

        if node.type in nodes.classes:
            entry = self._definition(node, source)
            if entry is None:
                return
            entry["methods"] = []
            summary["classes"].append(entry)
            for child in node.children:
                self._walk(child, nodes, source, summary, entry, depth, path)
            return

        if current_class is not None and node.type in nodes.methods:
            method = self._definition(node, source)
            if method is not None:
                method["parameters"] = self._parameters(node, source)
                current_class["methods"].append(method)
            return

        if node.type in nodes.functions:
            function = self._definition(node, source)
            if function is not None:
                function["parameters"] = self._parameters(node, source)
                summary["functions"].append(function)
            # Nested functions are not reported
            return

        if node.type in nodes.imports:
            summary["imports"].append(self._import_text(node, source))
            return

        for child in node.children:
            self._walk(child, nodes, source, summary, current_class, depth, path)

    def _definition(self, node: Node, source: bytes) -> Optional[Dict[str, Any]]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return {
            "name": _text(name_node, source),
            "line_start": node.start_point[0] + 1,
            "line_end": node.end_point[0] + 1,
        }

    def _parameters(self, node: Node, source: bytes) -> List[Dict[str, str]]:
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            return []

        parameters = []
        for child in params_node.named_children:
            if child.type == "comment":
                continue
            name = _parameter_name(child, source)
            if name:
                parameters.append({"name": name})
        return parameters

    def _import_text(self, node: Node, source: bytes) -> str:
        text = " ".join(_text(node, source).split()).rstrip(";")
        return text.strip('"') if node.type == "import_spec" else text

    def _collect_calls(self, root: Node, nodes: LanguageNodes, source: bytes) -> List[str]:
        calls: List[str] = []
        seen = set()
        stack = [root]

        while stack and len(calls) < MAX_CALLS:
            node = stack.pop()
            callee_field = nodes.calls.get(node.type)
            if callee_field is not None:
                callee = node.child_by_field_name(callee_field)
                if callee is not None:
                    name = _text(callee, source)
                    if name not in seen:
                        seen.add(name)
                        calls.append(name)
            stack.extend(reversed(node.children))

        return calls


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _parameter_name(node: Node, source: bytes) -> str:
    if node.type in ("identifier", "variable_name"):
        return _text(node, source)

    for field_name in ("name", "pattern", "left"):
        child = node.child_by_field_name(field_name)
        if child is not None:
            return _text(child, source)

    for child in node.named_children:
        if child.type in ("identifier", "variable_name"):
            return _text(child, source)

    return _text(node, source)
