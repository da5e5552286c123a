"""Tree-sitter front end for TypeScript declaration files.

Parses declaration text into a navigable tree and answers the node queries
the resolver and transformer need: statement classification, names, export
and visibility modifiers, documentation tags and original source text.
"""

import re
from dataclasses import dataclass
from enum import Enum

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from dts_surface.errors import DeclarationParseError, UnhandledConstructError

TS_LANGUAGE = Language(tree_sitter_typescript.language_typescript())
_parser: Parser | None = None

# Block tags such as "@internal"; inline tags like "{@link X}" are not matched.
DOC_TAG_RE = re.compile(r"(?:^|[\s*])@([A-Za-z][\w-]*)")

BLOCK_TYPES = {"program", "statement_block"}
CLASS_BODY_TYPES = {"class_body"}
RECORD_BODY_TYPES = {"interface_body", "object_type"}
CLASS_MEMBER_TYPES = {
    "method_signature",
    "method_definition",
    "abstract_method_signature",
    "public_field_definition",
}
PARAMETER_TYPES = {"required_parameter", "optional_parameter"}
IDENTIFIER_TYPES = {"identifier", "type_identifier", "property_identifier"}

# Node types whose "name" field declares rather than references a type.
NAMED_DECLARATION_TYPES = {
    "class_declaration",
    "abstract_class_declaration",
    "class",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
    "internal_module",
    "module",
    "type_parameter",
    "mapped_type_clause",
}


class DeclarationKind(Enum):
    """Closed set of statement kinds the resolver and transformer dispatch on."""

    CONTAINER = "container"
    RECORD = "record"
    NOMINAL = "nominal"
    ALIAS = "alias"
    ENUM = "enum"
    VARIABLE = "variable"
    FUNCTION = "function"
    IMPORT = "import"
    REEXPORT = "reexport"
    OTHER = "other"


TYPE_DECLARATION_KINDS = {
    DeclarationKind.CONTAINER,
    DeclarationKind.RECORD,
    DeclarationKind.NOMINAL,
    DeclarationKind.ALIAS,
    DeclarationKind.ENUM,
}

_KIND_BY_NODE_TYPE = {
    "internal_module": DeclarationKind.CONTAINER,
    "module": DeclarationKind.CONTAINER,
    "interface_declaration": DeclarationKind.RECORD,
    "class_declaration": DeclarationKind.NOMINAL,
    "abstract_class_declaration": DeclarationKind.NOMINAL,
    "type_alias_declaration": DeclarationKind.ALIAS,
    "enum_declaration": DeclarationKind.ENUM,
    "lexical_declaration": DeclarationKind.VARIABLE,
    "variable_declaration": DeclarationKind.VARIABLE,
    "function_signature": DeclarationKind.FUNCTION,
    "function_declaration": DeclarationKind.FUNCTION,
    "import_statement": DeclarationKind.IMPORT,
}


class Visibility(Enum):
    """Accessibility of a class member."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


@dataclass(frozen=True)
class DeclarationUnit:
    """A top-level statement together with its export/declare wrappers."""

    statement: Node  # outermost node, including "export" and "declare"
    declaration: Node  # innermost node carrying the declaration itself
    kind: DeclarationKind
    exported: bool


@dataclass
class DeclarationSource:
    """A parsed declaration file: identity, raw bytes and syntax tree."""

    identity: str
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        """Root node of the tree."""
        return self.tree.root_node

    def slice(self, start: int, end: int) -> str:
        """Decode a byte range of the original source."""
        return self.source[start:end].decode("utf-8")

    def text(self, node: Node) -> str:
        """Original source text of a node."""
        return self.slice(node.start_byte, node.end_byte)

    def full_text(self, node: Node) -> str:
        """Node text including its leading trivia (whitespace and comments)."""
        return self.slice(leading_trivia_start(node), node.end_byte)


def get_parser() -> Parser:
    """Get or create the TypeScript parser."""
    global _parser
    if _parser is None:
        _parser = Parser(TS_LANGUAGE)
    return _parser


def parse_declarations(text: str, identity: str) -> DeclarationSource:
    """Parse declaration text, rejecting input with syntax errors."""
    source = text.encode("utf-8")
    tree = get_parser().parse(source)
    if tree.root_node.has_error:
        error = _first_error(tree.root_node)
        line = error.start_point[0] + 1 if error is not None else 0
        msg = f"Syntax error in {identity} near line {line}"
        raise DeclarationParseError(msg)
    return DeclarationSource(identity=identity, source=source, tree=tree)


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def node_key(node: Node) -> tuple[int, int, str]:
    """Stable identity of a node within one tree."""
    return (node.start_byte, node.end_byte, node.type)


def leading_trivia_start(node: Node) -> int:
    """Byte offset where a node's leading whitespace and comments begin."""
    prev = node.prev_sibling
    while prev is not None and prev.type == "comment":
        prev = prev.prev_sibling
    if prev is not None:
        return prev.end_byte
    if node.parent is not None:
        # First child: trivia starts after the parent's opening token, if any.
        first = node.parent.children[0]
        if first.start_byte < node.start_byte and first.type != "comment":
            return first.end_byte
        return node.parent.start_byte
    return node.start_byte


def leading_comments(node: Node) -> list[Node]:
    """Comment siblings directly preceding a node, in source order."""
    comments: list[Node] = []
    prev = node.prev_sibling
    while prev is not None and prev.type == "comment":
        comments.append(prev)
        prev = prev.prev_sibling
    comments.reverse()
    return comments


def doc_tags(node: Node) -> set[str]:
    """Annotation tags from the documentation comments preceding a node."""
    tags: set[str] = set()
    for comment in leading_comments(node):
        text = comment.text.decode("utf-8")
        if text.startswith("/**"):
            tags.update(DOC_TAG_RE.findall(text))
    return tags


def declaration_unit(statement: Node) -> DeclarationUnit:
    """Unwrap export/declare wrappers and classify a statement."""
    exported = False
    node = statement

    if node.type == "export_statement":
        exported = True
        declaration = node.child_by_field_name("declaration")
        if declaration is None:
            if module_specifier(node) is not None:
                return DeclarationUnit(statement, node, DeclarationKind.REEXPORT, exported)
            return DeclarationUnit(statement, node, DeclarationKind.OTHER, exported)
        node = declaration

    if node.type == "ambient_declaration":
        if any(child.type == "global" for child in node.children):
            return DeclarationUnit(statement, node, DeclarationKind.CONTAINER, exported)
        inner = next((c for c in node.named_children if c.type != "comment"), None)
        if inner is None:
            return DeclarationUnit(statement, node, DeclarationKind.OTHER, exported)
        node = inner

    if node.type == "expression_statement" and node.named_child_count == 1:
        # Some grammar versions parse a bare "namespace X {}" as an expression.
        inner = node.named_children[0]
        if inner.type in ("internal_module", "module"):
            node = inner

    kind = _KIND_BY_NODE_TYPE.get(node.type, DeclarationKind.OTHER)
    return DeclarationUnit(statement, node, kind, exported)


def declaration_name(node: Node) -> str:
    """Simple identifier name of a declaration."""
    if node.type == "ambient_declaration":
        return "global"
    name = node.child_by_field_name("name")
    if name is None or name.type not in ("identifier", "type_identifier"):
        shape = name.type if name is not None else "missing name"
        line = node.start_point[0] + 1
        msg = f"Unhandled declaration name ({shape}) at line {line}"
        raise UnhandledConstructError(msg)
    return name.text.decode("utf-8")


def visibility(member: Node) -> Visibility:
    """Accessibility modifier of a class member (public when absent)."""
    for child in member.children:
        if child.type == "accessibility_modifier":
            return Visibility(child.text.decode("utf-8").strip())
    return Visibility.PUBLIC


def is_constructor(member: Node) -> bool:
    """Check if a class member declares the constructor."""
    name = member.child_by_field_name("name")
    return name is not None and name.text == b"constructor"


def is_accessor(member: Node) -> bool:
    """Check if a class member is a get/set accessor."""
    name = member.child_by_field_name("name")
    for child in member.children:
        if name is not None and child.start_byte >= name.start_byte:
            break
        if child.type in ("get", "set"):
            return True
    return False


def module_specifier(statement: Node) -> str | None:
    """Unquoted module specifier of an import or export statement."""
    source = statement.child_by_field_name("source")
    if source is None:
        source = next((c for c in statement.children if c.type == "string"), None)
    if source is None:
        return None
    return source.text.decode("utf-8")[1:-1]


def import_bindings(statement: Node) -> list[str]:
    """Local names bound by the named imports of an import statement."""
    names: list[str] = []
    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for bindings in clause.named_children:
            if bindings.type != "named_imports":
                continue
            for specifier in bindings.named_children:
                if specifier.type != "import_specifier":
                    continue
                local = specifier.child_by_field_name(
                    "alias"
                ) or specifier.child_by_field_name("name")
                if local is not None:
                    names.append(local.text.decode("utf-8"))
    return names


def export_bindings(statement: Node) -> list[str] | None:
    """Exported names of a re-export, or None for the wildcard forms."""
    clause = next((c for c in statement.named_children if c.type == "export_clause"), None)
    if clause is None:
        return None
    names: list[str] = []
    for specifier in clause.named_children:
        if specifier.type != "export_specifier":
            continue
        exported = specifier.child_by_field_name(
            "alias"
        ) or specifier.child_by_field_name("name")
        if exported is not None:
            names.append(exported.text.decode("utf-8"))
    return names


def leftmost_identifier(node: Node) -> str:
    """Left-most segment of a qualified name such as A.B.C."""
    current = node
    while current.type not in ("identifier", "type_identifier"):
        if current.type not in (
            "nested_type_identifier",
            "nested_identifier",
            "member_expression",
        ) or current.named_child_count == 0:
            line = node.start_point[0] + 1
            msg = f"Unhandled qualified name ({current.type}) at line {line}"
            raise UnhandledConstructError(msg)
        current = current.named_children[0]
    return current.text.decode("utf-8")


def annotated_type(node: Node | None) -> Node | None:
    """The type inside a type annotation (": T")."""
    if node is None or node.type != "type_annotation":
        return None
    return next((c for c in node.named_children if c.type != "comment"), None)


def parameter_type(parameter: Node) -> Node | None:
    """Declared type of a formal parameter."""
    return annotated_type(parameter.child_by_field_name("type"))


def direct_reference_name(type_node: Node | None) -> str | None:
    """Name of a type that is a direct reference to a simple identifier.

    Generic references count (Foo<T> is a direct reference to Foo); qualified
    names, unions and other type shapes do not.
    """
    if type_node is None:
        return None
    if type_node.type == "type_identifier":
        return type_node.text.decode("utf-8")
    if type_node.type == "generic_type":
        name = type_node.child_by_field_name("name")
        if name is not None and name.type == "type_identifier":
            return name.text.decode("utf-8")
    return None
