"""Redaction and normalization of the concatenated kept declarations."""

from collections.abc import Callable

from tree_sitter import Node

from dts_surface.frontend import (
    BLOCK_TYPES,
    CLASS_MEMBER_TYPES,
    IDENTIFIER_TYPES,
    PARAMETER_TYPES,
    RECORD_BODY_TYPES,
    TYPE_DECLARATION_KINDS,
    DeclarationKind,
    DeclarationSource,
    Visibility,
    annotated_type,
    declaration_unit,
    direct_reference_name,
    doc_tags,
    is_accessor,
    is_constructor,
    node_key,
    parameter_type,
    visibility,
)
from dts_surface.generator_config import GeneratorConfig

SEPARATORS = (b";", b",")
ENUM_LITERAL_TYPES = {"number", "string"}
METHOD_TYPES = {"method_signature", "method_definition", "abstract_method_signature"}

Emitter = Callable[[Node], str | None]


class DeclarationTransformer:
    """Rewrites a declaration tree according to the redaction policy.

    The tree is printed by splicing the original source: every node is
    emitted as its own text with rewritten children substituted and dropped
    children (with their leading comments) removed.
    """

    def __init__(self, config: GeneratorConfig) -> None:
        """Initialize the transformer with the redaction policy."""
        self.config = config
        self.source: DeclarationSource | None = None
        self.exported_module = False
        self.overrides: dict[tuple[int, int, str], str | None] = {}
        self.handlers: dict[str, Emitter] = {
            "program": self._emit_block,
            "statement_block": self._emit_block,
            "class_body": self._emit_class_body,
            "class_declaration": self._emit_class,
            "abstract_class_declaration": self._emit_class,
            "enum_declaration": self._emit_enum,
            **dict.fromkeys(RECORD_BODY_TYPES, self._emit_record_body),
            **dict.fromkeys(IDENTIFIER_TYPES, self._emit_identifier),
        }

    def prune(self, source: DeclarationSource) -> str:
        """Apply the policy to a parsed tree and return the printed result."""
        self.source = source
        self.exported_module = False
        self.overrides = {}
        return self._emit(source.root) or ""

    # -----------------------------
    # Printing
    # -----------------------------

    def _emit(self, node: Node) -> str | None:
        key = node_key(node)
        if key in self.overrides:
            return self.overrides[key]
        handler = self.handlers.get(node.type)
        if handler is not None:
            return handler(node)
        if node.child_count == 0:
            return self._text(node)
        return self._splice(node)

    def _splice(
        self,
        node: Node,
        emit: Emitter | None = None,
        keep: Callable[[Node], bool] | None = None,
    ) -> str:
        """Rebuild node text from its children.

        A child is dropped when keep rejects it or emit returns None; its
        leading comments and a directly following separator go with it.
        """
        emit = emit or self._emit
        source = self._require_source()
        parts: list[str] = []
        cursor = node.start_byte
        pending: list[Node] = []

        for child in node.children:
            if child.start_byte < cursor:
                continue  # separator already consumed with a dropped sibling
            if child.type == "comment":
                pending.append(child)
                continue
            out = None if keep is not None and not keep(child) else emit(child)
            if out is None:
                pending = []
                cursor = child.end_byte
                if source.source[cursor : cursor + 1] in SEPARATORS and (
                    node.type not in BLOCK_TYPES
                ):
                    cursor += 1
                continue
            for comment in pending:
                parts.append(source.slice(cursor, comment.end_byte))
                cursor = comment.end_byte
            pending = []
            parts.append(source.slice(cursor, child.start_byte))
            parts.append(out)
            cursor = child.end_byte

        parts.append(source.slice(cursor, node.end_byte))
        return "".join(parts)

    def _text(self, node: Node) -> str:
        return self._require_source().text(node)

    def _require_source(self) -> DeclarationSource:
        if self.source is None:
            msg = "prune() must be called before emitting"
            raise RuntimeError(msg)
        return self.source

    # -----------------------------
    # Statements
    # -----------------------------

    def _emit_block(self, node: Node) -> str:
        return self._splice(node, emit=self._emit_statement)

    def _emit_statement(self, statement: Node) -> str | None:
        unit = declaration_unit(statement)
        excluded = self.config.is_excluded(doc_tags(statement))

        if unit.kind in TYPE_DECLARATION_KINDS:
            if not (unit.exported or self.exported_module) or excluded:
                return None
            if unit.kind is DeclarationKind.CONTAINER:
                previous = self.exported_module
                self.exported_module = True
                try:
                    return self._emit(statement)
                finally:
                    self.exported_module = previous

        if unit.kind is DeclarationKind.VARIABLE and self.exported_module and excluded:
            return None

        return self._emit(statement)

    # -----------------------------
    # Declarations
    # -----------------------------

    def _emit_class(self, node: Node) -> str:
        name = node.child_by_field_name("name")
        type_parameters = node.child_by_field_name("type_parameters")
        if (
            name is not None
            and type_parameters is not None
            and self._text(name) in self.config.drop_generics
        ):
            self.overrides[node_key(type_parameters)] = None
        return self._splice(node)

    def _emit_enum(self, node: Node) -> str:
        if not self.config.flatten_enums:
            return self._splice(node)

        body = node.child_by_field_name("body")
        members = [c for c in body.named_children if c.type != "comment"] if body else []
        literals: list[str] = []
        for index, member in enumerate(members):
            value = None
            if member.type == "enum_assignment":
                value = member.child_by_field_name("value")
            if value is not None and value.type in ENUM_LITERAL_TYPES:
                literals.append(self._text(value))
            else:
                literals.append(str(index))

        name = node.child_by_field_name("name")
        alias = self._emit(name) if name is not None else ""
        union = " | ".join(literals) if literals else "never"
        return f"type {alias} = {union};"

    def _emit_record_body(self, node: Node) -> str:
        if node.parent is None or node.parent.type != "interface_declaration":
            return self._splice(node)
        return self._splice(node, keep=self._keep_record_member)

    def _keep_record_member(self, member: Node) -> bool:
        return not self.config.is_excluded(doc_tags(member))

    def _emit_identifier(self, node: Node) -> str:
        text = self._text(node)
        return self.config.rename_types.get(text, text)

    # -----------------------------
    # Class members
    # -----------------------------

    def _emit_class_body(self, node: Node) -> str:
        return self._splice(node, emit=self._emit_class_member, keep=self._keep_class_member)

    def _keep_class_member(self, member: Node) -> bool:
        if member.type not in CLASS_MEMBER_TYPES:
            return True
        if visibility(member) is not Visibility.PUBLIC:
            return False
        return not self.config.is_excluded(doc_tags(member))

    def _emit_class_member(self, member: Node) -> str | None:
        if (
            member.type in METHOD_TYPES
            and not is_constructor(member)
            and not is_accessor(member)
        ):
            self._rewrite_method(member)
        return self._emit(member)

    def _rewrite_method(self, method: Node) -> None:
        """Register the return type and parameter rewrites for a method."""
        return_type = annotated_type(method.child_by_field_name("return_type"))
        if direct_reference_name(return_type) in self.config.convert_to_any:
            self.overrides[node_key(return_type)] = "any"

        parameters = method.child_by_field_name("parameters")
        if parameters is None:
            return
        params = [c for c in parameters.named_children if c.type in PARAMETER_TYPES]

        # Only the final parameter may be dropped, and only if it is optional.
        if params:
            last = params[-1]
            if (
                last.type == "optional_parameter"
                and direct_reference_name(parameter_type(last)) in self.config.drop_types
            ):
                self.overrides[node_key(last)] = None
                comma = last.prev_sibling
                while comma is not None and comma.type == "comment":
                    comma = comma.prev_sibling
                if comma is not None and comma.type == ",":
                    self.overrides[node_key(comma)] = ""
                params = params[:-1]

        for param in params:
            param_type = parameter_type(param)
            if direct_reference_name(param_type) in self.config.convert_to_any:
                self.overrides[node_key(param_type)] = "any"
