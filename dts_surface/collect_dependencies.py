"""Single pass over one declaration file collecting kept types and references."""

from collections.abc import Callable

from tree_sitter import Node

from dts_surface.errors import UnhandledConstructError
from dts_surface.frontend import (
    BLOCK_TYPES,
    CLASS_BODY_TYPES,
    CLASS_MEMBER_TYPES,
    NAMED_DECLARATION_TYPES,
    RECORD_BODY_TYPES,
    TYPE_DECLARATION_KINDS,
    DeclarationKind,
    DeclarationSource,
    Visibility,
    declaration_name,
    declaration_unit,
    doc_tags,
    export_bindings,
    import_bindings,
    leftmost_identifier,
    module_specifier,
    node_key,
    visibility,
)
from dts_surface.generator_config import GeneratorConfig
from dts_surface.intrinsic_types import is_intrinsic_type
from dts_surface.reference_graph import TOP_LEVEL
from dts_surface.resolution_state import WILDCARD, ReferenceOrigin, ResolutionState

HERITAGE_CLAUSE_TYPES = {"implements_clause", "extends_type_clause"}


class DependencyCollector:
    """Walks a parsed file and fills a ResolutionState.

    Excluded declarations and members are pruned as whole subtrees, so the
    names they mention are never collected.
    """

    def __init__(
        self, config: GeneratorConfig, source: DeclarationSource, state: ResolutionState
    ) -> None:
        """Initialize the collector for one file."""
        self.config = config
        self.source = source
        self.state = state
        self.containers: list[str] = [TOP_LEVEL]
        self.in_exported_container = False

    def collect(self) -> ResolutionState:
        """Run the pass over the whole file."""
        self._visit_block(self.source.root, top_level=True)
        return self.state

    # -----------------------------
    # Statements
    # -----------------------------

    def _visit_block(self, block: Node, *, top_level: bool) -> None:
        for statement in block.named_children:
            if statement.type != "comment":
                self._visit_statement(statement, top_level=top_level)

    def _visit_statement(self, statement: Node, *, top_level: bool) -> None:
        unit = declaration_unit(statement)
        excluded = self.config.is_excluded(doc_tags(statement))
        exported = unit.exported or self.in_exported_container

        if unit.kind in TYPE_DECLARATION_KINDS:
            if not exported or excluded:
                return
            self._visit_type_declaration(unit.declaration, unit.kind, statement, top_level)
        elif unit.kind is DeclarationKind.VARIABLE:
            if not exported or excluded:
                return
            if top_level:
                self.state.add_exported_variable(self.source.full_text(statement))
            self._visit(unit.declaration)
        elif unit.kind is DeclarationKind.IMPORT:
            self._record_import(statement)
        elif unit.kind is DeclarationKind.REEXPORT:
            self._record_reexport(statement)
        else:
            self._visit(statement)

    def _visit_type_declaration(
        self, declaration: Node, kind: DeclarationKind, statement: Node, top_level: bool
    ) -> None:
        # Nested declarations are part of their container's text.
        if top_level:
            name = declaration_name(declaration)
            if self.config.is_dropped(name):
                return
            self.state.add_found_type(name, self.source.full_text(statement))
            self.containers.append(name)
        try:
            if kind is DeclarationKind.CONTAINER:
                self._visit_container(declaration)
            else:
                self._visit(declaration)
        finally:
            if top_level:
                self.containers.pop()

    def _visit_container(self, declaration: Node) -> None:
        body = declaration.child_by_field_name("body")
        if body is None:
            body = next(
                (c for c in declaration.named_children if c.type == "statement_block"), None
            )
        if body is None:
            return
        previous = self.in_exported_container
        self.in_exported_container = True
        try:
            self._visit_block(body, top_level=False)
        finally:
            self.in_exported_container = previous

    def _record_import(self, statement: Node) -> None:
        specifier = module_specifier(statement)
        if specifier is None:
            return
        for name in import_bindings(statement):
            self.state.imported[name] = specifier

    def _record_reexport(self, statement: Node) -> None:
        specifier = module_specifier(statement)
        if specifier is None:
            return
        names = export_bindings(statement)
        if names is None:
            self.state.add_recursive_target(specifier, WILDCARD)
            return
        for name in names:
            self.state.add_recursive_target(specifier, name)
            self._add_reference(name, ReferenceOrigin.REEXPORT)

    # -----------------------------
    # Nodes
    # -----------------------------

    def _visit(self, node: Node) -> None:
        t = node.type
        if t == "comment":
            return
        if t in BLOCK_TYPES:
            self._visit_block(node, top_level=False)
        elif t in CLASS_BODY_TYPES:
            self._visit_members(node, self._keep_class_member)
        elif t in RECORD_BODY_TYPES and node.parent is not None and (
            node.parent.type == "interface_declaration"
        ):
            self._visit_members(node, self._keep_record_member)
        elif t == "extends_clause":
            self._visit_extends_clause(node)
        elif t in HERITAGE_CLAUSE_TYPES:
            for child in node.named_children:
                self._visit_heritage_type(child)
        elif t == "type_identifier":
            self._add_reference(self._text(node), ReferenceOrigin.TYPE_IDENTIFIER)
        elif t == "nested_type_identifier":
            self._add_reference(leftmost_identifier(node), ReferenceOrigin.TYPE_QUALIFIED)
        else:
            self._visit_children(node)

    def _visit_children(self, node: Node) -> None:
        skip = None
        if node.type in NAMED_DECLARATION_TYPES:
            name = node.child_by_field_name("name")
            skip = node_key(name) if name is not None else None
        for child in node.named_children:
            if skip is not None and node_key(child) == skip:
                continue
            self._visit(child)

    def _visit_members(self, body: Node, keep: Callable[[Node], bool]) -> None:
        for member in body.named_children:
            if member.type == "comment" or not keep(member):
                continue
            self._visit(member)

    def _keep_class_member(self, member: Node) -> bool:
        if member.type not in CLASS_MEMBER_TYPES:
            return True
        if visibility(member) is not Visibility.PUBLIC:
            return False
        return not self.config.is_excluded(doc_tags(member))

    def _keep_record_member(self, member: Node) -> bool:
        return not self.config.is_excluded(doc_tags(member))

    def _visit_extends_clause(self, clause: Node) -> None:
        for value in clause.children_by_field_name("value"):
            if value.type == "identifier":
                self._add_reference(self._text(value), ReferenceOrigin.HERITAGE_IDENTIFIER)
            elif value.type == "member_expression":
                self._add_reference(
                    leftmost_identifier(value), ReferenceOrigin.HERITAGE_QUALIFIED
                )
            else:
                self._unhandled(value)
        for arguments in clause.children_by_field_name("type_arguments"):
            self._visit(arguments)

    def _visit_heritage_type(self, node: Node) -> None:
        if node.type == "comment":
            return
        target = node
        if node.type == "generic_type":
            target = node.child_by_field_name("name")
        if target is not None and target.type == "type_identifier":
            self._add_reference(self._text(target), ReferenceOrigin.HERITAGE_IDENTIFIER)
        elif target is not None and target.type == "nested_type_identifier":
            self._add_reference(
                leftmost_identifier(target), ReferenceOrigin.HERITAGE_QUALIFIED
            )
        else:
            self._unhandled(node)
        if node.type == "generic_type":
            arguments = node.child_by_field_name("type_arguments")
            if arguments is not None:
                self._visit(arguments)

    # -----------------------------
    # Helpers
    # -----------------------------

    def _add_reference(self, name: str, origin: ReferenceOrigin) -> None:
        if is_intrinsic_type(name) or self.config.is_dropped(name):
            return
        self.state.add_reference(self.containers[-1], name, origin)

    def _text(self, node: Node) -> str:
        return self.source.text(node)

    def _unhandled(self, node: Node) -> None:
        line = node.start_point[0] + 1
        msg = (
            f"Unhandled type mention ({node.type}) in {self.source.identity} "
            f"at line {line}"
        )
        raise UnhandledConstructError(msg)
