"""
Form structure - the tree the admin client renders an edit page from.

The flat schema is walked in order: every section a field opens becomes a
container or tab node, the field becomes a leaf, and every end marker
closes the innermost open section. Nested admin models (complex widgets)
are described once in ``foreign_types`` and referenced by type name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from ..faults import MissingEndContainerFault
from ..fields import (
    ComplexWidget,
    FieldDescriptor,
    SectionKind,
    SelectWidget,
    WidgetKind,
    type_name,
)
from .model import AdminModel

logger = logging.getLogger("adminkit.structure")


class NodeType(str, Enum):
    ROOT = "root"
    CONTAINER = "container"
    TAB = "tab"
    FIELD = "field"
    SUB_TYPE = "sub_type"


_SECTION_NODES = {
    SectionKind.CONTAINER: NodeType.CONTAINER,
    SectionKind.TAB: NodeType.TAB,
}

_MARKER_NAMES = {
    SectionKind.CONTAINER: "Container",
    SectionKind.TAB: "Tab",
}


@dataclass
class FormNode:
    """A root, container or tab node holding child nodes."""

    name: str
    node_type: NodeType
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List["FormNode | FieldNode"] = field(default_factory=list)
    kind: Optional[SectionKind] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nodeType": self.node_type.value,
            "attributes": self.attributes,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class FieldNode:
    """A leaf: one field (or a nested model for complex fields)."""

    name: str
    node_type: NodeType
    display_name: str
    field_type: WidgetKind
    property_type: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    value: Any = None
    input_options_key: Optional[str] = None
    complex_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "nodeType": self.node_type.value,
            "displayName": self.display_name,
            "fieldType": self.field_type.value,
            "propertyType": self.property_type,
            "attributes": self.attributes,
            "value": self.value,
        }
        if self.input_options_key is not None:
            data["inputOptionsKey"] = self.input_options_key
        if self.complex_type is not None:
            data["complexType"] = self.complex_type
        return data


@dataclass
class FormStructure:
    model_type: str
    root: FormNode
    input_options: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    foreign_types: Dict[str, Optional[FormNode]] = field(default_factory=dict)
    model: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modelType": self.model_type,
            "structure": self.root.to_dict(),
            "inputOptions": self.input_options,
            "foreignTypes": {
                name: node.to_dict() if node is not None else None
                for name, node in self.foreign_types.items()
            },
            "model": self.model,
        }


class StructureBuilder:
    """Builds one ``FormStructure``; not reusable across builds."""

    def __init__(self):
        self.input_options: Dict[str, List[Dict[str, Any]]] = {}
        self.foreign_types: Dict[str, Optional[FormNode]] = {}

    def build(self, model_type: Type[AdminModel], instance: Optional[AdminModel] = None) -> FormStructure:
        root = self.build_tree(model_type, instance)
        structure = FormStructure(
            model_type=model_type.__name__,
            root=root,
            input_options=self.input_options,
            foreign_types=self.foreign_types,
            model=_model_values(model_type, instance) if instance is not None else None,
        )
        logger.debug(
            "Built form structure for %s (%d foreign types)",
            model_type.__name__, len(self.foreign_types),
        )
        return structure

    def build_tree(self, model_type: Type[AdminModel], instance: Optional[AdminModel] = None) -> FormNode:
        root = FormNode(name=model_type.__name__, node_type=NodeType.ROOT)
        stack: List[FormNode] = [root]

        for descriptor in model_type.schema():
            for section in descriptor.opens:
                node = FormNode(
                    name=section.title,
                    node_type=_SECTION_NODES[section.kind],
                    attributes=section.to_dict(),
                    kind=section.kind,
                )
                stack[-1].children.append(node)
                stack.append(node)

            stack[-1].children.append(self._field_node(model_type, descriptor, instance))

            for end in descriptor.closes:
                marker = _MARKER_NAMES[end.kind]
                if len(stack) == 1:
                    raise MissingEndContainerFault(
                        f"Too many End{marker} attributes found. Check your model definition.",
                        metadata={"model": model_type.__name__, "field": descriptor.name},
                    )
                if stack[-1].kind is not end.kind:
                    raise MissingEndContainerFault(
                        f"End{marker} found but the current container is of another type. "
                        f"Check around property: {descriptor.name}",
                        metadata={"model": model_type.__name__, "field": descriptor.name},
                    )
                stack.pop()

        if len(stack) > 1:
            unclosed = stack[-1]
            marker = _MARKER_NAMES[unclosed.kind]
            raise MissingEndContainerFault(
                f"Missing End{marker} for {marker} named '{unclosed.name}'. "
                "Check your model definition.",
                metadata={"model": model_type.__name__, "section": unclosed.name},
            )

        return root

    def _field_node(
        self,
        model_type: Type[AdminModel],
        descriptor: FieldDescriptor,
        instance: Optional[AdminModel],
    ) -> FieldNode:
        widget = descriptor.widget
        node = FieldNode(
            name=descriptor.name,
            node_type=NodeType.FIELD,
            display_name=descriptor.display_label,
            field_type=descriptor.widget_kind,
            property_type=type_name(descriptor.value_type),
            attributes=_field_attributes(descriptor),
        )

        if instance is not None and descriptor.widget_kind is not WidgetKind.PASSWORD:
            node.value = widget.to_storage(getattr(instance, descriptor.name))

        if isinstance(widget, SelectWidget):
            key = f"{model_type.__name__}.{descriptor.name}"
            self.input_options[key] = widget.resolve_options()
            node.input_options_key = key

        if isinstance(widget, ComplexWidget):
            node.node_type = NodeType.SUB_TYPE
            node.complex_type = widget.model_type.__name__
            self._register_foreign(widget.model_type)

        return node

    def _register_foreign(self, model_type: Type[AdminModel]) -> None:
        name = model_type.__name__
        if name in self.foreign_types:
            return
        # placeholder first so self-referencing models terminate
        self.foreign_types[name] = None
        self.foreign_types[name] = self.build_tree(model_type)


def _field_attributes(descriptor: FieldDescriptor) -> Dict[str, Any]:
    return {
        **descriptor.widget.attributes(),
        "tooltip": descriptor.tooltip,
        "required": descriptor.required,
        "readOnly": descriptor.read_only,
        "visible": descriptor.visible,
        "width": descriptor.width.value,
        "visibility": descriptor.visibility.to_dict(),
    }


def _model_values(model_type: Type[AdminModel], instance: AdminModel) -> Dict[str, Any]:
    values = instance.to_dict(storage=True)
    for descriptor in model_type.schema():
        if descriptor.widget_kind is WidgetKind.PASSWORD:
            values[descriptor.name] = None
    return values


def build_structure(model_type: Type[AdminModel], instance: Optional[AdminModel] = None) -> FormStructure:
    """Edit-page structure of ``model_type``, optionally filled from ``instance``."""
    return StructureBuilder().build(model_type, instance)
