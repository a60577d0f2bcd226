"""
adminkit schema - field registration, schemas and form structures.

Core exports:
- AdminModel: base class of admin models
- SchemaBuilder: explicit field registration
- Schema: immutable ordered field metadata
- SchemaCache / schema_cache: per-type schema cache
- build_structure: edit-page tree of a model
"""

from .core import Schema
from .builder import SchemaBuilder
from .model import AdminModel, SaveContext, SchemaCache, schema_cache
from .structure import (
    FieldNode,
    FormNode,
    FormStructure,
    NodeType,
    StructureBuilder,
    build_structure,
)

__all__ = [
    "Schema",
    "SchemaBuilder",
    "AdminModel",
    "SaveContext",
    "SchemaCache",
    "schema_cache",
    "FieldNode",
    "FormNode",
    "FormStructure",
    "NodeType",
    "StructureBuilder",
    "build_structure",
]
