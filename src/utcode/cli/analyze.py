"""Record schema analysis CLI command."""

from __future__ import annotations

import importlib.util
import inspect
import sys
from pathlib import Path
from typing import Any

from ..codec.schema import RecordSchema, resolve
from ..codec.shapes import is_record_type
from ..exceptions import SchemaError

_MODULE_NAME = "utcode_user_module"


def analyze_file(file_path: Path) -> None:
    """Print the wire schema of every record class defined in a Python file.

    Args:
        file_path: Path to Python file containing Pydantic models or dataclasses
    """
    spec = importlib.util.spec_from_file_location(_MODULE_NAME, file_path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Could not load module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[_MODULE_NAME] = module
    spec.loader.exec_module(module)

    # Only classes defined in this file, not imported ones
    record_classes = [
        obj
        for _name, obj in inspect.getmembers(module, inspect.isclass)
        if is_record_type(obj) and obj.__module__ == _MODULE_NAME
    ]

    if not record_classes:
        print(f"No record classes found in {file_path}")
        return

    print("|" * 7, "utcode: self-describing value codec", "|" * 7)
    print(f"{len(record_classes)} record{'s' if len(record_classes) != 1 else ''} loaded.")
    print()

    for record_class in record_classes:
        analyze_record_class(record_class)


def analyze_record_class(record_class: type[Any]) -> None:
    """Print the ordered field schema of a single record class.

    Args:
        record_class: Record class to analyze
    """
    schema: RecordSchema = resolve(record_class)

    print(f"{'=' * 19} {record_class.__name__} {'=' * 19}")
    print(f"{len(schema)} field{'s' if len(schema) != 1 else ''} on the wire")

    for i, field_schema in enumerate(schema.fields, 1):
        field_desc = f"{i}. {field_schema.wire_key}"
        try:
            spec = field_schema.spec
        except SchemaError:
            # Encodable through a custom writer only
            type_desc = f"{_annotation_name(field_schema.annotation)} (encode only)"
        else:
            type_desc = spec.describe()
            if spec.optional:
                type_desc += " (optional)"
        if field_schema.wire_key != field_schema.name:
            type_desc += f" <- {field_schema.name}"

        dots = "." * max(1, 40 - len(field_desc))
        print(f"        {field_desc}{dots}{type_desc}")

    print()


def _annotation_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return repr(annotation)
