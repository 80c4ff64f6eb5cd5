"""
Data tools - parsing, serialization, transformation and filtering.

All data tools are pure: no side effects, safe to retry.
"""

import csv
import io
import json
import logging
from typing import Any, Dict, List, Mapping

from .base import ParamSpec, Tool, ToolSpec

logger = logging.getLogger(__name__)


# === JSON ===

class ParseJsonTool(Tool):
    """
    Parse a JSON string.

    Invalid JSON is a normal result (``valid`` false), not a failure.
    """

    spec = ToolSpec(
        id="data.json.parse",
        name="Parse JSON",
        description="Parse a JSON string into an object",
        category="data",
        subcategory="transform",
        parameters=(
            ParamSpec("text", "string", "JSON string to parse"),
        ),
        tags=("json", "parse", "transform"),
        idempotent=True,
    )

    def execute(self, text: str, **kwargs) -> Dict[str, Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            return {"valid": False, "data": None, "error": str(e)}
        return {"valid": True, "data": data}


class StringifyJsonTool(Tool):
    """Serialize data to a JSON string."""

    spec = ToolSpec(
        id="data.json.stringify",
        name="Stringify JSON",
        description="Convert an object to a JSON string",
        category="data",
        subcategory="transform",
        parameters=(
            ParamSpec("data", "any", "Data to stringify"),
            ParamSpec("pretty", "boolean", "Pretty print with indentation", required=False, default=False),
        ),
        tags=("json", "stringify", "transform"),
        idempotent=True,
    )

    def execute(self, data: Any, pretty: bool = False, **kwargs) -> Dict[str, Any]:
        if pretty:
            text = json.dumps(data, indent=2, ensure_ascii=False)
        else:
            text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        return {"text": text}


# === CSV ===

class ParseCsvTool(Tool):
    """
    Parse CSV text into a list of row dicts.

    Blank lines are skipped. Short rows are padded with empty strings.
    A single-character delimiter honours CSV quoting; a longer one splits
    each line on the literal string.
    """

    spec = ToolSpec(
        id="data.csv.parse",
        name="Parse CSV",
        description="Parse CSV text into an array of objects",
        category="data",
        subcategory="transform",
        parameters=(
            ParamSpec("text", "string", "CSV text to parse"),
            ParamSpec("delimiter", "string", "Column delimiter (any string)", required=False, default=","),
            ParamSpec("has_headers", "boolean", "First row is headers", required=False, default=True),
        ),
        tags=("csv", "parse", "transform"),
        idempotent=True,
    )

    def execute(
        self,
        text: str,
        delimiter: str = ",",
        has_headers: bool = True,
        **kwargs
    ) -> Dict[str, Any]:
        delimiter = delimiter or ","
        if len(delimiter) == 1:
            reader = csv.reader(io.StringIO(text), delimiter=delimiter)
        else:
            reader = (line.split(delimiter) for line in text.splitlines())
        lines = [
            [cell.strip() for cell in row]
            for row in reader
            if any(cell.strip() for cell in row)
        ]

        if not lines:
            return {"rows": [], "headers": [], "row_count": 0}

        if has_headers:
            headers = lines[0]
            data_lines = lines[1:]
        else:
            headers = [f"column{i + 1}" for i in range(len(lines[0]))]
            data_lines = lines

        rows = []
        for values in data_lines:
            rows.append({
                header: values[i] if i < len(values) else ""
                for i, header in enumerate(headers)
            })

        return {"rows": rows, "headers": headers, "row_count": len(rows)}


# === Transform ===

def _resolve_path(data: Any, path: str) -> Any:
    value = data
    for part in path.split("."):
        if isinstance(value, Mapping) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return None
    return value


class TransformDataTool(Tool):
    """Map fields of a source object to a new structure using dot paths."""

    spec = ToolSpec(
        id="data.transform",
        name="Transform Data",
        description="Transform data by mapping fields to new structure",
        category="data",
        subcategory="transform",
        parameters=(
            ParamSpec("data", "any", "Source data to transform"),
            ParamSpec(
                "transform", "object",
                'Mapping of output fields to input paths (e.g. {"name": "user.firstName"})',
            ),
        ),
        tags=("transform", "map", "extract"),
        idempotent=True,
    )

    def execute(self, data: Any, transform: Dict[str, str], **kwargs) -> Dict[str, Any]:
        result = {
            output_key: _resolve_path(data, str(path))
            for output_key, path in transform.items()
        }
        return {"result": result}


class FilterDataTool(Tool):
    """Keep the objects whose fields equal every filter value."""

    spec = ToolSpec(
        id="data.filter",
        name="Filter Data",
        description="Filter an array of objects by field values",
        category="data",
        subcategory="transform",
        parameters=(
            ParamSpec("data", "array", "Array of objects to filter"),
            ParamSpec("filter", "object", 'Filter criteria (e.g. {"status": "active"})'),
        ),
        tags=("filter", "query", "search"),
        idempotent=True,
    )

    def execute(self, data: List[Any], filter: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        results = [
            item for item in data
            if isinstance(item, Mapping)
            and all(key in item and item[key] == value for key, value in filter.items())
        ]
        return {"results": results, "count": len(results)}


DATA_TOOLS = [
    ParseJsonTool,
    StringifyJsonTool,
    ParseCsvTool,
    TransformDataTool,
    FilterDataTool,
]
