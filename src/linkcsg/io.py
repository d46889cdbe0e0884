"""Model JSON serialization helpers.

The document lists every surface and cell of a session so an external
writer can turn it into a transport-code input deck::

    {
      "schema": "linkcsg-model-json-v0.1",
      "components": [{"name": "Block", "base": 10000, "cells": {"Main": [10001]}}],
      "surfaces":   [{"id": 10001, "owner": "Block", "type": "plane", ...}],
      "cells":      [{"number": 10001, "material": 3, "rule": "10001 -10002 ...", ...}]
    }
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from .cells import Cell
from .rules import parse
from .surfaces import Cylinder, Plane, Sphere, Surface

SCHEMA_ID = "linkcsg-model-json-v0.1"

__all__ = [
    "SCHEMA_ID",
    "model_to_dict",
    "model_to_json",
    "model_from_dict",
]


def _serialize_component(session, component) -> Dict[str, Any]:
    entry = session.surfaces.entry(component.key_name)
    return {
        "name": component.key_name,
        "type": type(component).__name__,
        "base": entry.base,
        "count": entry.count,
        "cells": component.cell_map.to_dict(),
    }


def model_to_dict(session, *, generator: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Serialize the surfaces and cells of ``session``."""
    surfaces = []
    for number, surf in session.surfaces.definitions():
        item = {"id": number, "owner": session.surfaces.owner_of(number)}
        item.update(surf.to_dict())
        surfaces.append(item)

    cells = []
    for comp in session.components():
        for cell in comp.cells:
            item = cell.to_dict()
            item["component"] = comp.key_name
            cells.append(item)
    cells.sort(key=lambda c: c["number"])

    doc: Dict[str, Any] = {
        "schema": SCHEMA_ID,
        "components": [_serialize_component(session, c) for c in session.components()],
        "surfaces": surfaces,
        "cells": cells,
    }
    if generator:
        doc["generator"] = generator
    return doc


def model_to_json(session, indent: Optional[int] = 2, **kwargs) -> str:
    return json.dumps(model_to_dict(session, **kwargs), indent=indent)


def _rehydrate_surface(entry: Dict[str, Any]) -> Surface:
    kind = entry.get("type")
    if kind == Plane.kind:
        return Plane(entry["normal"], entry["distance"])
    if kind == Cylinder.kind:
        return Cylinder(entry["centre"], entry["axis"], entry["radius"])
    if kind == Sphere.kind:
        return Sphere(entry["centre"], entry["radius"])
    raise ValueError(f"unsupported surface type: {kind}")


def model_from_dict(doc: Dict[str, Any]) -> Tuple[Dict[int, Surface], List[Cell]]:
    """Surfaces by id and cells (sorted by number) from a model document."""
    if doc.get("schema") != SCHEMA_ID:
        raise ValueError(f"unsupported model schema: {doc.get('schema')}")

    surfaces: Dict[int, Surface] = {}
    for entry in doc.get("surfaces", []):
        number = int(entry["id"])
        if number in surfaces:
            raise ValueError(f"duplicate surface id {number}")
        surfaces[number] = _rehydrate_surface(entry)

    cells = [Cell(int(c["number"]), int(c["material"]), parse(c["rule"]),
                  float(c.get("temperature", 0.0)))
             for c in doc.get("cells", [])]
    cells.sort(key=lambda c: c.number)
    return surfaces, cells
