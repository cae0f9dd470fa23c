"""
Cut list generator: turns a cabinet model's parts into cut dimensions.

Input: the model's part links (ORM rows or dicts) + the project's variables
Output: CutList dict with one item per part and totals

Edge banding lengths: top/bottom edges run along the width, left/right along
the height.
"""

import logging
from typing import Mapping

from .formulas import FormulaError, evaluate_part_dimensions
from .models import EDGE_NAMES

logger = logging.getLogger(__name__)

# Edge -> the dimension axis its length is taken from
EDGE_AXIS = {
    "top": "width",
    "bottom": "width",
    "left": "height",
    "right": "height",
}


def _get(link, key, default=None):
    if isinstance(link, Mapping):
        return link.get(key, default)
    return getattr(link, key, default)


def _part_info(link) -> tuple[str, str]:
    """(name, part_type) from the linked CabinetPart, or from the link itself."""
    part = _get(link, "cabinet_part")
    source = part if part is not None else link
    part_type = _get(source, "part_type", "")
    part_type = getattr(part_type, "value", part_type)
    return _get(source, "name", "Unnamed part"), part_type


def edge_banding_length(edges: list, dimensions: dict, quantity: int = 1) -> float:
    """Total banding length for one part line."""
    total = 0.0
    for edge in edges or []:
        if edge not in EDGE_AXIS:
            raise ValueError(f"Unknown edge '{edge}'. Allowed: {EDGE_NAMES}")
        length = dimensions.get(EDGE_AXIS[edge])
        if length is not None:
            total += length
    return total * quantity


def make_cut_item(name: str, part_type: str, quantity: int, dimensions: dict,
                  edges: list, notes: str = None) -> dict:
    """Build a CutItem dict."""
    edges = [e for e in EDGE_NAMES if e in (edges or [])]
    return {
        "part_name": name,
        "part_type": part_type,
        "quantity": quantity,
        "width": dimensions["width"],
        "height": dimensions["height"],
        "depth": dimensions["depth"],
        "edge_banding": edges,
        "edge_banding_length": round(edge_banding_length(edges, dimensions, quantity), 4),
        "notes": notes,
    }


def build_cut_list(model_parts, variables: Mapping[str, float],
                   include_optional: bool = True) -> dict:
    """
    Evaluate every part of a cabinet model.

    Stops at the first part whose formulas fail; the FormulaError is re-raised
    with the part name prefixed to its detail.
    """
    items = []
    for link in model_parts:
        if not include_optional and not _get(link, "is_required", True):
            continue
        name, part_type = _part_info(link)
        try:
            dims = evaluate_part_dimensions(link, variables)
        except FormulaError as e:
            logger.info("Cut list stopped at part '%s': %s", name, e)
            raise e.prefixed(name)
        quantity = _get(link, "quantity") or 1
        items.append(make_cut_item(
            name=name,
            part_type=part_type,
            quantity=quantity,
            dimensions=dims.model_dump(),
            edges=_get(link, "edge_banding_config") or [],
            notes=_get(link, "notes"),
        ))

    total_area = sum(
        i["width"] * i["height"] * i["quantity"]
        for i in items
        if i["width"] is not None and i["height"] is not None
    )
    return {
        "items": items,
        "total_pieces": sum(i["quantity"] for i in items),
        "total_area": round(total_area, 4),
        "total_edge_banding": round(sum(i["edge_banding_length"] for i in items), 4),
    }
