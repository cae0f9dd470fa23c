"""
Dimension assembly and cut list tests: the per-part composition of the
formula engine and the cut list built on top of it.
"""

from types import SimpleNamespace

import pytest

from cabinet_formulas.cutlist import build_cut_list, edge_banding_length, make_cut_item
from cabinet_formulas.formulas import (
    EvaluationFailed,
    FormulaSyntaxError,
    InvalidFormula,
    PartDimensions,
    evaluate_part_dimensions,
)


# ============================================================
# Dimension assembly
# ============================================================

def test_absent_depth_stays_unset(project_variables):
    dims = evaluate_part_dimensions(
        {"formula_width": "W - 2*T", "formula_height": "D", "formula_depth": None},
        project_variables,
    )
    assert dims.width == 22.5
    assert dims.height == 12
    assert dims.depth is None


def test_missing_key_and_blank_formula_are_unset(project_variables):
    dims = evaluate_part_dimensions({"formula_width": "W", "formula_height": "   "}, project_variables)
    assert dims == PartDimensions(width=24.0, height=None, depth=None)


def test_computed_zero_is_not_unset():
    dims = evaluate_part_dimensions({"formula_width": "W - W"}, {"W": 24})
    assert dims.width == 0.0
    assert dims.width is not None


def test_works_with_attribute_objects(project_variables):
    part = SimpleNamespace(formula_width="W/2 - 0.5", formula_height="H", formula_depth="T_door")
    dims = evaluate_part_dimensions(part, project_variables)
    assert (dims.width, dims.height, dims.depth) == (11.5, 30.0, 0.75)


def test_first_failing_axis_is_reported(project_variables):
    """Height and depth are both bad; height is reported and depth is never evaluated."""
    part = {"formula_width": "W", "formula_height": "X + 1", "formula_depth": "T / 0"}
    with pytest.raises(InvalidFormula) as exc:
        evaluate_part_dimensions(part, project_variables)
    assert exc.value.axis == "height"
    assert "(height)" in str(exc.value)


def test_depth_failure_tagged_with_axis(project_variables):
    part = {"formula_width": "W", "formula_height": "H", "formula_depth": "T / (T - T)"}
    with pytest.raises(EvaluationFailed) as exc:
        evaluate_part_dimensions(part, project_variables)
    assert exc.value.axis == "depth"


def test_all_axes_unset():
    assert evaluate_part_dimensions({}, {"W": 1}) == PartDimensions()


# ============================================================
# Cut list
# ============================================================

def _links():
    return [
        {
            "cabinet_part": {"name": "Top Panel", "part_type": "panel"},
            "formula_width": "W - 2*T",
            "formula_height": "D",
            "formula_depth": "T",
            "edge_banding_config": ["top"],
            "quantity": 1,
            "is_required": True,
        },
        {
            "cabinet_part": {"name": "Side Panel", "part_type": "panel"},
            "formula_width": "D",
            "formula_height": "H",
            "formula_depth": "T",
            "edge_banding_config": ["left", "top"],
            "quantity": 2,
            "is_required": True,
        },
        {
            "cabinet_part": {"name": "Shelf", "part_type": "shelf"},
            "formula_width": "W - 2*T - 0.125",
            "formula_height": "D - 0.5",
            "formula_depth": None,
            "edge_banding_config": [],
            "quantity": 1,
            "is_required": False,
        },
    ]


def test_cut_list_items(project_variables):
    cut_list = build_cut_list(_links(), project_variables)
    top, side, shelf = cut_list["items"]
    assert top["part_name"] == "Top Panel"
    assert (top["width"], top["height"], top["depth"]) == (22.5, 12.0, 0.75)
    assert top["edge_banding_length"] == 22.5
    # Edges come back in top/bottom/left/right order
    assert side["edge_banding"] == ["top", "left"]
    assert side["edge_banding_length"] == (12 + 30) * 2
    assert shelf["depth"] is None


def test_cut_list_totals(project_variables):
    cut_list = build_cut_list(_links(), project_variables)
    assert cut_list["total_pieces"] == 4
    # 22.5*12 + 12*30*2 + 22.375*11.5
    assert cut_list["total_area"] == pytest.approx(270 + 720 + 257.3125)
    assert cut_list["total_edge_banding"] == 106.5


def test_cut_list_skips_optional_parts(project_variables):
    cut_list = build_cut_list(_links(), project_variables, include_optional=False)
    assert [i["part_name"] for i in cut_list["items"]] == ["Top Panel", "Side Panel"]
    assert cut_list["total_pieces"] == 3


def test_cut_list_error_names_the_part(project_variables):
    links = _links()
    links[1]["formula_height"] = "min(H)"
    with pytest.raises(FormulaSyntaxError) as exc:
        build_cut_list(links, project_variables)
    assert exc.value.detail.startswith("Side Panel: ")
    assert exc.value.axis == "height"


def test_edge_banding_length_ignores_unset_axis():
    assert edge_banding_length(["top", "left"], {"width": 10.0, "height": None}, quantity=3) == 30.0


def test_edge_banding_length_unknown_edge():
    with pytest.raises(ValueError, match="Unknown edge"):
        edge_banding_length(["front"], {"width": 1.0, "height": 1.0})


def test_make_cut_item_orders_edges():
    item = make_cut_item("Door", "door", 1, {"width": 11.5, "height": 30.0, "depth": 0.75},
                         ["right", "left", "bottom", "top"])
    assert item["edge_banding"] == ["top", "bottom", "left", "right"]
    assert item["edge_banding_length"] == 11.5 * 2 + 30 * 2
