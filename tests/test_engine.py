"""Union outlines, line strips and input checks of the Outliner."""

from __future__ import annotations

import math

import pytest

from outliner import engine
from outliner.engine import Outliner, VerticalEdge, _link_fragments, quantize_down, quantize_up
from outliner.errors import InvalidBoxesError, OutlineInvariantError, OutlinerError

from .conftest import make_box, polygon_area

TOL = 1e-3


def _corners(polygon):
    return sorted((round(x, 3), round(y, 3)) for x, y in polygon)


class TestQuantization:
    def test_rounds_outward_to_grid(self):
        assert quantize_down(1.23456) == pytest.approx(1.2345)
        assert quantize_up(1.23451) == pytest.approx(1.2346)
        assert quantize_down(-1.23451) == pytest.approx(-1.2346)

    def test_near_duplicate_edges_collapse(self):
        assert quantize_up(10.000001) == quantize_up(10.000002)


class TestSingleBox:
    def test_one_polygon_matching_the_box(self):
        result = Outliner([make_box(10, 20, 30, 10)]).get_outlines()
        assert len(result["polygons"]) == 1
        polygon = result["polygons"][0]
        assert len(polygon) == 4
        assert _corners(polygon) == [(0, 0), (0, 1), (1, 0), (1, 1)]

        box = result["box"]
        assert box["x"] == pytest.approx(10, abs=TOL)
        assert box["y"] == pytest.approx(20, abs=TOL)
        assert box["width"] == pytest.approx(30, abs=TOL)
        assert box["height"] == pytest.approx(10, abs=TOL)

    def test_border_and_margin_inflate_the_box(self):
        result = Outliner([make_box(10, 20, 30, 10)], border_width=1, inner_margin=2).get_outlines()
        box = result["box"]
        assert box["x"] == pytest.approx(7, abs=TOL)
        assert box["y"] == pytest.approx(17, abs=TOL)
        assert box["width"] == pytest.approx(36, abs=TOL)
        assert box["height"] == pytest.approx(16, abs=TOL)

        (polygon,) = result["polygons"]
        xs = sorted({round(x, 4) for x, _ in polygon})
        ys = sorted({round(y, 4) for _, y in polygon})
        assert xs == pytest.approx([2 / 36, 34 / 36], abs=TOL)
        assert ys == pytest.approx([2 / 16, 14 / 16], abs=TOL)

    def test_walk_starts_at_bottom_of_first_left_edge(self):
        (polygon,) = Outliner([make_box(0, 0, 4, 2)]).get_outlines()["polygons"]
        expected = [(0, 1), (0, 0), (1, 0), (1, 1)]
        for point, want in zip(polygon, expected):
            assert point == pytest.approx(want, abs=TOL)

    def test_coordinates_stay_in_unit_square(self):
        result = Outliner([make_box(-5, -7, 3, 2), make_box(1, 1, 2, 2)]).get_outlines()
        for polygon in result["polygons"]:
            for x, y in polygon:
                assert -TOL <= x <= 1 + TOL
                assert -TOL <= y <= 1 + TOL


class TestUnion:
    def test_disjoint_boxes_give_one_quad_each(self):
        boxes = [make_box(0, 0, 10, 10), make_box(50, 0, 10, 10), make_box(0, 50, 10, 10)]
        polygons = Outliner(boxes).get_outlines()["polygons"]
        assert len(polygons) == 3
        assert all(len(polygon) == 4 for polygon in polygons)

    def test_partial_overlap_gives_single_polygon_with_union_area(self):
        boxes = [make_box(0, 0, 20, 20), make_box(10, 10, 20, 20)]
        result = Outliner(boxes).get_outlines()
        (polygon,) = result["polygons"]
        assert len(polygon) > 4
        box = result["box"]
        area = polygon_area(polygon) * box["width"] * box["height"]
        assert area == pytest.approx(400 + 400 - 100, rel=1e-3)

    def test_contained_box_adds_no_edges(self):
        boxes = [make_box(0, 0, 100, 100), make_box(10, 10, 20, 20)]
        (polygon,) = Outliner(boxes).get_outlines()["polygons"]
        assert _corners(polygon) == [(0, 0), (0, 1), (1, 0), (1, 1)]

    def test_duplicate_boxes_cancel(self):
        boxes = [make_box(3, 4, 5, 6), make_box(3, 4, 5, 6)]
        (polygon,) = Outliner(boxes).get_outlines()["polygons"]
        assert len(polygon) == 4

    def test_touching_words_merge_once_inflated(self):
        boxes = [make_box(0, 0, 10, 10), make_box(10, 0, 10, 10)]
        polygons = Outliner(boxes, border_width=0.5).get_outlines()["polygons"]
        assert len(polygons) == 1
        assert len(polygons[0]) == 4

    def test_frame_yields_outer_loop_and_hole(self):
        boxes = [
            make_box(0, 0, 30, 10),
            make_box(0, 20, 30, 10),
            make_box(0, 0, 10, 30),
            make_box(20, 0, 10, 30),
        ]
        polygons = Outliner(boxes).get_outlines()["polygons"]
        assert len(polygons) == 2
        areas = sorted(polygon_area(polygon) for polygon in polygons)
        assert areas == pytest.approx([1 / 9, 1.0], rel=1e-3)

    def test_multi_line_selection_forms_one_staircase(self):
        boxes = [make_box(40, 0, 60, 10), make_box(0, 10, 100, 10), make_box(0, 20, 30, 10)]
        result = Outliner(boxes).get_outlines()
        (polygon,) = result["polygons"]
        box = result["box"]
        area = polygon_area(polygon) * box["width"] * box["height"]
        assert area == pytest.approx(600 + 1000 + 300, rel=1e-3)

    def test_zero_width_caret_is_ignored(self):
        boxes = [make_box(0, 0, 0, 10), make_box(0, 0, 10, 10)]
        polygons = Outliner(boxes).get_outlines()["polygons"]
        assert len(polygons) == 1
        assert len(polygons[0]) == 4

    def test_results_are_deterministic(self):
        boxes = [make_box(0, 0, 20, 20), make_box(10, 10, 20, 20), make_box(50, 5, 5, 5)]
        first = Outliner(boxes).get_outlines()
        second = Outliner(boxes).get_outlines()
        assert first["polygons"] == second["polygons"]

        outliner = Outliner(boxes)
        assert outliner.get_outlines() == outliner.get_outlines()


class TestLastPoint:
    def test_direction_selects_adjacent_edge(self):
        boxes = [make_box(0, 0, 10, 10), make_box(20, 0, 10, 10)]
        ltr = Outliner(boxes).box["last_point"]
        rtl = Outliner(boxes, is_ltr=False).box["last_point"]
        assert ltr == pytest.approx((30, 10), abs=TOL)
        assert rtl == pytest.approx((20, 10), abs=TOL)

    def test_last_point_is_in_page_units(self):
        box = Outliner([make_box(10, 20, 30, 10)], border_width=1).box
        assert box["last_point"] == pytest.approx((41, 31), abs=TOL)


class TestLineStrips:
    def test_partitions_by_gap(self):
        boxes = [make_box(0, 0, 10, 10), make_box(12, 0, 8, 10), make_box(200, 0, 10, 10)]
        result = Outliner(boxes).get_line_strips()
        strips = result["line_strips"]
        assert len(strips) == 2
        assert strips[0]["x1"] == pytest.approx(0, abs=TOL)
        assert strips[0]["x2"] == pytest.approx(20 / 210, abs=TOL)
        assert strips[1]["x1"] == pytest.approx(200 / 210, abs=TOL)
        assert strips[1]["x2"] == pytest.approx(1, abs=TOL)
        for strip in strips:
            assert strip["y1"] == pytest.approx(0, abs=TOL)
            assert strip["y2"] == pytest.approx(1, abs=TOL)

    def test_jittered_baselines_share_one_strip(self):
        boxes = [make_box(0, 90, 10, 10), make_box(20, 85, 10, 16)]
        strips = Outliner(boxes).get_line_strips()["line_strips"]
        assert len(strips) == 1
        assert strips[0]["x1"] == pytest.approx(0, abs=TOL)
        assert strips[0]["x2"] == pytest.approx(1, abs=TOL)

    def test_outline_result_carries_strips_unless_skipped(self):
        boxes = [make_box(0, 0, 10, 10)]
        assert len(Outliner(boxes).get_outlines()["line_strips"]) == 1
        assert Outliner(boxes, skip_line_rects=True).get_outlines()["line_strips"] == []
        assert Outliner(boxes, skip_line_rects=True).get_line_strips()["line_strips"] == []


class TestInvalidInput:
    def test_empty_list(self):
        with pytest.raises(InvalidBoxesError):
            Outliner([])

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_coordinates(self, value):
        with pytest.raises(InvalidBoxesError):
            Outliner([make_box(value, 0, 1, 1)])

    def test_non_finite_border(self):
        with pytest.raises(InvalidBoxesError):
            Outliner([make_box(0, 0, 1, 1)], border_width=math.nan)

    def test_negative_size(self):
        with pytest.raises(InvalidBoxesError):
            Outliner([make_box(0, 0, -1, 1)])

    def test_missing_field(self):
        with pytest.raises(InvalidBoxesError, match="height"):
            Outliner([{"x": 0, "y": 0, "width": 1}])

    def test_boxes_without_area(self):
        with pytest.raises(InvalidBoxesError):
            Outliner([make_box(0, 0, 0, 10)])

    def test_box_ceiling(self, monkeypatch):
        monkeypatch.setattr(engine, "MAX_BOXES", 2)
        with pytest.raises(InvalidBoxesError, match="too many"):
            Outliner([make_box(i * 20, 0, 10, 10) for i in range(3)])

    def test_invalid_boxes_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            Outliner([])

    def test_coordinate_too_large_for_grid(self):
        with pytest.raises(InvalidBoxesError, match="too large"):
            Outliner([make_box(1e305, 0, 1, 1)])

    def test_border_pushing_bound_off_grid(self):
        with pytest.raises(OutlinerError):
            Outliner([make_box(0, 0, 1, 1)], border_width=1e305)

    def test_margin_overflowing_bounding_box(self):
        with pytest.raises(InvalidBoxesError, match="too large"):
            Outliner([make_box(0, 0, 1, 1)], inner_margin=1e308)


class TestInvariantChecks:
    def test_matched_fragments_link_both_ends(self):
        neighbors, unvisited = _link_fragments([(0.0, 0.0, 1.0), (1.0, 0.0, 1.0)])
        assert neighbors == [[1, 1], [0, 0]]
        assert list(unvisited) == [0, 1]

    def test_lone_fragment_cannot_close(self):
        with pytest.raises(OutlineInvariantError, match="spans"):
            _link_fragments([(0.0, 0.0, 1.0)])

    def test_connector_between_different_rows(self):
        with pytest.raises(OutlineInvariantError):
            _link_fragments([(0.0, 0.0, 1.0), (1.0, 0.0, 2.0)])

    def test_unbalanced_sweep_leaves_intervals_active(self):
        outliner = Outliner([make_box(0, 0, 10, 10)])
        outliner._edges = [VerticalEdge(0.0, 0.0, 1.0, True, True)]
        with pytest.raises(OutlineInvariantError, match="still active"):
            outliner.get_outlines()

    def test_right_edge_without_left_edge(self):
        outliner = Outliner([make_box(0, 0, 10, 10)])
        outliner._edges = [VerticalEdge(1.0, 0.0, 1.0, False, True)]
        with pytest.raises(OutlineInvariantError):
            outliner.get_outlines()
