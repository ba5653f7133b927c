"""
Unit tests for tidepool/core/heat/projection.py
"""

import math

import numpy as np
import pytest

from tidepool.core.heat.projection import WEB_MERCATOR_M_PER_PX_Z0, WebMercatorViewport, project_points
from tidepool.geo_utils import offset_coordinate
from tidepool.utils.error_handling import InvalidCoordinateError

CENTER = (34.0909, -118.2826)


class LinearViewport:
    """Viewport without project_many."""

    width = 10
    height = 10

    def project(self, lat, lon):
        return lon * 2.0, lat * 3.0


class TestWebMercatorViewport:
    """EPSG:4326 -> EPSG:3857 -> pixels."""

    def test_center_maps_to_middle(self):
        viewport = WebMercatorViewport(CENTER, 2.0, 400, 300)
        x, y = viewport.project(*CENTER)
        assert x == pytest.approx(200.0)
        assert y == pytest.approx(150.0)

    def test_axes(self):
        viewport = WebMercatorViewport(CENTER, 1.0, 400, 400)
        north = viewport.project(*offset_coordinate(CENTER, 50.0, 0.0))
        east = viewport.project(*offset_coordinate(CENTER, 0.0, 50.0))
        assert north[1] < 200.0
        assert north[0] == pytest.approx(200.0)
        assert east[0] > 200.0

    def test_ground_scale(self):
        viewport = WebMercatorViewport(CENTER, 0.5, 400, 400)
        x, _ = viewport.project(*offset_coordinate(CENTER, 0.0, 40.0))
        assert x - 200.0 == pytest.approx(80.0, rel=0.01)

    def test_project_many_matches_project(self):
        viewport = WebMercatorViewport(CENTER, 3.0, 256, 256)
        points = [offset_coordinate(CENTER, n, e) for n, e in [(0, 0), (30, -20), (-90, 45)]]
        many = viewport.project_many(points)
        single = np.array([viewport.project(*p) for p in points])
        assert many.shape == (3, 2)
        assert np.allclose(many, single)

    def test_from_zoom(self):
        viewport = WebMercatorViewport.from_zoom(CENTER, 15, 256, 256)
        expected = WEB_MERCATOR_M_PER_PX_Z0 / 2 ** 15 * math.cos(math.radians(CENTER[0]))
        assert viewport.ground_meters_per_pixel == pytest.approx(expected)

    @pytest.mark.parametrize("mpp,width,height", [(0.0, 10, 10), (1.0, 0, 10), (1.0, 10, -1)])
    def test_invalid_arguments(self, mpp, width, height):
        with pytest.raises(ValueError):
            WebMercatorViewport(CENTER, mpp, width, height)

    def test_invalid_center(self):
        with pytest.raises(InvalidCoordinateError):
            WebMercatorViewport((120.0, 0.0), 1.0, 10, 10)


class TestProjectPoints:
    def test_falls_back_to_project(self):
        result = project_points(LinearViewport(), [(1.0, 2.0), (3.0, 4.0)])
        assert result.tolist() == [[4.0, 3.0], [8.0, 9.0]]

    def test_empty(self):
        assert project_points(LinearViewport(), []).shape == (0, 2)
        assert WebMercatorViewport(CENTER, 1.0, 10, 10).project_many([]).shape == (0, 2)
