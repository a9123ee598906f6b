"""Tests for scene-level ray queries.

Tests cover:
- Ellipsoid storage and validation
- Closest hit across several ellipsoids, independent of insertion order
- Tie breaking by insertion order
- Normal flipping for rays leaving an ellipsoid from the inside
- Shadow queries, including the empty scene
"""

import math

import pytest
import taichi as ti


def _first_intersect(origin, direction):
    """Run first_intersect in a kernel and return (hit, t, point, normal, material_id)."""
    from src.raylet.scene.intersection import first_intersect

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3):
        record = first_intersect(o, d)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        material_id[None] = record.material_id

    test_kernel(ti.math.vec3(*origin), ti.math.vec3(*direction))
    return hit[None], t_val[None], point[None], normal[None], material_id[None]


def _shadow_intersect(origin, direction):
    from src.raylet.scene.intersection import shadow_intersect

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3):
        result[None] = shadow_intersect(o, d)

    test_kernel(ti.math.vec3(*origin), ti.math.vec3(*direction))
    return result[None]


class TestEllipsoidStorage:
    """Tests for adding and clearing ellipsoids."""

    def test_add_ellipsoid(self):
        """Test indices and count."""
        from src.raylet.scene.intersection import add_ellipsoid, get_ellipsoid_count

        assert add_ellipsoid((0, 0, 0), (0.2, 0.1, 0.3), material_id=0) == 0
        assert add_ellipsoid((1, 0, 0), (0.2, 0.1, 0.3), material_id=1) == 1
        assert get_ellipsoid_count() == 2

    def test_clear_scene(self):
        """Test clear_scene removes all ellipsoids."""
        from src.raylet.scene.intersection import add_ellipsoid, clear_scene, get_ellipsoid_count

        add_ellipsoid((0, 0, 0), (0.2, 0.1, 0.3))
        clear_scene()
        assert get_ellipsoid_count() == 0

    @pytest.mark.parametrize("axes", [(0.0, 1.0, 1.0), (1.0, -1.0, 1.0), (1.0, 1.0, math.nan)])
    def test_invalid_axes_rejected(self, axes):
        """Test non-positive or NaN semi-axes raise ValueError."""
        from src.raylet.scene.intersection import add_ellipsoid

        with pytest.raises(ValueError):
            add_ellipsoid((0, 0, 0), axes)

    def test_nan_cut_rejected(self):
        """Test a NaN clip plane raises ValueError."""
        from src.raylet.scene.intersection import add_ellipsoid

        with pytest.raises(ValueError):
            add_ellipsoid((0, 0, 0), (1, 1, 1), cut_y=math.nan)

    def test_capacity_exceeded(self):
        """Test RuntimeError when the scene is full."""
        from src.raylet.scene.intersection import MAX_ELLIPSOIDS, add_ellipsoid

        for i in range(MAX_ELLIPSOIDS):
            add_ellipsoid((float(i), 0, 0), (0.1, 0.1, 0.1))
        with pytest.raises(RuntimeError):
            add_ellipsoid((0, 0, 0), (0.1, 0.1, 0.1))


class TestFirstIntersect:
    """Tests for the closest-hit query."""

    def test_empty_scene_misses(self):
        """Test an empty scene returns a miss with material -1."""
        hit, _, _, _, material_id = _first_intersect((0, 0, 2), (0, 0, -1))
        assert hit == 0
        assert material_id == -1

    def test_single_hit(self):
        """Test a single ellipsoid hit carries its material ID."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 0, 0), (0.2, 0.1, 0.3), material_id=7)
        hit, t, _, normal, material_id = _first_intersect((0, 0, 2), (0, 0, -1))

        assert hit == 1
        assert abs(t - 1.7) < 1e-5
        assert abs(normal[2] - 1.0) < 1e-5
        assert material_id == 7

    def test_closest_of_two(self):
        """Test the nearer ellipsoid wins."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 0, -2), (0.5, 0.5, 0.5), material_id=0)
        add_ellipsoid((0, 0, 0), (0.5, 0.5, 0.5), material_id=1)
        hit, t, _, _, material_id = _first_intersect((0, 0, 2), (0, 0, -1))

        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert material_id == 1

    def test_closest_of_two_reversed_order(self):
        """Test insertion order does not change the closest hit."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 0, 0), (0.5, 0.5, 0.5), material_id=1)
        add_ellipsoid((0, 0, -2), (0.5, 0.5, 0.5), material_id=0)
        hit, t, _, _, material_id = _first_intersect((0, 0, 2), (0, 0, -1))

        assert hit == 1
        assert abs(t - 1.5) < 1e-5
        assert material_id == 1

    def test_tie_keeps_first_inserted(self):
        """Test identical ellipsoids resolve to the first one added."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 0, 0), (0.5, 0.5, 0.5), material_id=3)
        add_ellipsoid((0, 0, 0), (0.5, 0.5, 0.5), material_id=4)
        _, _, _, _, material_id = _first_intersect((0, 0, 2), (0, 0, -1))

        assert material_id == 3

    def test_normal_flipped_from_inside(self):
        """Test the returned normal faces the ray when exiting an ellipsoid."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 0, 0), (1.0, 1.0, 1.0), material_id=0)
        hit, t, _, normal, _ = _first_intersect((0, 0, 0), (0, 0, 1))

        assert hit == 1
        assert abs(t - 1.0) < 1e-5
        assert abs(normal[2] + 1.0) < 1e-5

    @pytest.mark.parametrize(
        "origin,direction",
        [
            ((0, 0, 3), (0, 0, -1)),
            ((0, 0, 0), (1, 0, 0)),
            ((0.3, 2.0, 0.2), (0, -1, 0)),
            ((-2.0, 0.1, 0.0), (1, 0, 0)),
        ],
    )
    def test_normal_faces_ray(self, origin, direction):
        """Test dot(direction, normal) <= 0 for every hit."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 0, 0), (0.8, 0.5, 0.6), material_id=0)
        hit, _, _, normal, _ = _first_intersect(origin, direction)

        assert hit == 1
        d = sum(normal[i] * direction[i] for i in range(3))
        assert d <= 1e-6

    def test_clipped_hit_falls_through_to_next(self):
        """Test a clipped ellipsoid lets the ray reach the one behind it."""
        from src.raylet.scene.intersection import add_ellipsoid

        # Downward ray enters the upper ellipsoid at y = 1.5, above its cut
        add_ellipsoid((0, 1, 0), (0.5, 0.5, 0.5), material_id=0, cut_y=0.9)
        add_ellipsoid((0, -1, 0), (0.5, 0.5, 0.5), material_id=1)
        hit, _, point, _, material_id = _first_intersect((0, 3, 0), (0, -1, 0))

        assert hit == 1
        # The far root at y = 0.5 is not tried; the lower ellipsoid is hit
        assert material_id == 1
        assert abs(point[1] + 0.5) < 1e-5


class TestShadowIntersect:
    """Tests for the any-hit shadow query."""

    def test_empty_scene_never_occludes(self):
        """Test an empty scene reports no occlusion."""
        assert _shadow_intersect((0, 0, 0), (0, 1, 0)) == 0

    def test_occluded(self):
        """Test an ellipsoid in the way occludes."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 2, 0), (0.5, 0.5, 0.5))
        assert _shadow_intersect((0, 0, 0), (0, 1, 0)) == 1

    def test_ellipsoid_behind_does_not_occlude(self):
        """Test an ellipsoid behind the shadow origin does not occlude."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, -2, 0), (0.5, 0.5, 0.5))
        assert _shadow_intersect((0, 0, 0), (0, 1, 0)) == 0

    def test_offset_origin_escapes_own_surface(self):
        """Test a shadow ray leaving a lit surface point is not self-occluded."""
        from src.raylet.scene.intersection import add_ellipsoid

        add_ellipsoid((0, 0, 0), (1.0, 1.0, 1.0))
        # Top of the unit sphere, offset outward by epsilon
        assert _shadow_intersect((0, 1.0 + 1e-4, 0), (0, 1, 0)) == 0
