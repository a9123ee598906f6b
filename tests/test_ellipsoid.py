"""Unit tests for ellipsoid intersection.

Tests cover:
- Ray hitting an ellipsoid from outside (near root)
- Ray missing the ellipsoid
- Ray starting inside (exit point)
- Ellipsoid behind the ray origin
- Y clipping discards the hit
- Degenerate (zero) direction
- Scaling invariance of the hit distance and normal
"""

import math

import pytest
import taichi as ti


def _run_hit(origin, direction, center, axes, cut_y=math.inf):
    """Intersect one ray with one ellipsoid and return (hit, t, point, normal)."""
    from src.raylet.geometry.ellipsoid import hit_ellipsoid, make_ellipsoid

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3, c: ti.math.vec3, ax: ti.math.vec3, cy: ti.f32):
        record = hit_ellipsoid(o, d, make_ellipsoid(c, ax, cy))
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal

    vec3 = ti.math.vec3
    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), vec3(*axes), cut_y)
    return hit[None], t_val[None], point[None], normal[None]


class TestEllipsoidBasics:
    """Tests for Ellipsoid dataclass and basic operations."""

    def test_make_ellipsoid(self):
        """Test make_ellipsoid convenience function."""
        from src.raylet.geometry.ellipsoid import make_ellipsoid, vec3

        center = ti.field(dtype=ti.math.vec3, shape=())
        axes = ti.field(dtype=ti.math.vec3, shape=())
        cut_y = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ell = make_ellipsoid(vec3(1.0, 2.0, 3.0), vec3(0.1, 0.2, 0.3), 0.5)
            center[None] = ell.center
            axes[None] = ell.axes
            cut_y[None] = ell.cut_y

        test_kernel()
        assert abs(center[None][1] - 2.0) < 1e-6
        assert abs(axes[None][2] - 0.3) < 1e-6
        assert abs(cut_y[None] - 0.5) < 1e-6


class TestEllipsoidIntersection:
    """Tests for ray-ellipsoid intersection."""

    def test_direct_hit_from_outside(self):
        """Test a head-on hit returns the near root and outward normal."""
        hit, t, p, n = _run_hit((0, 0, 2), (0, 0, -1), (0, 0, 0), (0.2, 0.1, 0.3))

        assert hit == 1
        # Front of the ellipsoid is at z = 0.3
        assert abs(t - 1.7) < 1e-5
        assert abs(p[0]) < 1e-5
        assert abs(p[1]) < 1e-5
        assert abs(p[2] - 0.3) < 1e-5
        assert abs(n[0]) < 1e-5
        assert abs(n[1]) < 1e-5
        assert abs(n[2] - 1.0) < 1e-5

    def test_miss(self):
        """Test a ray passing beside the ellipsoid."""
        hit, t, _, _ = _run_hit((1, 0, 2), (0, 0, -1), (0, 0, 0), (0.2, 0.1, 0.3))
        assert hit == 0
        assert t < 0.0

    def test_origin_inside_returns_exit_point(self):
        """Test a ray from the center hits the far surface."""
        hit, t, p, n = _run_hit((0, 0, 0), (1, 0, 0), (0, 0, 0), (0.2, 0.1, 0.3))

        assert hit == 1
        assert abs(t - 0.2) < 1e-5
        assert abs(p[0] - 0.2) < 1e-5
        # Unflipped gradient normal points outward, along the ray
        assert abs(n[0] - 1.0) < 1e-5

    def test_ellipsoid_behind_origin(self):
        """Test both roots behind the origin count as a miss."""
        hit, _, _, _ = _run_hit((0, 0, 2), (0, 0, 1), (0, 0, 0), (0.2, 0.1, 0.3))
        assert hit == 0

    def test_hit_above_cut_is_discarded(self):
        """Test a hit point above cut_y is rejected without trying the far root."""
        # Downward ray hits the top at y = 0.1; cut below it
        hit, _, _, _ = _run_hit((0, 1, 0), (0, -1, 0), (0, 0, 0), (0.2, 0.1, 0.3), cut_y=0.05)
        assert hit == 0

    def test_hit_below_cut_is_kept(self):
        """Test a hit point below cut_y is kept."""
        hit, t, p, _ = _run_hit((0, -1, 0), (0, 1, 0), (0, 0, 0), (0.2, 0.1, 0.3), cut_y=0.05)
        assert hit == 1
        assert abs(p[1] + 0.1) < 1e-5
        assert abs(t - 0.9) < 1e-5

    def test_zero_direction_is_miss(self):
        """Test a degenerate direction yields a miss instead of NaN."""
        hit, _, p, _ = _run_hit((0, 0, 2), (0, 0, 0), (0, 0, 0), (0.2, 0.1, 0.3))
        assert hit == 0
        for i in range(3):
            assert not math.isnan(p[i])

    def test_oblique_normal_is_gradient(self):
        """Test the normal is the normalized gradient (p - c) / axes^2."""
        axes = (0.4, 0.2, 0.3)
        hit, _, p, n = _run_hit((2, 2, 0), (-1, -1, 0), (0, 0, 0), axes)
        assert hit == 1

        grad = [p[i] / axes[i] ** 2 for i in range(3)]
        norm = math.sqrt(sum(g * g for g in grad))
        for i in range(3):
            assert abs(n[i] - grad[i] / norm) < 1e-4

    @pytest.mark.parametrize("scale", [0.5, 2.0, 3.0])
    def test_scaling_invariance(self, scale):
        """Test scaling origin, center and axes by k scales t by k and keeps the normal."""
        origin = (0.3, 0.05, 2.0)
        direction = (0.0, 0.0, -1.0)
        center = (0.1, 0.0, 0.0)
        axes = (0.4, 0.2, 0.3)

        hit, t, _, n = _run_hit(origin, direction, center, axes)
        hit_k, t_k, _, n_k = _run_hit(
            tuple(scale * v for v in origin),
            direction,
            tuple(scale * v for v in center),
            tuple(scale * v for v in axes),
        )

        assert hit == 1
        assert hit_k == 1
        assert abs(t_k - scale * t) < 1e-4 * scale
        for i in range(3):
            assert abs(n_k[i] - n[i]) < 1e-4
