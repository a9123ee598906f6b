"""Unit tests for the pinhole camera module.

Tests cover:
- Image plane basis: orthogonality and scaling by focal distance * tan(fov/2)
- Ray generation for center and corner pixels
- Bottom-row origin of pixel coordinates
- Validation of degenerate configurations
"""

import math

import pytest
import taichi as ti


def _get_ray(pixel_x, pixel_y, width, height):
    from src.raylet.camera.pinhole import get_ray

    origin = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(x: ti.i32, y: ti.i32, w: ti.i32, h: ti.i32):
        ray = get_ray(x, y, w, h)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(pixel_x, pixel_y, width, height)
    return origin[None], direction[None]


def _dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _norm(a):
    return math.sqrt(_dot(a, a))


class TestCameraSetup:
    """Tests for camera setup and basis computation."""

    def test_basis_orthogonal_to_view(self):
        """Test right and up are orthogonal to each other and to the view."""
        from src.raylet.camera.pinhole import PinholeCamera, get_camera_info, setup_camera

        setup_camera(
            PinholeCamera(eye=(0.0, -0.4, 2.5), lookat=(0.0, 0.4, 0.0), vup=(0.0, 1.0, 0.1), fov=45.0)
        )
        info = get_camera_info()
        w = tuple(info["eye"][i] - info["lookat"][i] for i in range(3))

        assert abs(_dot(info["right"], info["up"])) < 1e-5
        assert abs(_dot(info["right"], w)) < 1e-5
        assert abs(_dot(info["up"], w)) < 1e-5

    def test_basis_scaled_by_focus_and_fov(self):
        """Test |right| = |up| = |eye - lookat| * tan(fov / 2)."""
        from src.raylet.camera.pinhole import PinholeCamera, compute_camera_basis

        camera = PinholeCamera(eye=(0.0, 0.0, 2.0), lookat=(0.0, 0.0, 0.0), vup=(0.0, 1.0, 0.0), fov=45.0)
        right, up = compute_camera_basis(camera)
        expected = 2.0 * math.tan(math.radians(22.5))

        assert abs(_norm(right) - expected) < 1e-9
        assert abs(_norm(up) - expected) < 1e-9
        # Looking down -z with y up: right is +x, up is +y
        assert right[0] > 0.0
        assert up[1] > 0.0

    def test_setup_marks_initialized(self):
        """Test setup_camera and reset_camera toggle the initialized flag."""
        from src.raylet.camera.pinhole import (
            PinholeCamera,
            is_camera_initialized,
            reset_camera,
            setup_camera,
        )

        assert not is_camera_initialized()
        setup_camera(PinholeCamera(eye=(0, 0, 2), lookat=(0, 0, 0), vup=(0, 1, 0), fov=45.0))
        assert is_camera_initialized()
        reset_camera()
        assert not is_camera_initialized()

    @pytest.mark.parametrize("fov", [0.0, 180.0, -10.0, 200.0])
    def test_invalid_fov_rejected(self, fov):
        """Test a field of view outside (0, 180) raises ValueError."""
        from src.raylet.camera.pinhole import PinholeCamera, setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(eye=(0, 0, 2), lookat=(0, 0, 0), vup=(0, 1, 0), fov=fov))

    def test_eye_equals_lookat_rejected(self):
        """Test coincident eye and lookat raise ValueError."""
        from src.raylet.camera.pinhole import PinholeCamera, setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(eye=(1, 1, 1), lookat=(1, 1, 1), vup=(0, 1, 0), fov=45.0))

    def test_vup_parallel_to_view_rejected(self):
        """Test vup along the view direction raises ValueError."""
        from src.raylet.camera.pinhole import PinholeCamera, setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(eye=(0, 0, 2), lookat=(0, 0, 0), vup=(0, 0, 1), fov=45.0))


class TestRayGeneration:
    """Tests for get_ray."""

    @pytest.fixture(autouse=True)
    def _camera(self):
        from src.raylet.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera(eye=(0, 0, 2), lookat=(0, 0, 0), vup=(0, 1, 0), fov=90.0))

    def test_ray_starts_at_eye(self):
        """Test every primary ray starts at the eye."""
        origin, _ = _get_ray(3, 5, 8, 8)
        assert abs(origin[0]) < 1e-6
        assert abs(origin[1]) < 1e-6
        assert abs(origin[2] - 2.0) < 1e-6

    def test_center_ray_points_at_lookat(self):
        """Test the ray through the image center points at lookat."""
        # Odd resolution puts a pixel center exactly on the axis
        _, direction = _get_ray(50, 50, 101, 101)
        assert abs(direction[0]) < 1e-5
        assert abs(direction[1]) < 1e-5
        assert abs(direction[2] + 1.0) < 1e-5

    def test_direction_is_unit(self):
        """Test generated directions have unit length."""
        for x, y in [(0, 0), (7, 0), (0, 7), (7, 7), (3, 4)]:
            _, direction = _get_ray(x, y, 8, 8)
            assert abs(_norm(direction) - 1.0) < 1e-5

    def test_bottom_left_pixel(self):
        """Test pixel (0, 0) looks toward the bottom-left of the image plane."""
        _, direction = _get_ray(0, 0, 2, 2)
        # fov 90 at distance 2: half extent 2, pixel center at sx = sy = -0.5
        expected = (-1.0, -1.0, -2.0)
        n = _norm(expected)
        for i in range(3):
            assert abs(direction[i] - expected[i] / n) < 1e-5

    def test_top_row_looks_up(self):
        """Test the last row looks above the axis (row 0 is the bottom)."""
        _, bottom = _get_ray(4, 0, 9, 9)
        _, top = _get_ray(4, 8, 9, 9)
        assert bottom[1] < 0.0
        assert top[1] > 0.0
        assert abs(top[1] + bottom[1]) < 1e-5
