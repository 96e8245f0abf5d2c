"""Unit tests for the pinhole camera module.

Tests cover:
- Camera validation and dictionary round trip
- Fixed-axis and look-at basis computation
- Degenerate look-at fallback
- Primary ray directions for center, corner and off-center pixels
"""

import logging
import math

import pytest


class TestCameraConfig:
    """Tests for the host-side Camera dataclass."""

    def test_defaults(self):
        from src.whitted.camera.pinhole import Camera
        from src.whitted.core.vector import Vector3

        camera = Camera()
        assert camera.position == Vector3(0.0, 1.0, 8.0)
        assert camera.look_at == Vector3(0.0, 1.0, 0.0)
        assert camera.fov == 60.0
        assert camera.use_look_at is False

    def test_scale_is_half_fov_tangent(self):
        from src.whitted.camera.pinhole import Camera

        assert Camera(fov=90.0).scale == pytest.approx(1.0)
        assert Camera(fov=60.0).scale == pytest.approx(math.tan(math.radians(30.0)))

    @pytest.mark.parametrize("fov", [0.0, 180.0, -10.0, 200.0])
    def test_invalid_fov(self, fov):
        from src.whitted.camera.pinhole import Camera

        with pytest.raises(ValueError, match="Field of view"):
            Camera(fov=fov)

    def test_dict_round_trip(self):
        from src.whitted.camera.pinhole import Camera

        camera = Camera(position=(1.0, 2.0, 3.0), look_at=(0.0, 0.0, 0.0), fov=45.0, use_look_at=True)
        assert Camera.from_dict(camera.to_dict()).to_dict() == camera.to_dict()


class TestCameraBasis:
    """Tests for the (u, v, w) basis."""

    def test_fixed_axes_ignore_look_at(self):
        """Test that look_at is carried but unused by default."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera(position=(0.0, 0.0, 0.0), look_at=(5.0, 5.0, 0.0))
        u, v, w = camera.basis()

        assert u.to_tuple() == (1.0, 0.0, 0.0)
        assert v.to_tuple() == (0.0, 1.0, 0.0)
        assert w.to_tuple() == (0.0, 0.0, 1.0)

    def test_look_at_basis_is_orthonormal(self):
        from src.whitted.camera.pinhole import Camera

        camera = Camera(position=(3.0, 2.0, 5.0), look_at=(0.0, 0.0, 0.0), use_look_at=True)
        u, v, w = camera.basis()

        assert abs(u.dot(v)) < 1e-9
        assert abs(u.dot(w)) < 1e-9
        assert abs(v.dot(w)) < 1e-9
        for axis in (u, v, w):
            assert axis.length() == pytest.approx(1.0)

    def test_look_at_along_x(self):
        """Test that w points from the target back to the camera."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera(position=(0.0, 0.0, 0.0), look_at=(1.0, 0.0, 0.0), use_look_at=True)
        u, v, w = camera.basis()

        assert w.to_tuple() == pytest.approx((-1.0, 0.0, 0.0))
        assert u.to_tuple() == pytest.approx((0.0, 0.0, 1.0))
        assert v.to_tuple() == pytest.approx((0.0, 1.0, 0.0))

    def test_degenerate_look_at_falls_back(self, caplog):
        """Test look_at on the camera position logs and uses fixed axes."""
        from src.whitted.camera.pinhole import Camera

        camera = Camera(position=(1.0, 1.0, 1.0), look_at=(1.0, 1.0, 1.0), use_look_at=True)
        with caplog.at_level(logging.WARNING, logger="src.whitted.camera.pinhole"):
            u, v, w = camera.basis()

        assert w.to_tuple() == (0.0, 0.0, 1.0)
        assert "Degenerate look-at" in caplog.text

    def test_view_parallel_to_up_falls_back(self, caplog):
        from src.whitted.camera.pinhole import Camera

        camera = Camera(position=(0.0, 5.0, 0.0), look_at=(0.0, 0.0, 0.0), use_look_at=True)
        with caplog.at_level(logging.WARNING, logger="src.whitted.camera.pinhole"):
            u, _, _ = camera.basis()

        assert u.to_tuple() == (1.0, 0.0, 0.0)
        assert "Degenerate look-at" in caplog.text


class TestRayGeneration:
    """Tests for device-side primary ray directions."""

    def test_setup_uploads_state(self):
        from src.whitted.camera.pinhole import Camera, get_camera_info, setup_camera

        setup_camera(Camera(position=(0.0, 1.0, 8.0), fov=60.0))
        info = get_camera_info()

        assert info["position"] == pytest.approx((0.0, 1.0, 8.0))
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0))
        assert info["scale"] == pytest.approx(math.tan(math.radians(30.0)), abs=1e-6)

    def test_center_ray_points_down_negative_z(self):
        from src.whitted.camera.pinhole import Camera, compute_ray_direction, setup_camera

        setup_camera(Camera())
        d = compute_ray_direction(400.0, 300.0, 800, 600)

        assert d.to_tuple() == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)

    def test_top_left_corner(self):
        """Test that row 0 is the top of the image and column 0 the left."""
        from src.whitted.camera.pinhole import Camera, compute_ray_direction, setup_camera

        setup_camera(Camera(fov=60.0))
        d = compute_ray_direction(0.0, 0.0, 800, 600)

        scale = math.tan(math.radians(30.0))
        rx = -(800 / 600) * scale
        ry = scale
        norm = math.sqrt(rx * rx + ry * ry + 1.0)
        assert d.x == pytest.approx(rx / norm, abs=1e-5)
        assert d.y == pytest.approx(ry / norm, abs=1e-5)
        assert d.z == pytest.approx(-1.0 / norm, abs=1e-5)

    def test_directions_are_unit_length(self):
        from src.whitted.camera.pinhole import Camera, compute_ray_direction, setup_camera

        setup_camera(Camera(fov=75.0))
        for px, py in [(0.0, 0.0), (799.5, 0.0), (123.25, 456.75), (800.0, 600.0)]:
            assert compute_ray_direction(px, py, 800, 600).length() == pytest.approx(1.0, abs=1e-5)

    def test_symmetric_about_center(self):
        from src.whitted.camera.pinhole import Camera, compute_ray_direction, setup_camera

        setup_camera(Camera())
        left = compute_ray_direction(100.0, 300.0, 800, 600)
        right = compute_ray_direction(700.0, 300.0, 800, 600)

        assert left.x == pytest.approx(-right.x, abs=1e-6)
        assert left.z == pytest.approx(right.z, abs=1e-6)

    def test_look_at_center_ray_hits_target(self):
        from src.whitted.camera.pinhole import Camera, compute_ray_direction, setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 0.0), look_at=(1.0, 0.0, 0.0), use_look_at=True))
        d = compute_ray_direction(32.0, 32.0, 64, 64)

        assert d.to_tuple() == pytest.approx((1.0, 0.0, 0.0), abs=1e-6)
