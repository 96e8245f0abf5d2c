"""Unit tests for device-side scene storage.

Tests cover:
- Uploading scenes and capacity limits
- Device nearest-hit scan (scene order, ties, misses)
- Shadow queries bounded by the light distance
- Exclusive claims on the device storage
"""

from types import SimpleNamespace

import pytest


class TestUpload:
    """Tests for host-to-device upload."""

    def test_upload_cornell_box(self, cornell_scene):
        from src.whitted.scene.storage import get_light_count, get_primitive_count, upload_scene

        upload_scene(cornell_scene)

        assert get_primitive_count() == 8
        assert get_light_count() == 2

    def test_upload_replaces_previous_scene(self, cornell_scene):
        from src.whitted.scene.model import Scene
        from src.whitted.scene.storage import get_light_count, get_primitive_count, upload_scene

        upload_scene(cornell_scene)
        upload_scene(Scene())

        assert get_primitive_count() == 0
        assert get_light_count() == 0

    def test_material_values_uploaded(self):
        from src.whitted.geometry import Sphere
        from src.whitted.materials import Material
        from src.whitted.scene.model import Scene
        from src.whitted.scene.storage import (
            material_colors,
            material_ior,
            material_transparency,
            primitive_radii,
            upload_scene,
        )

        material = Material((0.2, 0.4, 0.6), transparency=0.8, refraction_index=1.33)
        upload_scene(Scene(primitives=[Sphere((0.0, 0.0, 0.0), 0.5, material)]))

        color = material_colors[0]
        assert (color[0], color[1], color[2]) == pytest.approx((0.2, 0.4, 0.6), abs=1e-6)
        assert material_transparency[0] == pytest.approx(0.8, abs=1e-6)
        assert material_ior[0] == pytest.approx(1.33, abs=1e-6)
        assert primitive_radii[0] == pytest.approx(0.5)

    def test_light_overflow(self):
        from src.whitted.scene.model import Light
        from src.whitted.scene.storage import MAX_LIGHTS, add_light

        for i in range(MAX_LIGHTS):
            add_light(Light(position=(0.0, float(i), 0.0)))
        with pytest.raises(RuntimeError, match="Maximum number of lights"):
            add_light(Light(position=(0.0, 9.0, 0.0)))

    def test_upload_rejects_too_many_lights(self):
        from src.whitted.scene.model import Light
        from src.whitted.scene.storage import upload_scene

        light = Light(position=(0.0, 1.0, 0.0))
        with pytest.raises(RuntimeError, match="lights"):
            upload_scene(SimpleNamespace(primitives=[], lights=[light, light, light]))


class TestDeviceQueries:
    """Tests for the kernel-side nearest-hit and shadow scans."""

    def test_camera_ray_hits_back_wall(self, cornell_scene):
        from src.whitted.scene.storage import probe_nearest, upload_scene

        upload_scene(cornell_scene)
        index, t = probe_nearest((0.0, 1.0, 8.0), (0.0, 0.0, -1.0))

        # Walls come first: left, right, back
        assert index == 2
        assert t == pytest.approx(10.5, abs=1e-4)

    def test_downward_ray_hits_floor(self, cornell_scene):
        from src.whitted.scene.storage import probe_nearest, upload_scene

        upload_scene(cornell_scene)
        index, t = probe_nearest((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))

        assert index == 3
        assert t == pytest.approx(2.5, abs=1e-5)

    def test_ray_hits_yellow_sphere(self, cornell_scene):
        from src.whitted.scene.storage import probe_nearest, upload_scene

        upload_scene(cornell_scene)
        index, t = probe_nearest((-1.0, -1.8, 5.0), (0.0, 0.0, -1.0))

        assert index == 5
        assert t == pytest.approx(5.3, abs=1e-4)

    def test_agrees_with_host_scan(self, cornell_scene):
        from src.whitted.scene.storage import probe_nearest, upload_scene

        upload_scene(cornell_scene)
        for direction in [(0.3, -0.4, -1.0), (-0.5, 0.2, -1.0), (0.1, -0.9, -0.2)]:
            index, t = probe_nearest((0.0, 1.0, 2.0), direction)
            hit = cornell_scene.intersect((0.0, 1.0, 2.0), direction)
            assert cornell_scene.primitives[index] is hit.primitive
            assert t == pytest.approx(hit.t, abs=1e-4)

    def test_tie_goes_to_first(self):
        from src.whitted.geometry import Sphere
        from src.whitted.materials import Material
        from src.whitted.scene.model import Scene
        from src.whitted.scene.storage import probe_nearest, upload_scene

        material = Material((1.0, 1.0, 1.0))
        scene = Scene(
            primitives=[
                Sphere((0.0, 0.0, -5.0), 1.0, material),
                Sphere((0.0, 0.0, -5.0), 1.0, material),
            ]
        )
        upload_scene(scene)

        index, _ = probe_nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == 0

    def test_miss_in_empty_scene(self):
        from src.whitted.scene.model import Scene
        from src.whitted.scene.storage import probe_nearest, upload_scene

        upload_scene(Scene())
        index, _ = probe_nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == -1

    def test_occlusion_respects_distance(self, cornell_scene):
        from src.whitted.scene.storage import probe_occluded, upload_scene

        upload_scene(cornell_scene)

        # Floor is 2.5 below the origin
        assert not probe_occluded((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), 1.0)
        assert probe_occluded((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), 3.0)

    def test_object_casts_shadow(self, cornell_scene):
        from src.whitted.core.vector import Vector3
        from src.whitted.scene.storage import probe_occluded, upload_scene

        upload_scene(cornell_scene)

        # Floor point under the yellow sphere, looking up toward the sphere center
        floor_point = Vector3(-1.0, -2.5 + 1e-4, -1.0)
        light = Vector3(-1.0, 1.9, -1.0)
        to_light = light - floor_point
        assert probe_occluded(floor_point, to_light.normalize(), to_light.length())


class TestClaimDevice:
    """Tests for exclusive use of the device storage."""

    def test_claim_uploads_and_marks_scene(self, cornell_scene):
        from src.whitted.scene.storage import claim_device, get_primitive_count

        with claim_device(cornell_scene):
            assert cornell_scene.is_rendering
            assert get_primitive_count() == 8
        assert not cornell_scene.is_rendering

    def test_second_claim_refused(self, cornell_scene):
        from src.whitted.scene.model import Scene
        from src.whitted.scene.storage import claim_device

        with claim_device(cornell_scene):
            with pytest.raises(RuntimeError, match="already in progress"):
                with claim_device(Scene()):
                    pass

    def test_claim_released_after_error(self, cornell_scene):
        from src.whitted.scene.storage import claim_device

        with pytest.raises(KeyError):
            with claim_device(cornell_scene):
                raise KeyError("boom")

        with claim_device(cornell_scene):
            pass
