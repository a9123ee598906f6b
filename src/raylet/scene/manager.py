"""Scene ownership and material dispatch.

This module provides the Scene class, the single owner of everything the
tracer reads while rendering: ellipsoids, materials, directional lights, the
ambient radiance and the camera. Entities live in indexed Taichi fields; a hit
refers to its material by ID only.

The Scene maintains:
- A unified material_id space across the matte and mirror registries
- Mapping from material_id to (material_type, type_local_index), which is the
  tag the integrator dispatches on
- Scene serialization to and from plain dictionaries (JSON compatible)

The presenting collaborator's contract is two calls: build() once, then
render(buffer, config) once.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.core.config import RenderConfig
    >>> from src.raylet.core.integrator import make_image_buffer
    >>> from src.raylet.scene.manager import Scene
    >>> config = RenderConfig(width=600, height=600)
    >>> scene = Scene()
    >>> scene.build()
    >>> buffer = make_image_buffer(config)
    >>> scene.render(buffer, config)
"""

import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import numpy.typing as npt
import taichi as ti

from src.raylet.camera.pinhole import (
    PinholeCamera,
    is_camera_initialized,
    reset_camera,
    setup_camera,
)
from src.raylet.core.config import RenderConfig
from src.raylet.geometry.ellipsoid import NO_CLIP
from src.raylet.materials.matte import add_matte_material, clear_matte_materials
from src.raylet.materials.mirror import add_mirror_material, clear_mirror_materials
from src.raylet.scene.intersection import (
    MAX_ELLIPSOIDS,
    add_ellipsoid,
    clear_scene,
    get_ellipsoid_count,
)
from src.raylet.scene.lights import (
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_ambient,
    get_light_count,
    set_ambient,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Shading model tag stored per material ID."""

    MATTE = 0
    MIRROR = 1


# Capacity of the shared ID space; each registry holds 256
MAX_MATERIALS = 512

# Kernel-side lookup tables indexed by material ID
# shading model tag
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# slot inside the matte or mirror registry
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Forget every material ID."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Shading model tag of a material ID.

    Returns:
        The material type as an integer (see MaterialType), or -1 for an
        invalid material ID.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Slot of a material ID inside its matte or mirror registry.

    Returns:
        The type-local index, or -1 for an invalid material ID.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Host-side record of one registered material.

    Attributes:
        material_id: Position in the shared ID space.
        material_type: The type of material (matte or mirror).
        type_index: The index within the type-specific material fields.
        params: The parameters it was created with, in config form.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class EllipsoidInfo:
    """Information about an ellipsoid in the scene."""

    ellipsoid_index: int
    center: tuple[float, float, float]
    axes: tuple[float, float, float]
    material_id: int
    cut_y: float = NO_CLIP


@dataclass
class LightInfo:
    """Information about a directional light, as provided by the caller."""

    light_index: int
    direction: tuple[float, float, float]
    radiance: tuple[float, float, float]


@dataclass
class SceneConfig:
    """Data-only description of a scene.

    Attributes:
        materials: List of material configurations. A material's position in
            the list is its material ID.
        ellipsoids: List of ellipsoid configurations.
        lights: List of directional light configurations.
        ambient: Ambient radiance La.
        camera: Camera configuration, or None to leave the camera unset.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    ellipsoids: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    ambient: tuple[float, float, float] = (0.0, 0.0, 0.0)
    camera: dict[str, Any] | None = None


def _float(value: Any, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Expected a number, got {value!r}") from None


def _vec3(values: Any, default: tuple[float, float, float]) -> tuple[float, float, float]:
    if values is None:
        return default
    if isinstance(values, (str, bytes)) or not hasattr(values, "__len__") or len(values) != 3:
        raise ValueError(f"Expected 3 components, got {values!r}")
    try:
        return (float(values[0]), float(values[1]), float(values[2]))
    except (TypeError, ValueError):
        raise ValueError(f"Expected 3 numbers, got {values!r}") from None


class Scene:
    """Owner of all scene data and entry point for rendering.

    Kernel-side data lives in module-level Taichi fields, so a Scene is
    effectively a singleton: creating or clearing another Scene wipes what
    this one renders while leaving its host-side records in place.

    Attributes:
        materials: MaterialInfo records, indexed by material ID.
        ellipsoids: List of EllipsoidInfo for all ellipsoids in the scene.
        lights: List of LightInfo for all directional lights.
        camera: The configured camera, or None.

    Example:
        >>> scene = Scene()
        >>> red = scene.add_matte_material(kd=(0.7, 0.2, 0.2), ks=(1, 1, 1), shininess=50)
        >>> gold = scene.add_mirror_material(n=(0.17, 0.35, 1.5), kappa=(3.1, 2.7, 1.9))
        >>> scene.add_ellipsoid((-0.1, -0.2, -0.35), (0.1, 0.3, 0.2), red)
        >>> scene.add_ellipsoid((0.4, 0.05, -0.2), (0.2, 0.5, 0.3), gold)
        >>> scene.add_light((1, 8, 1), (2, 2, 2))
        >>> scene.set_ambient((0.4, 0.4, 0.4))
    """

    def __init__(self) -> None:
        """Create an empty scene and reset the shared Taichi fields."""
        self.materials: list[MaterialInfo] = []
        self.ellipsoids: list[EllipsoidInfo] = []
        self.lights: list[LightInfo] = []
        self.camera: PinholeCamera | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        """Reset host-side records and every kernel-side registry."""
        clear_scene()
        clear_lights()
        clear_matte_materials()
        clear_mirror_materials()
        _clear_material_tracking()
        reset_camera()
        self.materials.clear()
        self.ellipsoids.clear()
        self.lights.clear()
        self.camera = None

    def clear(self) -> None:
        """Clear the entire scene (primitives, materials, lights, camera)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_matte_material(
        self,
        kd: tuple[float, float, float],
        ks: tuple[float, float, float],
        shininess: float,
    ) -> int:
        """Add a matte material to the scene.

        The ambient coefficient is derived as kd * pi.

        Args:
            kd: Diffuse coefficient as (R, G, B).
            ks: Specular coefficient as (R, G, B).
            shininess: Blinn-Phong exponent.

        Returns:
            The material ID to pass to add_ellipsoid().

        Raises:
            RuntimeError: If all MAX_MATERIALS IDs are taken.
            ValueError: If a coefficient or the shininess is negative.
        """
        type_index = add_matte_material(kd, ks, shininess)
        return self._register_material(
            MaterialType.MATTE,
            type_index,
            {"kd": tuple(kd), "ks": tuple(ks), "shininess": shininess},
        )

    def add_mirror_material(
        self,
        n: tuple[float, float, float],
        kappa: tuple[float, float, float],
    ) -> int:
        """Add a mirror material to the scene.

        Args:
            n: Refractive index per channel.
            kappa: Extinction coefficient per channel.

        Returns:
            The material ID to pass to add_ellipsoid().

        Raises:
            RuntimeError: If all MAX_MATERIALS IDs are taken.
            ValueError: If n is not positive or kappa is negative.
        """
        type_index = add_mirror_material(n, kappa)
        return self._register_material(
            MaterialType.MIRROR,
            type_index,
            {"n": tuple(n), "kappa": tuple(kappa)},
        )

    def get_material_count(self) -> int:
        """Get the total number of registered materials."""
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material, or None if the ID is unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitives, Lights and Camera
    # =========================================================================

    def add_ellipsoid(
        self,
        center: tuple[float, float, float],
        axes: tuple[float, float, float],
        material_id: int,
        cut_y: float = NO_CLIP,
    ) -> int:
        """Add an ellipsoid referencing an existing material.

        Args:
            center: The center point as (x, y, z).
            axes: The semi-axis lengths (A, B, C), all positive.
            material_id: ID returned by one of the add_*_material methods.
            cut_y: Upper Y clip plane. Defaults to no clipping.

        Returns:
            The index of the ellipsoid.

        Raises:
            ValueError: If the material ID is unknown or an axis is not positive.
            RuntimeError: If the maximum number of ellipsoids is exceeded.
        """
        if not 0 <= material_id < len(self.materials):
            raise ValueError(
                f"Unknown material ID {material_id} "
                f"({len(self.materials)} materials registered)"
            )
        ellipsoid_index = add_ellipsoid(center, axes, material_id, cut_y)
        self.ellipsoids.append(
            EllipsoidInfo(
                ellipsoid_index=ellipsoid_index,
                center=tuple(center),
                axes=tuple(axes),
                material_id=material_id,
                cut_y=cut_y,
            )
        )
        return ellipsoid_index

    def add_matte_ellipsoid(
        self,
        center: tuple[float, float, float],
        axes: tuple[float, float, float],
        kd: tuple[float, float, float],
        ks: tuple[float, float, float] = (1.0, 1.0, 1.0),
        shininess: float = 50.0,
        cut_y: float = NO_CLIP,
    ) -> tuple[int, int]:
        """Add an ellipsoid with a new matte material.

        Returns:
            Tuple of (ellipsoid_index, material_id).
        """
        material_id = self.add_matte_material(kd, ks, shininess)
        ellipsoid_index = self.add_ellipsoid(center, axes, material_id, cut_y)
        return ellipsoid_index, material_id

    def add_mirror_ellipsoid(
        self,
        center: tuple[float, float, float],
        axes: tuple[float, float, float],
        n: tuple[float, float, float],
        kappa: tuple[float, float, float],
        cut_y: float = NO_CLIP,
    ) -> tuple[int, int]:
        """Add an ellipsoid with a new mirror material.

        Returns:
            Tuple of (ellipsoid_index, material_id).
        """
        material_id = self.add_mirror_material(n, kappa)
        ellipsoid_index = self.add_ellipsoid(center, axes, material_id, cut_y)
        return ellipsoid_index, material_id

    def add_light(
        self,
        direction: tuple[float, float, float],
        radiance: tuple[float, float, float],
    ) -> int:
        """Add a directional light. The direction points toward the light."""
        light_index = add_light(direction, radiance)
        self.lights.append(
            LightInfo(
                light_index=light_index,
                direction=tuple(direction),
                radiance=tuple(radiance),
            )
        )
        return light_index

    def set_ambient(self, radiance: tuple[float, float, float]) -> None:
        """Set the ambient radiance La."""
        set_ambient(radiance)

    @property
    def ambient(self) -> tuple[float, float, float]:
        """The ambient radiance La."""
        return get_ambient()

    def set_camera(self, camera: PinholeCamera) -> None:
        """Configure the camera used by render()."""
        setup_camera(camera)
        self.camera = camera

    def get_ellipsoid_count(self) -> int:
        """Get the number of ellipsoids in the scene."""
        return get_ellipsoid_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    # =========================================================================
    # Build and Render
    # =========================================================================

    def build(self, config: SceneConfig | None = None) -> None:
        """Populate the scene from constant data.

        Args:
            config: Scene description. Defaults to the built-in table scene
                (see scene.presets.default_scene_config).
        """
        if config is None:
            from src.raylet.scene.presets import default_scene_config

            config = default_scene_config()

        self.from_config(config)
        logger.info(
            "Scene built: %d ellipsoids, %d materials, %d lights",
            self.get_ellipsoid_count(),
            self.get_material_count(),
            self.get_light_count(),
        )

    def _check_camera(self) -> None:
        if not is_camera_initialized():
            raise RuntimeError("Camera not set up. Call set_camera() or build() first.")

    def render(
        self,
        image: npt.NDArray,
        config: RenderConfig,
    ) -> None:
        """Render the scene into a row-major RGBA buffer.

        Args:
            image: float32 array of shape (width * height, 4), e.g. from
                make_image_buffer(config). Pixel (X, Y) lands in row
                Y * width + X.
            config: Image size, recursion cutoff and ray epsilon.

        Raises:
            RuntimeError: If no camera has been configured.
            ValueError: If the buffer has the wrong shape or dtype.
        """
        from src.raylet.core.integrator import render_image

        self._check_camera()
        render_image(image, config)

    def trace(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        config: RenderConfig | None = None,
    ) -> tuple[float, float, float]:
        """Trace a single ray and return its radiance.

        Does not require a camera.
        """
        from src.raylet.core.integrator import trace_ray

        return trace_ray(origin, direction, config)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Describe the current scene as a SceneConfig.

        Infinite clip planes are omitted from ellipsoid entries.
        """
        config = SceneConfig(ambient=self.ambient)

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for ell in self.ellipsoids:
            ell_config: dict[str, Any] = {
                "center": list(ell.center),
                "axes": list(ell.axes),
                "material_id": ell.material_id,
            }
            if not math.isinf(ell.cut_y):
                ell_config["cut_y"] = ell.cut_y
            config.ellipsoids.append(ell_config)

        for light in self.lights:
            config.lights.append(
                {"direction": list(light.direction), "radiance": list(light.radiance)}
            )

        if self.camera is not None:
            config.camera = {
                "eye": list(self.camera.eye),
                "lookat": list(self.camera.lookat),
                "vup": list(self.camera.vup),
                "fov": self.camera.fov,
            }

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the scene with the one described by config.

        Every entry is parsed before anything is cleared, so a malformed
        config leaves the current scene untouched. A missing or null cut_y
        means no clip. If a value is rejected while loading, the scene is
        left empty.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        materials: list[tuple[str, dict[str, Any]]] = []
        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "matte":
                params = {
                    "kd": _vec3(mat_config.get("kd"), (0.5, 0.5, 0.5)),
                    "ks": _vec3(mat_config.get("ks"), (1.0, 1.0, 1.0)),
                    "shininess": _float(mat_config.get("shininess"), 50.0),
                }
            elif mat_type == "mirror":
                params = {
                    "n": _vec3(mat_config.get("n"), (1.5, 1.5, 1.5)),
                    "kappa": _vec3(mat_config.get("kappa"), (0.0, 0.0, 0.0)),
                }
            else:
                raise ValueError(f"Unknown material type: {mat_type}")
            materials.append((mat_type, params))

        ellipsoids = []
        for ell_config in config.ellipsoids:
            material_id = _float(ell_config.get("material_id"), 0.0)
            if not material_id.is_integer():
                raise ValueError(f"Material ID must be an integer, got {material_id!r}")
            ellipsoids.append(
                {
                    "center": _vec3(ell_config.get("center"), (0.0, 0.0, 0.0)),
                    "axes": _vec3(ell_config.get("axes"), (1.0, 1.0, 1.0)),
                    "material_id": int(material_id),
                    "cut_y": _float(ell_config.get("cut_y"), NO_CLIP),
                }
            )

        lights = [
            {
                "direction": _vec3(light_config.get("direction"), (0.0, 1.0, 0.0)),
                "radiance": _vec3(light_config.get("radiance"), (1.0, 1.0, 1.0)),
            }
            for light_config in config.lights
        ]
        ambient = _vec3(config.ambient, (0.0, 0.0, 0.0))

        camera = None
        if config.camera is not None:
            cam = config.camera
            camera = PinholeCamera(
                eye=_vec3(cam.get("eye"), (0.0, 0.0, 2.0)),
                lookat=_vec3(cam.get("lookat"), (0.0, 0.0, 0.0)),
                vup=_vec3(cam.get("vup"), (0.0, 1.0, 0.0)),
                fov=_float(cam.get("fov"), 45.0),
            )

        self.clear()
        try:
            # Materials first: ellipsoids refer to them by ID
            for mat_type, params in materials:
                if mat_type == "matte":
                    self.add_matte_material(**params)
                else:
                    self.add_mirror_material(**params)
            for ellipsoid in ellipsoids:
                self.add_ellipsoid(**ellipsoid)
            for light in lights:
                self.add_light(**light)
            self.set_ambient(ambient)
            if camera is not None:
                self.set_camera(camera)
        except (ValueError, RuntimeError):
            self.clear()
            raise

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "ellipsoids": config.ellipsoids,
            "lights": config.lights,
            "ambient": list(config.ambient),
            "camera": config.camera,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene with one described by a JSON-style dictionary.

        Args:
            data: Dictionary with 'materials', 'ellipsoids', 'lights',
                'ambient' and 'camera' keys. Missing keys mean empty.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            ellipsoids=data.get("ellipsoids", []),
            lights=data.get("lights", []),
            ambient=_vec3(data.get("ambient"), (0.0, 0.0, 0.0)),
            camera=data.get("camera"),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_ellipsoids() -> int:
        """Get the maximum number of ellipsoids supported."""
        return MAX_ELLIPSOIDS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        """Capacity of the shared material ID space."""
        return MAX_MATERIALS
