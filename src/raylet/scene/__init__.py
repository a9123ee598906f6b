"""Scene module for scene ownership and ray-scene queries.

Components:
    intersection: Ellipsoid storage, closest-hit and shadow queries
    lights: Directional lights and the ambient radiance La
    manager: Scene class owning all entities, material tagging, build/render
    presets: Constant scene descriptions loaded by Scene.build()

Scene data is kept in Taichi fields (Structure-of-Arrays layout) so that the
render kernel can read it from every pixel task; nothing is mutated while a
render is in flight.
"""

from .intersection import (
    MAX_ELLIPSOIDS,
    SceneHitRecord,
    add_ellipsoid,
    clear_scene,
    first_intersect,
    get_ellipsoid_count,
    shadow_intersect,
)
from .lights import (
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_ambient,
    get_light_count,
    set_ambient,
)
from .manager import (
    MAX_MATERIALS,
    EllipsoidInfo,
    LightInfo,
    MaterialInfo,
    MaterialType,
    Scene,
    SceneConfig,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    PRESETS,
    default_scene_config,
    get_preset,
    single_ellipsoid_scene_config,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_ellipsoid",
    "clear_scene",
    "get_ellipsoid_count",
    "first_intersect",
    "shadow_intersect",
    "MAX_ELLIPSOIDS",
    # Lights module
    "add_light",
    "clear_lights",
    "get_light_count",
    "set_ambient",
    "get_ambient",
    "MAX_LIGHTS",
    # Manager module
    "Scene",
    "SceneConfig",
    "MaterialType",
    "MaterialInfo",
    "EllipsoidInfo",
    "LightInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets module
    "PRESETS",
    "default_scene_config",
    "single_ellipsoid_scene_config",
    "get_preset",
]
