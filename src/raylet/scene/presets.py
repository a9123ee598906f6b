"""Preset scene configurations.

Both presets are plain SceneConfig data and are loaded through
Scene.build(config), so one scene core serves every variant.

default_scene_config():
    The "table" scene: a large golden-matte ellipsoid clipped at y = 1.44
    forms a bowl-shaped floor, holding a flattened green ellipsoid, a tall
    red ellipsoid and a tall gold mirror. One directional light from above.

single_ellipsoid_scene_config():
    One matte ellipsoid at the origin seen head-on; the reference scene for
    end-to-end checks of the shading path.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.scene.manager import Scene
    >>> from src.raylet.scene.presets import single_ellipsoid_scene_config
    >>> scene = Scene()
    >>> scene.build(single_ellipsoid_scene_config())
"""

from src.raylet.scene.manager import SceneConfig

# =============================================================================
# Shared Constants
# =============================================================================

AMBIENT_RADIANCE = (0.4, 0.4, 0.4)
LIGHT_RADIANCE = (2.0, 2.0, 2.0)
SPECULAR = (1.0, 1.0, 1.0)
SHININESS = 50.0
FOV_DEGREES = 45.0

# Gold: refractive index and extinction coefficient per RGB channel
GOLD_N = (0.17, 0.35, 1.5)
GOLD_KAPPA = (3.1, 2.7, 1.9)

# Y coordinate above which the floor ellipsoid is cut away
FLOOR_CUT_Y = 1.44


def default_scene_config() -> SceneConfig:
    """Create the default four-ellipsoid scene.

    Material IDs: 0 green matte, 1 red matte, 2 gold mirror, 3 floor matte.
    """
    return SceneConfig(
        materials=[
            {"type": "matte", "kd": [0.05, 0.6, 0.05], "ks": list(SPECULAR), "shininess": SHININESS},
            {"type": "matte", "kd": [0.7, 0.2, 0.2], "ks": list(SPECULAR), "shininess": SHININESS},
            {"type": "mirror", "n": list(GOLD_N), "kappa": list(GOLD_KAPPA)},
            {"type": "matte", "kd": [0.8, 0.6, 0.2], "ks": list(SPECULAR), "shininess": SHININESS},
        ],
        ellipsoids=[
            {"center": [-0.35, -0.35, 0.15], "axes": [0.3, 0.15, 0.3], "material_id": 0},
            {"center": [-0.1, -0.2, -0.35], "axes": [0.1, 0.3, 0.2], "material_id": 1},
            {"center": [0.4, 0.05, -0.2], "axes": [0.2, 0.5, 0.3], "material_id": 2},
            {
                "center": [0.0, 0.45, 0.0],
                "axes": [4.9, 1.0, 4.9],
                "material_id": 3,
                "cut_y": FLOOR_CUT_Y,
            },
        ],
        lights=[{"direction": [1.0, 8.0, 1.0], "radiance": list(LIGHT_RADIANCE)}],
        ambient=AMBIENT_RADIANCE,
        camera={
            "eye": [0.0, -0.4, 2.5],
            "lookat": [0.0, 0.4, 0.0],
            "vup": [0.0, 1.0, 0.1],
            "fov": FOV_DEGREES,
        },
    )


def single_ellipsoid_scene_config() -> SceneConfig:
    """Create the single matte ellipsoid reference scene."""
    return SceneConfig(
        materials=[
            {"type": "matte", "kd": [0.8, 0.2, 0.1], "ks": list(SPECULAR), "shininess": SHININESS},
        ],
        ellipsoids=[
            {"center": [0.0, 0.0, 0.0], "axes": [0.2, 0.1, 0.3], "material_id": 0},
        ],
        lights=[{"direction": [1.0, 1.0, 1.0], "radiance": list(LIGHT_RADIANCE)}],
        ambient=AMBIENT_RADIANCE,
        camera={
            "eye": [0.0, 0.0, 2.0],
            "lookat": [0.0, 0.0, 0.0],
            "vup": [0.0, 1.0, 0.0],
            "fov": FOV_DEGREES,
        },
    )


PRESETS = {
    "default": default_scene_config,
    "single": single_ellipsoid_scene_config,
}


def get_preset(name: str) -> SceneConfig:
    """Look up a preset scene by name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene preset: {name!r} (available: {', '.join(sorted(PRESETS))})"
        ) from None
    return factory()
