"""Whitted-style ray tracer for analytic ellipsoid scenes, built on Taichi.

This package renders a still image of a small scene of ellipsoids lit by
directional lights, with support for:
- Analytic ray/ellipsoid intersection with an optional upper Y clip
- Matte shading (ambient + diffuse + Blinn-Phong specular) with hard shadows
- Mirror reflection weighted by Schlick's Fresnel approximation
- Recursion cut off at a fixed depth

Subpackages:
    core: Ray and vector utilities, render configuration and the integrator
    geometry: Ellipsoid primitive and its intersection routine
    materials: Matte and mirror material models
    scene: Scene ownership, ray-scene queries, lights and preset scenes
    camera: Pinhole camera with per-pixel ray generation
    preview: Output display and PNG export
"""

__version__ = "0.1.0"
