"""Whitted-style mirror ray tracer built on Taichi.

This package renders scenes of spheres, planes and triangles lit by
directional lights, with one camera ray per pixel, Lambert diffuse
shading, a constant ambient term and recursive mirror reflections up to a
fixed depth. Images are written as binary PPM or PNG.

Subpackages:
    core: Vector algebra, recursive shading (trace_ray) and the renderer
    geometry: Sphere, plane and triangle intersection tests
    scene: Scene storage, nearest-hit selection and scene construction
    camera: Pinhole camera with ray generation
    preview: Byte conversion and image export

Most subpackages declare Taichi fields at import time; call ti.init()
before importing them.
"""

__version__ = "0.1.0"
