"""Built-in demo scene.

Three mirror-ish spheres standing on a dark, slightly reflective floor,
a magenta triangle, and two directional lights from the upper left and
upper right. The camera sits at z = 1 looking down -z at the origin
through a 2 x 2 viewport at unit focal length.

The triangle is wound counter-clockwise as seen from the camera, so its
normal is +z. Winding it the other way turns the normal away from both
lights and leaves only the ambient term.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.demo import create_demo_scene
    >>> from whitted.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
"""

from whitted.camera.pinhole import PinholeCamera
from whitted.scene.manager import SceneManager

# =============================================================================
# Demo Scene Constants
# =============================================================================

# (center, radius, color, reflection)
DEMO_SPHERES = (
    ((-1.0, -0.25, -1.0), 0.25, (1.0, 0.0, 0.0), 0.5),
    ((-1.0, -0.25, -2.0), 0.25, (0.0, 1.0, 0.0), 0.5),
    ((1.0, 1.0, -2.0), 1.0, (0.0, 0.0, 1.0), 0.5),
)

# (normal, d, color, reflection)
DEMO_PLANES = (((0.0, 1.0, 0.0), -0.5, (0.1, 0.1, 0.1), 0.1),)

# (v0, v1, v2, color, reflection)
DEMO_TRIANGLES = (
    (
        (0.25, 0.5, -1.0),
        (0.0, 0.5, -1.0),
        (0.0, 0.0, -1.0),
        (1.0, 0.0, 1.0),
        0.0,
    ),
)

DEMO_LIGHTS = (
    (-0.8, 0.8, 0.2),
    (0.8, 0.8, 0.2),
)


def create_demo_camera() -> PinholeCamera:
    """Camera at (0, 0, 1) looking at the origin, 2 x 2 viewport."""
    return PinholeCamera(
        origin=(0.0, 0.0, 1.0),
        look_at=(0.0, 0.0, 0.0),
        up=(0.0, 1.0, 0.0),
        viewport_width=2.0,
        viewport_height=2.0,
        focal_length=1.0,
    )


def create_demo_scene(scene: SceneManager | None = None) -> tuple[SceneManager, PinholeCamera]:
    """Populate a scene with the demo geometry and lights.

    Args:
        scene: Scene to fill. It is cleared first. A new SceneManager is
            created if None.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    for center, radius, color, reflection in DEMO_SPHERES:
        scene.add_sphere(center, radius, color, reflection)

    for normal, d, color, reflection in DEMO_PLANES:
        scene.add_plane(normal, d, color, reflection)

    for v0, v1, v2, color, reflection in DEMO_TRIANGLES:
        scene.add_triangle(v0, v1, v2, color, reflection)

    for direction in DEMO_LIGHTS:
        scene.add_light(direction)

    return scene, create_demo_camera()
