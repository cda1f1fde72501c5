"""Scene file loader for the .beam text format.

A scene file is a sequence of sections. Each section starts with a
"[Name]" header and holds "key = value" lines; blank lines and lines
starting with "#" are ignored. A section is turned into scene data when
the next header (or the end of the file) is reached.

Special sections:
    [Camera]       position, lookat
    [Ambient]      color
    [CameraFrame]  time, position, lookat (one keyframe per section)

Any other section describes an object through its "type" key:
    sphere    center, radius
    plane     point, normal
    cube      min, max
    triangle  v0, v1, v2
    point     position, color (a point light)

Geometry may also set the material keys diffuse, reflectivity, ior and
emission; missing keys keep the Material defaults. Vectors are written
as whitespace-separated numbers, and missing components are 0.

Problems inside one section are logged and that section is skipped; the
rest of the file still loads.

Example:
    >>> scene = loads_scene('''
    ... [Camera]
    ... position = 0 0 5
    ... lookat = 0 0 0
    ...
    ... [Ball]
    ... type = sphere
    ... center = 0 0 0
    ... radius = 1
    ... diffuse = 1 0 0
    ... ''')
    >>> len(scene.spheres)
    1
"""

import logging
import os
from typing import Optional

from src.beamline.scene.model import (
    Camera,
    CameraFrame,
    Cube,
    Light,
    Material,
    Plane,
    Primitive,
    Scene,
    Sphere,
    Triangle,
    Vec3,
)

logger = logging.getLogger(__name__)

Properties = dict[str, str]


class SceneParseError(ValueError):
    """A section could not be turned into scene data."""


def parse_vec3(text: str) -> Vec3:
    """Parse "x y z"; missing components are 0 and extra ones are ignored.

    Raises:
        ValueError: If a component is not a number.
    """
    parts = text.split()[:3]
    values = [float(p) for p in parts] + [0.0] * (3 - len(parts))
    return (values[0], values[1], values[2])


def _required(props: Properties, key: str) -> str:
    if key not in props:
        raise SceneParseError(f"missing required property '{key}'")
    return props[key]


def _vec(props: Properties, key: str) -> Vec3:
    return parse_vec3(_required(props, key))


def _float(props: Properties, key: str) -> float:
    return float(_required(props, key))


def _material(props: Properties) -> Material:
    material = Material()
    if "diffuse" in props:
        material.diffuse = parse_vec3(props["diffuse"])
    if "reflectivity" in props:
        material.reflectivity = float(props["reflectivity"])
    if "ior" in props:
        material.ior = float(props["ior"])
    if "emission" in props:
        material.emission = parse_vec3(props["emission"])
    return material


def _build_primitive(kind: str, props: Properties) -> Optional[Primitive]:
    if kind == "sphere":
        return Sphere(_vec(props, "center"), _float(props, "radius"), _material(props))
    if kind == "plane":
        return Plane(_vec(props, "point"), _vec(props, "normal"), _material(props))
    if kind == "cube":
        return Cube(_vec(props, "min"), _vec(props, "max"), _material(props))
    if kind == "triangle":
        return Triangle(
            _vec(props, "v0"), _vec(props, "v1"), _vec(props, "v2"), _material(props)
        )
    return None


class _SceneBuilder:
    """Accumulates sections into a Scene."""

    def __init__(self) -> None:
        self.scene = Scene()

    def commit(self, section: str, props: Properties, line_no: int) -> None:
        if not props:
            return
        try:
            self._commit(section, props)
        except ValueError as e:
            logger.error("Skipping section [%s] ending at line %d: %s", section, line_no, e)

    def _commit(self, section: str, props: Properties) -> None:
        scene = self.scene

        if section == "Camera":
            camera = Camera(scene.camera.position, scene.camera.lookat)
            if "position" in props:
                camera.position = parse_vec3(props["position"])
            if "lookat" in props:
                camera.lookat = parse_vec3(props["lookat"])
            scene.camera = camera
            return

        if section == "Ambient":
            scene.ambient_light = _vec(props, "color")
            return

        if section == "CameraFrame":
            scene.camera_frames.append(
                CameraFrame(
                    time=_float(props, "time"),
                    position=_vec(props, "position"),
                    lookat=_vec(props, "lookat"),
                )
            )
            return

        kind = props.get("type")
        if kind is None:
            logger.debug("Ignoring section [%s] without a type", section)
            return

        if kind == "point":
            scene.lights.append(Light(_vec(props, "position"), _vec(props, "color")))
            return

        primitive = _build_primitive(kind, props)
        if primitive is None:
            raise SceneParseError(f"unknown object type '{kind}'")
        scene.primitives.append(primitive)


def loads_scene(text: str) -> Scene:
    """Parse a scene from the text of a .beam file."""
    builder = _SceneBuilder()
    section = ""
    props: Properties = {}
    line_no = 0

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("["):
            builder.commit(section, props, line_no - 1)
            props = {}

            end = line.find("]")
            if end == -1:
                logger.warning("Line %d: malformed section header: %s", line_no, line)
                section = ""
            else:
                section = line[1:end]
            continue

        key, sep, value = line.partition("=")
        if not sep:
            logger.warning("Line %d: malformed key=value line: %s", line_no, line)
            continue
        props[key.strip()] = value.strip()

    builder.commit(section, props, line_no)
    return builder.scene


def load_scene(path: str | os.PathLike) -> Scene:
    """Load a scene from a .beam file.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(path, encoding="utf-8") as f:
        text = f.read()

    scene = loads_scene(text)
    logger.info(
        "Loaded %s: %d primitives, %d lights, %d camera frames",
        path,
        len(scene.primitives),
        len(scene.lights),
        len(scene.camera_frames),
    )
    return scene
