"""Beamline: a Taichi-based Whitted ray tracer.

This package renders declarative .beam scene files to images using
recursive ray tracing, with support for:
- Spheres, infinite planes, axis-aligned cubes and triangles
- Point lights with hard shadows
- Mirror reflection with bounded recursion depth
- Emissive surfaces
- Camera keyframe animation

Subpackages:
    core: Ray and vector utilities, the integrator, renderer and animation
    geometry: Shape primitives and intersection algorithms
    materials: Material registry and shading terms
    scene: Scene data model, loader, validation and device-side tables
    camera: Pinhole camera with ray generation
    image: Framebuffer encoding (PPM and Pillow formats)
"""

__version__ = "1.0.1940"
