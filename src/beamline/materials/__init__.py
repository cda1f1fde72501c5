"""Materials module.

Components:
    surface: The single surface material model (diffuse + mirror
        reflectivity + emission + stored index of refraction) and its
        Taichi field registry.

Note: surface declares Taichi fields at import time; import it after
ti.init().
"""
