"""Taichi-based sphere ray tracer.

This package renders scenes made of spheres with a Monte Carlo path tracer:
- Diffuse, metal and glass materials
- A thin-lens camera with depth of field and antialiasing
- Per-pixel random streams, so parallel and sequential renders match

Subpackages:
    core: Ray and vector utilities, sampling, the integrator and renderer
    geometry: The sphere primitive and its intersection test
    materials: Lambertian, metal and dielectric scattering
    scene: World storage, the scene manager and ready-made scenes
    camera: The thin-lens camera
    preview: PNG export

Call spheretracer.config.init_taichi() before importing the subpackages;
they allocate Taichi fields on import.
"""

__version__ = "0.1.0"
