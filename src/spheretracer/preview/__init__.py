"""Preview module for image output.

Components:
    export: Packed-pixel unpacking and PNG export via Pillow
"""

from spheretracer.preview.export import save_png, save_png_from_packed, unpack_rgb

__all__ = [
    "save_png",
    "save_png_from_packed",
    "unpack_rgb",
]
