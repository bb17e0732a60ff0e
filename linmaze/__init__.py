"""A first-person 3D maze game: level rules, physics, BMP loading and an OpenGL front end."""

__version__ = "0.1.0"
__all__ = ["app", "bitmap", "level", "physics", "scene"]