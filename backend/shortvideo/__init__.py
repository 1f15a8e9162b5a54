"""
Short video render service.

Turns a scene list, a narration URL and stock footage URLs into a rendered
vertical MP4 through a queue-backed render worker.
"""

__version__ = "0.1.0"
