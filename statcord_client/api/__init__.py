from .statcord import StatcordAPI

__all__ = ["StatcordAPI"]
