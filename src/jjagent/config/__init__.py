from .settings import Settings, get_settings, refresh_settings

__all__ = ["Settings", "get_settings", "refresh_settings"]
