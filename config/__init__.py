from .config_loader import ClientSettings, ConfigLoader

__all__ = ["ClientSettings", "ConfigLoader"]
