from .settings import Settings, AzureSettings, CollectionSettings, LogLevel, DEFAULT_RESOURCE_TYPE

__all__ = ["Settings", "AzureSettings", "CollectionSettings", "LogLevel", "DEFAULT_RESOURCE_TYPE"]
