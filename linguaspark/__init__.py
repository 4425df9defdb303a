"""
LinguaSpark content client - resilient access to the content generation API.
"""

from linguaspark.container import ServiceContainer, create_container
from linguaspark.settings import Settings, load_settings

__all__ = ["ServiceContainer", "Settings", "create_container", "load_settings"]
