"""Demo application."""

from .app import ConfigMode, DemoApplication, IDemoApplication

__all__ = ["ConfigMode", "DemoApplication", "IDemoApplication"]
