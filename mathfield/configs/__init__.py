"""Editor and logging configuration."""

from .editor_config import EditorConfig
from .logging_config import setup_logging

__all__ = ['EditorConfig', 'setup_logging']
