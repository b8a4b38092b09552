"""
Consolidated utilities module.
This module re-exports commonly used utilities from specialized modules.
"""

# Logging utilities
from .logging_utils import setup_logging

# Configuration management
from .config import config, ServiceConfig

# HTTP client utilities
from .http_client import AsyncHTTPClient, HTTPStatusError

# File utilities
from .file_utils import (
    decode_data_url,
    ensure_directory,
    extension_for_mime,
    guess_image_mime,
    sanitize_filename,
)

__all__ = [
    # Logging
    'setup_logging',
    # Config
    'config',
    'ServiceConfig',
    # HTTP
    'AsyncHTTPClient',
    'HTTPStatusError',
    # File utilities
    'decode_data_url',
    'ensure_directory',
    'extension_for_mime',
    'guess_image_mime',
    'sanitize_filename',
]
