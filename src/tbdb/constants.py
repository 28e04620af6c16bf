"""
This module provides constants used throughout tbdb and its CLI. It should be kept
free of memory heavy imports.
"""

APP_NAME = "tbdb"
DEFAULT_CONFIG_NAME = "tbdb"

# connection defaults
DEFAULT_DRIVER = "mysql"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3306
DEFAULT_CHARSET = "utf8"

# error translation
DEFAULT_ERROR_MESSAGE = "Unexpected database error"
DEFAULT_ERROR_CODE = -1
