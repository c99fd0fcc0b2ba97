"""Configuration loading result object.

This module defines a standard result object for reading one config file.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ConfigResult:
    """Result of reading a single configuration file.

    Attributes:
        success: Whether the file was read and parsed
        data: Parsed mapping (empty when the file does not exist)
        error: Error message (if unsuccessful)
        exception: Original exception (if an error occurred)
        path: Path to the configuration file
    """

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    exception: Optional[Exception] = None
    path: Optional[str] = None
