"""Platform infrastructure module.

This module provides the infrastructure shared by every run consumer:
- Settings loaded from the environment
- Structured logging and metrics
- The run service client
"""

from runstream_client.platform.settings import Settings

__all__ = ["Settings"]
