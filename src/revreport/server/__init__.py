"""revreport HTTP server and settings.

The FastAPI application lives in ``revreport.server.app`` and is imported
explicitly so that the settings module stays importable from the library.
"""

from revreport.server.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
