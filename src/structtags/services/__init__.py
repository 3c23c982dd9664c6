"""Service layer — tag operations returning OpResult.

Services may import from domain, infrastructure, and plugins.
They must never import from commands or output.
"""

from structtags.services.result import OpError, OpResult
from structtags.services.tags import TagService

__all__ = ["OpError", "OpResult", "TagService"]
