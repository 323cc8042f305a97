from .base import BaseService
from .edit_service import (
    ObjectEditService,
    assemble_completed_parts,
    multipart_session,
)
from .part_executor import PartExecutor

__all__ = [
    "BaseService",
    "ObjectEditService",
    "PartExecutor",
    "assemble_completed_parts",
    "multipart_session",
]
