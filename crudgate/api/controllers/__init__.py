"""Controllers: map repository outcomes to ActionResults."""

from .audited import AuditedCRUDController
from .crud import CRUDController
from .legacy import LegacyCRUDController
from .read_only import ReadOnlyController

__all__ = [
    "CRUDController",
    "AuditedCRUDController",
    "ReadOnlyController",
    "LegacyCRUDController",
]
