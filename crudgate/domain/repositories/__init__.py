"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in crudgate/infrastructure/persistence/ and
are wired at the application boundary via dependency injection.

Import from this package rather than individual modules to avoid coupling
handlers to specific repository module paths.
"""

from .audited import AuditedRepository, AuditedWritable, Writable
from .base import ReadOnlyRepository, Repository

__all__ = [
    "ReadOnlyRepository",
    "Repository",
    "AuditedRepository",
    "Writable",
    "AuditedWritable",
]
