"""Built-in interpreters.

Importing this package registers all shipped interpreters with the registry.
"""

from __future__ import annotations

from nbinterp.interpreters.postgresql import PostgreSqlInterpreter
from nbinterp.interpreters.springxd import (
    SpringXdInterpreter,
    SpringXdJobInterpreter,
    SpringXdStreamInterpreter,
)

__all__ = [
    "PostgreSqlInterpreter",
    "SpringXdInterpreter",
    "SpringXdJobInterpreter",
    "SpringXdStreamInterpreter",
]
