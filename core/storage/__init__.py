"""Storage implementations of the persistence interfaces.

Keeping implementations separate from the protocol lets the HTTP layer run
against either backend.
"""

from .memory_stores import InMemoryPostStore
from .postgres import PostgresConfig, PostgresPostStore
