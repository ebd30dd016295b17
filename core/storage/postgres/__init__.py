"""PostgreSQL storage for posts.

Notes
- We avoid logging connection URLs to prevent accidental secret leakage.
- The store speaks SQLAlchemy's async API; asyncpg is the production driver.
"""

from .config import PostgresConfig, normalize_database_url
from .stores import PostgresPostStore
