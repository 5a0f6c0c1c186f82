"""
vtmsu.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Every table is created through `vtmsu.db.base.table_name`, so several projects
# can share one database without name clashes.
