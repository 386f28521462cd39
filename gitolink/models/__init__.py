"""SQLAlchemy models.

All models should be imported here for Alembic to detect them.
"""

from gitolink.core.database import Base
from gitolink.models.user import User
from gitolink.models.link import Link
from gitolink.models.click import Click

__all__ = ["Base", "User", "Link", "Click"]
