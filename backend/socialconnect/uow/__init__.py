"""Transaction boundaries for application services.

Services open :class:`SQLAlchemyUnitOfWork` for commands and
:class:`SQLAlchemyReadOnlyUnitOfWork` for queries; both satisfy
:class:`UnitOfWork`.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
