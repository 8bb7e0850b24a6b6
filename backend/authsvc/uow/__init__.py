from authsvc.uow.base import UnitOfWork
from authsvc.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "SQLAlchemyReadOnlyUnitOfWork",
    "SQLAlchemyUnitOfWork",
    "UnitOfWork",
]
