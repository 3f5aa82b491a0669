# src/trans_batch/infrastructure/persistence/repositories/__init__.py
from ._batch_repo import SqlAlchemyBatchRepository
from ._outbox_repo import SqlAlchemyOutboxRepository
from ._snapshot_repo import SqlAlchemyCounterpartRepository, SqlAlchemySnapshotRepository
from ._work_item_repo import SqlAlchemyWorkItemRepository

__all__ = [
    "SqlAlchemyBatchRepository",
    "SqlAlchemyWorkItemRepository",
    "SqlAlchemySnapshotRepository",
    "SqlAlchemyCounterpartRepository",
    "SqlAlchemyOutboxRepository",
]
