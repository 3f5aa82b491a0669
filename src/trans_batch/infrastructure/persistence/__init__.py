# src/trans_batch/infrastructure/persistence/__init__.py
