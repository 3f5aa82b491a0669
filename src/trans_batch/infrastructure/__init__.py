# src/trans_batch/infrastructure/__init__.py
