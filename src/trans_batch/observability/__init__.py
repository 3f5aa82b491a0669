# src/trans_batch/observability/__init__.py
