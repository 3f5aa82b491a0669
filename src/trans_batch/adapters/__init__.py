# src/trans_batch/adapters/__init__.py
