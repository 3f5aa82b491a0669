# src/trans_batch/di/__init__.py
