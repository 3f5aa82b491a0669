# src/trans_batch/domain/__init__.py
