# src/trans_batch/__init__.py
"""
trans-batch：按令牌运行的批量翻译管线。
"""

__version__ = "1.0.0"
