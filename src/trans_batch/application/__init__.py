# src/trans_batch/application/__init__.py
from .authenticator import TokenAuthenticator
from .change_detector import ChangeDetector
from .orchestrator import BatchOrchestrator, BatchRun

__all__ = ["TokenAuthenticator", "ChangeDetector", "BatchOrchestrator", "BatchRun"]
