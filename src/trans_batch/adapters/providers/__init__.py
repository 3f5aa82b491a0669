# src/trans_batch/adapters/providers/__init__.py
"""
翻译供应商适配器及其注册表。
"""

from __future__ import annotations

from typing import Any

from trans_batch.core.types import ProviderName

from .base import BaseProviderConfig, BaseTranslationProvider
from .vendor_a import VendorAProvider
from .vendor_b import VendorBProvider
from .vendor_c import VendorCProvider

PROVIDER_REGISTRY: dict[ProviderName, type[BaseTranslationProvider[Any]]] = {
    provider.PROVIDER: provider
    for provider in (VendorAProvider, VendorBProvider, VendorCProvider)
}

__all__ = [
    "PROVIDER_REGISTRY",
    "BaseProviderConfig",
    "BaseTranslationProvider",
    "VendorAProvider",
    "VendorBProvider",
    "VendorCProvider",
]
