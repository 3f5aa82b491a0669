# src/trans_batch/application/authenticator.py
"""
批次令牌认证。

令牌是 UUID；格式不合法的令牌直接拒绝，不访问存储。
合法令牌只有在存储中存在属于它（且符合范围）的工作条目时才通过。
"""

from __future__ import annotations

import uuid

import structlog

from trans_batch.core.types import ItemKind
from trans_batch.infrastructure.uow import UowFactory

logger = structlog.get_logger(__name__)


def is_well_formed_token(token: str) -> bool:
    try:
        uuid.UUID(str(token))
    except ValueError:
        return False
    return True


class TokenAuthenticator:
    """基于存储的令牌认证器。存储错误以 StoreError 向上传播。"""

    def __init__(self, uow_factory: UowFactory):
        self._uow_factory = uow_factory

    async def is_authorized(self, token: str, scope: ItemKind | None = None) -> bool:
        scope_label = scope.value if scope else None
        if not is_well_formed_token(token):
            logger.warning("令牌格式不合法。", scope=scope_label)
            return False
        async with self._uow_factory() as uow:
            authorized = await uow.batches.token_has_items(token, scope)
        if not authorized:
            logger.warning("令牌下没有匹配的工作条目。", scope=scope_label)
        return authorized
