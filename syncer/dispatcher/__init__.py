"""
Change-Event Dispatcher 모듈

변경 알림을 구독 조건으로 걸러 BusinessEvent task로 분배.
"""

from syncer.dispatcher.dispatcher import ChangeEventDispatcher
from syncer.dispatcher.subscriptions import (
    DEFAULT_SUBSCRIPTIONS,
    Subscription,
    decode_record,
)

__all__ = [
    "ChangeEventDispatcher",
    "Subscription",
    "DEFAULT_SUBSCRIPTIONS",
    "decode_record",
]
