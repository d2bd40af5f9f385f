"""
스토리지 모듈

지출/기금/카테고리 레코드 저장소 제공
"""

from core.storage.record_store import RecordStore

__all__ = [
    "RecordStore",
]
