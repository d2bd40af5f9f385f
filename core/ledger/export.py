"""
분개 내보내기 (CSV)

외부 회계 도구로 가져갈 수 있도록 분개 행을 CSV 문자열로 변환.
"""

import csv
import io
from collections.abc import Iterable

from core.ledger.entry_builder import JournalEntry

# (헤더, JournalEntry.to_dict 키)
EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Date", "transaction_date"),
    ("Transaction ID", "transaction_id"),
    ("Account Code", "account_code"),
    ("Account Name", "account_name"),
    ("Debit", "debit_amount"),
    ("Credit", "credit_amount"),
    ("Description", "description"),
    ("Source Type", "source_type"),
    ("Source ID", "source_id"),
    ("Reference", "reference_number"),
)


def entries_to_csv(entries: Iterable[JournalEntry], delimiter: str = ",") -> str:
    """분개 행 목록을 CSV 문자열로 변환

    금액은 Decimal 문자열 그대로 기록 (반올림 없음).

    Args:
        entries: 분개 행
        delimiter: 구분자

    Returns:
        헤더 포함 CSV 문자열
    """
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL)

    writer.writerow([header for header, _ in EXPORT_COLUMNS])

    for entry in entries:
        data = entry.to_dict()
        writer.writerow(["" if data[key] is None else data[key] for _, key in EXPORT_COLUMNS])

    return output.getvalue()
