"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 Decimal 정밀도를 유지하도록 문자열로 전달.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.ledger.entry_builder import JournalEntry, JournalTransaction


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    environment: str = Field(..., description="실행 환경 (production/sandbox)")
    version: str = Field(..., description="애플리케이션 버전")


class JournalEntryResponse(BaseModel):
    """분개 행 응답"""

    id: str | None = Field(default=None, description="분개 행 ID")
    transaction_id: str = Field(..., description="거래 ID (EXP-/PAY-/FUND-)")
    account_code: str = Field(..., description="계정 코드")
    account_name: str = Field(..., description="계정 이름")
    debit_amount: str = Field(..., description="차변 금액")
    credit_amount: str = Field(..., description="대변 금액")
    description: str = Field(..., description="적요")
    transaction_date: str = Field(..., description="거래일 (YYYY-MM-DD)")
    source_type: str = Field(..., description="출처 유형 (expense/payment/fund_receipt)")
    source_id: str | None = Field(default=None, description="출처 레코드 ID")
    reference_number: str | None = Field(default=None, description="참조 번호")

    @classmethod
    def from_entry(cls, entry: JournalEntry) -> "JournalEntryResponse":
        return cls(**entry.to_dict())


class JournalTransactionResponse(BaseModel):
    """거래(분개 묶음) 응답"""

    transaction_id: str = Field(..., description="거래 ID")
    entries: list[JournalEntryResponse] = Field(..., description="분개 행 목록")
    total_debit: str = Field(..., description="차변 합계")
    total_credit: str = Field(..., description="대변 합계")
    is_balanced: bool = Field(..., description="차변 합계 = 대변 합계 여부")

    @classmethod
    def from_transaction(cls, transaction: JournalTransaction) -> "JournalTransactionResponse":
        return cls(
            transaction_id=transaction.transaction_id,
            entries=[JournalEntryResponse.from_entry(e) for e in transaction.entries],
            total_debit=str(transaction.total_debit),
            total_credit=str(transaction.total_credit),
            is_balanced=transaction.total_debit == transaction.total_credit,
        )


class TrialBalanceAccount(BaseModel):
    """시산표 계정 행"""

    code: str = Field(..., description="계정 코드")
    name: str = Field(..., description="계정 이름")
    account_type: str | None = Field(default=None, description="계정 유형")
    total_debit: str = Field(..., description="차변 합계")
    total_credit: str = Field(..., description="대변 합계")
    balance: str = Field(..., description="정상잔액 방향 잔액")


class TrialBalanceResponse(BaseModel):
    """시산표 응답"""

    accounts: list[TrialBalanceAccount] = Field(..., description="계정별 합계")
    total_debit: str = Field(..., description="전체 차변 합계")
    total_credit: str = Field(..., description="전체 대변 합계")
    is_balanced: bool = Field(..., description="전체 균형 여부")

    @classmethod
    def from_store(cls, data: dict[str, Any]) -> "TrialBalanceResponse":
        return cls(
            accounts=[
                TrialBalanceAccount(
                    code=a["code"],
                    name=a["name"],
                    account_type=a["account_type"],
                    total_debit=str(a["total_debit"]),
                    total_credit=str(a["total_credit"]),
                    balance=str(a["balance"]),
                )
                for a in data["accounts"]
            ],
            total_debit=str(data["total_debit"]),
            total_credit=str(data["total_credit"]),
            is_balanced=data["is_balanced"],
        )


class AccountResponse(BaseModel):
    """계정과목 응답"""

    code: str = Field(..., description="계정 코드")
    name: str = Field(..., description="계정 이름")
    account_type: str = Field(..., description="계정 유형")
    normal_balance: str = Field(..., description="정상잔액 방향 (debit/credit)")


class AccountBalanceResponse(BaseModel):
    """계정 잔액 응답"""

    code: str = Field(..., description="계정 코드")
    name: str = Field(..., description="계정 이름")
    balance: str = Field(..., description="정상잔액 방향 잔액")


class FundSourceResponse(BaseModel):
    """기금 현황 응답"""

    id: str = Field(..., description="기금 ID")
    name: str = Field(..., description="기금 이름")
    amount: str = Field(..., description="잔액")
    original_amount: str | None = Field(default=None, description="수령 금액")
    is_restricted: bool = Field(..., description="제한 기금 여부")
    received_date: str | None = Field(default=None, description="수령일")
    status: str = Field(..., description="사용 상태 (received/partially_used/fully_used)")
    utilization_pct: str | None = Field(default=None, description="사용률 (%)")
