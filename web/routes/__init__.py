"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- ledger: 복식부기 조회 (분개, 시산표, 계정 잔액, CSV)
- funds: 기금 현황
"""
