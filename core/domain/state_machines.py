"""
State Machines

이벤트 처리, 동기화 엔진의 상태 전이 관리.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class StateMachineError(Exception):
    """상태 전이 오류"""
    pass


class EventProcessingState(str, Enum):
    """이벤트 처리 상태

    전이 규칙:
    - RECEIVED → ENTRIES_BUILT: 분개 생성
    - ENTRIES_BUILT → PERSISTED: 분개 저장 (+ 기금 잔액 반영)
    - RECEIVED / ENTRIES_BUILT → ERRORED: 어느 단계든 실패
    PERSISTED, ERRORED는 종료 상태.
    """
    RECEIVED = "received"
    ENTRIES_BUILT = "entries_built"
    PERSISTED = "persisted"
    ERRORED = "errored"


class SyncEngineState(str, Enum):
    """동기화 엔진 상태

    전이 규칙:
    - BOOTING → RUNNING: 초기화 완료
    - RUNNING → STOPPING: 종료 요청 (in-flight 이벤트 drain)
    - STOPPING → STOPPED: 종료 완료
    """
    BOOTING = "BOOTING"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"


class StateMachine:
    """상태 머신 기본 클래스

    Args:
        initial_state: 초기 상태
        transitions: 허용된 전이 정의 {from_state: [to_states]}
        name: 머신 이름 (로깅용)
    """

    def __init__(
        self,
        initial_state: str | Enum,
        transitions: dict[str, list[str]],
        name: str = "StateMachine",
    ):
        self._state = initial_state.value if isinstance(initial_state, Enum) else initial_state
        self._transitions = transitions
        self._name = name
        self._history: list[tuple[str, str]] = []

    @property
    def state(self) -> str:
        """현재 상태"""
        return self._state

    def can_transition(self, to_state: str | Enum) -> bool:
        """전이 가능 여부 확인"""
        target = to_state.value if isinstance(to_state, Enum) else to_state
        allowed = self._transitions.get(self._state, [])
        return target in allowed

    def transition(self, to_state: str | Enum) -> str:
        """상태 전이

        Args:
            to_state: 목표 상태

        Returns:
            새 상태

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state

        if not self.can_transition(target):
            allowed = self._transitions.get(self._state, [])
            raise StateMachineError(
                f"{self._name}: Cannot transition from {self._state} to {target}. "
                f"Allowed: {allowed}"
            )

        old_state = self._state
        self._state = target
        self._history.append((old_state, target))

        logger.debug(f"{self._name}: {old_state} → {target}")

        return target

    @property
    def history(self) -> list[tuple[str, str]]:
        """상태 전이 이력"""
        return self._history.copy()


class EventProcessingStateMachine(StateMachine):
    """이벤트 1건의 처리 상태 머신"""

    TRANSITIONS: dict[str, list[str]] = {
        "received": ["entries_built", "errored"],
        "entries_built": ["persisted", "errored"],
    }

    def __init__(
        self,
        initial_state: str | EventProcessingState = EventProcessingState.RECEIVED,
        name: str = "EventProcessingStateMachine",
    ):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name=name,
        )

    @property
    def is_terminal(self) -> bool:
        """종료 상태 여부"""
        return self._state in ("persisted", "errored")

    def fail(self) -> str:
        """ERRORED로 전이 (이미 종료 상태면 그대로)"""
        if self.is_terminal:
            return self._state
        return self.transition(EventProcessingState.ERRORED)


class SyncEngineStateMachine(StateMachine):
    """동기화 엔진 상태 머신"""

    TRANSITIONS: dict[str, list[str]] = {
        "BOOTING": ["RUNNING", "STOPPED"],
        "RUNNING": ["STOPPING"],
        "STOPPING": ["STOPPED"],
    }

    def __init__(self, initial_state: str | SyncEngineState = SyncEngineState.BOOTING):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name="SyncEngineStateMachine",
        )

    @property
    def is_running(self) -> bool:
        """실행 중 여부"""
        return self._state == "RUNNING"
