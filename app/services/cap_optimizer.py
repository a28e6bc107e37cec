"""
Cap Optimizer (최대 요금 최적화)

breakpoint 열 0 = b0 < b1 < ... < bn = duration 위의 최단 경로 문제로 최종 요금을 구합니다.

    dp[0] = 0
    dp[j] = min( dp[i] + raw(b_i, b_j)               (i < j, 미터 과금)
                 dp[i] + cap.price                   (cap 창 == [b_i, b_j)) )

Rationale:
    최대 요금은 "선택 가능한 상한"이지 의무 할인이 아닙니다. 창은 서로 중첩/포함될 수 있으므로
    (종일 최대 ⊃ 야간 최대 ⊃ 여러 과금 세그먼트) 순서대로 탐욕 적용하면 과소/과다 청구가 납니다.
    raw 간선을 모든 i < j에 두는 이유: 같은 규칙 구간을 나누면 올림 합이 줄지 않으므로
    분할은 cap 창 경계(미터가 재시작되는 지점)에서만 선택됩니다.
"""

import logging
import math
from collections import defaultdict
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from app.services.breakpoint_builder import CapWindow
from app.services.segment_service import AccrualCalculator

logger = logging.getLogger(__name__)


class PathStep(BaseModel):
    """최적 경로의 간선 1개: breakpoint 인덱스 [i, j)와 적용된 cap 창(없으면 미터 과금)"""
    model_config = ConfigDict(frozen=True)

    start_index: int
    end_index: int
    window: Optional[CapWindow] = None


class CapOptimizer:
    def __init__(
        self,
        breakpoints: Sequence[int],
        accrual: AccrualCalculator,
        windows: Sequence[CapWindow],
    ):
        self.breakpoints = list(breakpoints)
        self.accrual = accrual
        self.windows = list(windows)

    def _cap_edges(self) -> dict[int, list[tuple[int, CapWindow]]]:
        index = {bp: k for k, bp in enumerate(self.breakpoints)}
        flat_rate = any(interval.cap_only for interval in self.accrual.intervals)
        edges: dict[int, list[tuple[int, CapWindow]]] = defaultdict(list)
        for window in self.windows:
            start, end = index[window.start], index[window.end]
            # 정액제에서는 창 중간에 진입해도 창 가격을 지불하고 창 끝까지 이용 가능
            starts = range(start, end) if flat_rate else (start,)
            for k in starts:
                edges[k].append((end, window))
        return edges

    def solve(self) -> tuple[int, list[PathStep]]:
        """
        Return the minimum total and the chosen path from ``b0`` to ``bn``.

        Edges are relaxed in increasing start order, raw accrual before caps, and
        only a strictly cheaper edge replaces a predecessor.
        """
        n = len(self.breakpoints) - 1
        dp: list[float] = [math.inf] * (n + 1)
        prev: list[Optional[PathStep]] = [None] * (n + 1)
        dp[0] = 0
        cap_edges = self._cap_edges()

        def relax(j: int, cost: float, step: PathStep) -> None:
            if cost < dp[j]:
                dp[j] = cost
                prev[j] = step

        for i in range(n):
            if dp[i] == math.inf:
                continue
            for j, charge in self.accrual.span_charges(i):
                relax(j, dp[i] + charge, PathStep(start_index=i, end_index=j))
            for j, window in cap_edges.get(i, ()):
                relax(j, dp[i] + window.rule.unit_price, PathStep(start_index=i, end_index=j, window=window))

        if dp[n] == math.inf:
            raise RuntimeError("no tariff path covers the whole session")

        path: list[PathStep] = []
        j = n
        while j > 0:
            step = prev[j]
            path.append(step)
            j = step.start_index
        path.reverse()

        logger.debug({
            "message": "cap optimizer solved",
            "breakpoints": len(self.breakpoints),
            "capWindows": len(self.windows),
            "total": dp[n],
            "capsUsed": sum(1 for s in path if s.window is not None),
        })
        return int(dp[n]), path
