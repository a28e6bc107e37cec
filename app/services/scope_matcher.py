"""
규칙 적용 범위 판정 (Rule Scope Matcher)

Rationale:
    같은 시각에 같은 종류의 규칙이 여러 개 매칭되면 더 구체적인 범위
    (시간대 > 요일 > 무조건)를 우선합니다. 구체성이 같으면 목록 순서로
    임의 결정하지 않고 AmbiguousScopeError로 설정 오류를 드러냅니다.
    (순서 의존 선택이 과거 잘못된 요금의 원인이었음)
"""

from datetime import datetime
from typing import Iterable, Optional

from app.exception.service.tariff_exception import AmbiguousScopeError
from app.models.tariff import RuleKind, Scope, TariffRule
from app.services.calendar_service import CalendarResolver


def matches(scope: Scope, instant: datetime, calendar: CalendarResolver) -> bool:
    """Whether a rule scope applies at an absolute instant."""
    if scope.is_unscoped:
        return True
    day_type, minute_of_day = calendar.resolve(instant)
    if scope.day_types and day_type not in scope.day_types:
        return False
    if scope.time_range is not None and not scope.time_range.contains(minute_of_day):
        return False
    return True


def _pick_most_specific(candidates: list[TariffRule], key, instant: datetime) -> TariffRule:
    ranked = sorted(set(candidates), key=key, reverse=True)
    if len(ranked) > 1 and key(ranked[0]) == key(ranked[1]):
        raise AmbiguousScopeError(
            f"{ranked[0].kind.value} 규칙이 {instant.isoformat()} 시점에 같은 구체성으로 중복됩니다: "
            f"{_describe(ranked[0])} / {_describe(ranked[1])}"
        )
    return ranked[0]


def select_metering_rule(
    rules: Iterable[TariffRule],
    instant: datetime,
    elapsed_minutes: int,
    calendar: CalendarResolver,
) -> Optional[TariffRule]:
    """
    Resolve the single active base/progressive rule at an instant.

    A progressive rule is eligible once ``elapsed_minutes`` reaches its
    ``apply_after`` and then supersedes base rules. Among eligible progressive
    rules the most specific scope wins, then the latest threshold.

    Raises:
        AmbiguousScopeError: If two distinct rules tie for the win.
    """
    base: list[TariffRule] = []
    progressive: list[TariffRule] = []
    for rule in rules:
        if not rule.is_metering or not matches(rule.scope, instant, calendar):
            continue
        if rule.kind is RuleKind.PROGRESSIVE:
            if elapsed_minutes >= rule.apply_after:
                progressive.append(rule)
        else:
            base.append(rule)

    if progressive:
        return _pick_most_specific(
            progressive, lambda r: (r.scope.specificity, r.apply_after), instant
        )
    if base:
        return _pick_most_specific(base, lambda r: r.scope.specificity, instant)
    return None


def _describe(rule: TariffRule) -> str:
    parts = [f"{rule.unit_minutes}分{rule.unit_price}円"]
    if rule.scope.time_range is not None:
        parts.append(rule.scope.time_range.label())
    if rule.scope.day_types:
        parts.append("/".join(sorted(d.value for d in rule.scope.day_types)))
    return " ".join(parts)
