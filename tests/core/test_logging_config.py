"""
로깅 설정 테스트 모듈

Rationale:
    JsonFormatter와 TraceIdFilter가 한 줄 JSON 로그에 dict 메시지, extra 필드,
    현재 요청의 Trace ID를 올바르게 담는지 검증합니다.
"""

import json
import logging

from app.core.context import set_trace_id, trace_id_context
from app.core.logging_config import JsonFormatter, TraceIdFilter, setup_logging


def make_record(msg, **extra) -> logging.LogRecord:
    record = logging.LogRecord("app.test", logging.WARNING, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """JsonFormatter 출력 구조"""

    def test_dict_message_is_merged(self):
        record = make_record({"message": "no applicable rate", "startOffset": 0, "endOffset": 60})
        log = json.loads(JsonFormatter().format(record))

        assert log["level"] == "WARNING"
        assert log["logger"] == "app.test"
        assert log["message"] == "no applicable rate"
        assert log["endOffset"] == 60

    def test_plain_message_and_extra(self):
        record = make_record("Unhandled Exception: boom", path="/api/parking/fee")
        log = json.loads(JsonFormatter().format(record))

        assert log["message"] == "Unhandled Exception: boom"
        assert log["path"] == "/api/parking/fee"

    def test_non_ascii_preserved(self):
        record = make_record({"message": "요청 횟수가 초과되었습니다."})
        assert "요청 횟수가 초과되었습니다." in JsonFormatter().format(record)

    def test_exception_info_included(self):
        try:
            raise ValueError("bad tariff")
        except ValueError:
            import sys
            record = logging.LogRecord("app", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        log = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad tariff" in log["exc_info"]


class TestTraceIdFilter:
    """Trace ID 주입"""

    def test_trace_id_injected(self):
        token = trace_id_context.set(None)
        try:
            set_trace_id("0f8fad5b-d9cb-469f-a165-70867728950e")
            record = make_record("hello")
            assert TraceIdFilter().filter(record) is True

            log = json.loads(JsonFormatter().format(record))
            assert log["trace_id"] == "0f8fad5b-d9cb-469f-a165-70867728950e"
        finally:
            trace_id_context.reset(token)

    def test_no_trace_id_outside_request(self):
        token = trace_id_context.set(None)
        try:
            record = make_record("hello")
            TraceIdFilter().filter(record)
            assert record.trace_id is None
        finally:
            trace_id_context.reset(token)


def test_setup_logging_creates_rotating_file(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        setup_logging(str(tmp_path / "logs"))
        added = [h for h in root.handlers if h not in before]

        assert (tmp_path / "logs").is_dir()
        assert len(added) == 2
        assert all(isinstance(h.formatter, JsonFormatter) for h in added)
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
