"""Unit tests for wire frames."""

from __future__ import annotations

import json

import pytest

from protobind.exceptions import ProtocolFramingError
from protobind.runtime import RequestFrame, parse_frame


class TestRequestFrame:
    def test_with_params(self) -> None:
        frame = RequestFrame(id=1, method="Page.navigate", params={"url": "http://x"})
        assert json.loads(frame.to_json()) == {"id": 1, "method": "Page.navigate", "params": {"url": "http://x"}}

    def test_params_omitted_when_absent(self) -> None:
        data = json.loads(RequestFrame(id=2, method="Page.enable").to_json())
        assert data == {"id": 2, "method": "Page.enable"}

    def test_empty_params_kept(self) -> None:
        data = json.loads(RequestFrame(id=3, method="Log.clear", params={}).to_json())
        assert data["params"] == {}


class TestParseFrame:
    def test_response(self) -> None:
        frame = parse_frame('{"id": 1, "result": {"frameId": "17"}}')
        assert frame.is_response
        assert not frame.is_notification
        assert frame.result == {"frameId": "17"}

    def test_response_without_result(self) -> None:
        frame = parse_frame({"id": 4})
        assert frame.is_response
        assert frame.result is None

    def test_error_response(self) -> None:
        frame = parse_frame({"id": 5, "error": {"code": -32601, "message": "not found"}})
        assert frame.error.code == -32601
        assert frame.error.message == "not found"

    def test_notification(self) -> None:
        frame = parse_frame(b'{"method": "Page.loaded"}')
        assert frame.is_notification
        assert frame.params is None

    def test_extra_keys_allowed(self) -> None:
        frame = parse_frame({"method": "Target.received", "params": {}, "sessionId": "s1"})
        assert frame.method == "Target.received"

    @pytest.mark.parametrize("raw", ["{not json", b"\xff\xfe", "[1, 2]", '"text"'])
    def test_rejects_malformed(self, raw) -> None:
        with pytest.raises(ProtocolFramingError) as exc_info:
            parse_frame(raw)
        assert exc_info.value.frame == raw

    def test_rejects_bad_shape(self) -> None:
        with pytest.raises(ProtocolFramingError, match="Malformed frame"):
            parse_frame({"id": "not-a-number", "result": {}})

    @pytest.mark.parametrize("frame_id", ["1", 1.0, True])
    def test_rejects_id_that_only_coerces_to_int(self, frame_id) -> None:
        with pytest.raises(ProtocolFramingError, match="Malformed frame"):
            parse_frame({"id": frame_id, "result": 5})

    def test_neither_response_nor_notification(self) -> None:
        frame = parse_frame({"params": {}})
        assert not frame.is_response
        assert not frame.is_notification
