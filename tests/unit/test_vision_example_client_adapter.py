"""Tests for the offline ExampleClientAdapter."""

from ledgerlens.vision.example_client_adapter import ExampleClientAdapter
from ledgerlens.vision.response_parser import parse_vision_response
from tests.conftest import FIXED_NOW


class TestExampleClientAdapter:
    def test_default_reply_parses_into_records(self) -> None:
        reply = ExampleClientAdapter().analyze_image(
            image_bytes=b"png", prompt="p", timeout_seconds=1
        )
        records = parse_vision_response(reply, 1, default_period="2024-03", recorded_at=FIXED_NOW)
        assert [r.category for r in records] == ["Revenue", "Expense"]

    def test_custom_reply(self) -> None:
        adapter = ExampleClientAdapter(response="NO_DATA")
        assert adapter.analyze_image(image_bytes=b"", prompt="", timeout_seconds=1) == "NO_DATA"

    def test_ignores_input_parameters(self) -> None:
        adapter = ExampleClientAdapter()
        r1 = adapter.analyze_image(image_bytes=b"a", prompt="p1", timeout_seconds=1)
        r2 = adapter.analyze_image(image_bytes=b"b", prompt="p2", timeout_seconds=60)
        assert r1 == r2
