"""Offline vision client.

Returns a canned reply in the line format the extraction prompt asks for.
Handy for local runs without a model server and as a template for new
provider adapters: implement BaseVisionClient and register the provider in
VisionClientFactory.
"""

from typing import ClassVar

from ledgerlens.vision.client_base import BaseVisionClient


class ExampleClientAdapter(BaseVisionClient):
    DEFAULT_RESPONSE: ClassVar[str] = (
        "Sales Revenue | 150000 | Revenue | 2024-Q1\n"
        "Operating Expenses | 95000 | Expense | 2024-Q1"
    )

    def __init__(self, response: str | None = None) -> None:
        self._response = response if response is not None else self.DEFAULT_RESPONSE

    def analyze_image(
        self,
        *,
        image_bytes: bytes,
        prompt: str,
        timeout_seconds: float,
    ) -> str:
        _ = image_bytes, prompt, timeout_seconds
        return self._response
