import base64

import httpx
import openai

from ledgerlens.vision.client_base import BaseVisionClient
from ledgerlens.vision.exceptions import VisionError, VisionNetworkError


class OpenAIClientAdapter(BaseVisionClient):
    """Vision client for any OpenAI-compatible chat API, including Ollama."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: float,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def analyze_image(
        self,
        *,
        image_bytes: bytes,
        prompt: str,
        timeout_seconds: float,
    ) -> str:
        encoded = base64.b64encode(image_bytes).decode("ascii")
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=0.0,
                timeout=timeout_seconds,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:image/png;base64,{encoded}"},
                            },
                        ],
                    }
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise VisionNetworkError(f"Vision provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise VisionNetworkError(f"Vision provider API error: {exc}") from exc

        if not response.choices:
            raise VisionError("Vision model returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise VisionError("Vision model returned empty response")
        return content
