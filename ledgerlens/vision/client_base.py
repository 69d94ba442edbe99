from abc import ABC, abstractmethod


class BaseVisionClient(ABC):
    """Contract for provider-specific vision model clients."""

    @abstractmethod
    def analyze_image(
        self,
        *,
        image_bytes: bytes,
        prompt: str,
        timeout_seconds: float,
    ) -> str:
        """Send one PNG image with a prompt and return the model's plain-text reply.

        Raises:
            VisionNetworkError: on connection failures, timeouts and provider errors.
            VisionError: when the provider answers without usable content.
        """
