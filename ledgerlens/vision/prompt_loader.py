from pathlib import Path

from ledgerlens.vision.exceptions import VisionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the page extraction prompt sent with every rendered PDF page.

    Args:
        path: Prompt file to read. Defaults to the bundled
              vision_extraction_prompt.txt.

    Raises:
        VisionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "vision_extraction_prompt.txt"
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise VisionError(f"Failed to load vision prompt: {exc}") from exc
