"""
Storage utilities for scrape results.

Handles save/load of the RunResult JSON document.
"""

import json
from pathlib import Path
from typing import Optional, Union

from .models import RunResult
from .logger import get_logger

log = get_logger('storage')


def save_result(result: RunResult, output_path: Union[str, Path]) -> Path:
    """Write the run result as indented UTF-8 JSON. Creates parent dirs."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)

    log.info(f"Results saved to: {path}")
    return path


def load_result(output_path: Union[str, Path]) -> Optional[RunResult]:
    """Load a run result, or None if the file does not exist."""
    path = Path(output_path)
    if not path.exists():
        return None

    with open(path, encoding='utf-8') as f:
        return RunResult.from_dict(json.load(f))


class JsonResultSaver:
    """ResultSaver that writes to a fixed path."""

    def __init__(self, output_path: Union[str, Path]):
        self.output_path = Path(output_path)
        self.saved_to: Optional[Path] = None

    def __call__(self, result: RunResult) -> None:
        self.saved_to = save_result(result, self.output_path)
