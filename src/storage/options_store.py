from __future__ import annotations

import json
import logging
from pathlib import Path

from todo_planner.models import Options

logger = logging.getLogger(__name__)


class OptionsStore:
    def __init__(self, path: str = "data/options.json"):
        self.path = Path(path)

    def load(self) -> Options:
        try:
            if not self.path.exists():
                return Options()

            data = json.loads(self.path.read_text(encoding="utf-8"))
            return Options(**data)
        except Exception as e:
            logger.warning(f"Could not read options from {self.path}, using defaults: {e}")
            return Options()

    def save(self, options: Options) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(options.model_dump(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
