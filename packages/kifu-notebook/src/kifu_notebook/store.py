from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kifu_model.errors import KifuError, MalformedRecord
from kifu_model.types import Record

from .config import NotebookConfig


logger = logging.getLogger(__name__)


class RecordNotFound(KifuError, FileNotFoundError):
    """The notebook file does not exist yet; it is created on the first save."""


@dataclass(frozen=True, slots=True)
class NotebookStore:
    path: Path
    indent: int | None = 2

    @classmethod
    def from_config(cls, config: NotebookConfig) -> NotebookStore:
        return cls(Path(config.path), indent=config.indent)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Record:
        if not self.exists():
            logger.info("notebook file %s not found; it will be created on save", self.path)
            raise RecordNotFound(f"notebook file {self.path} not found")
        try:
            data: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise MalformedRecord(f"{self.path}: {e}") from e
        if not isinstance(data, dict):
            raise MalformedRecord(f"{self.path}: expected a JSON object")
        logger.info("notebook file %s loaded", self.path)
        return data  # type: ignore[return-value]

    def save(self, record: Record) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(record, indent=self.indent, ensure_ascii=False) + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.info("notebook file %s saved", self.path)
