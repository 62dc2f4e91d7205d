from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Optional

from ..adapters.base import Product


class JSONLinesExporter:
    """One JSON object per line, flushed as products arrive."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.count = 0
        self._file: Optional[IO[str]] = None

    def __enter__(self) -> "JSONLinesExporter":
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "w", encoding="utf-8")
        return self

    def __exit__(self, *exc_info) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def write(self, product: Product) -> None:
        if self._file is None:
            raise RuntimeError("JSONLinesExporter used outside of `with`")
        self._file.write(json.dumps(product.to_dict(), ensure_ascii=False) + "\n")
        self._file.flush()
        self.count += 1
