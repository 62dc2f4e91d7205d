from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Any, Optional

from ..adapters.base import PRODUCT_FIELDS, Product


class CSVExporter:
    """
    Writes a header row, then one row per product in PRODUCT_FIELDS order.
    """

    _headers = list(PRODUCT_FIELDS)

    def __init__(self, path: str) -> None:
        self.path = path
        self.count = 0
        self._file: Optional[IO[str]] = None
        self._writer: Any = None

    def __enter__(self) -> "CSVExporter":
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "w", encoding="utf-8", newline="")
        self._writer = csv.writer(self._file)
        self._writer.writerow(self._headers)
        return self

    def __exit__(self, *exc_info) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None

    def write(self, product: Product) -> None:
        if self._writer is None:
            raise RuntimeError("CSVExporter used outside of `with`")
        row = product.to_dict()
        self._writer.writerow([row[h] for h in self._headers])
        self.count += 1
