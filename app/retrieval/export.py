"""Write selected rows to a downloadable CSV file."""
from __future__ import annotations

import csv
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

import pandas as pd

from app.retrieval.models import Row

logger = logging.getLogger(__name__)


class ExportWriter:
    """Creates one immutable CSV per call under a publicly served directory.

    Every field, header included, is double quoted with inner quotes doubled.
    An empty row set produces no file and ``write`` returns ``None``.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        url_prefix: str = "/downloads",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.clock = clock

    def _filename(self, prefix: str) -> str:
        stamp = self.clock().strftime("%Y%m%d-%H%M%S-%f")
        return f"{prefix}-{stamp}-{uuid.uuid4().hex[:6]}.csv"

    def write(self, rows: Sequence[Row], *, prefix: str = "export") -> Optional[str]:
        if not rows:
            return None

        columns = list(rows[0].keys())
        frame = pd.DataFrame(
            [[str(row.get(col, "")) for col in columns] for row in rows],
            columns=columns,
        )

        self.directory.mkdir(parents=True, exist_ok=True)
        filename = self._filename(prefix)
        path = self.directory / filename
        frame.to_csv(
            path,
            index=False,
            quoting=csv.QUOTE_ALL,
            lineterminator="\n",
            encoding="utf-8-sig",
        )
        logger.info("Exported %s rows to %s", len(rows), path)
        return f"{self.url_prefix}/{filename}"
