"""HTTP fetcher for the remote CSV/Excel reference tables."""
from __future__ import annotations

import logging
import unicodedata
from io import BytesIO
from typing import List, Optional

import httpx
import pandas as pd

from app.retrieval.models import Row

logger = logging.getLogger(__name__)

_ZIP_SIGNATURE = b"PK\x03\x04"
_EXCEL_SUFFIXES = (".xlsx", ".xls", ".xlsm")

# Tried in order; sheets saved from Excel on Vietnamese Windows arrive as cp1258.
# latin-1 decodes any byte sequence, so the last attempt always yields rows.
CSV_ENCODINGS = ("utf-8-sig", "cp1258", "latin-1")


def _looks_like_excel(url: str, content: bytes) -> bool:
    path = httpx.URL(url).path.lower()
    return content.startswith(_ZIP_SIGNATURE) or path.endswith(_EXCEL_SUFFIXES)


def _read_csv(content: bytes, encoding: str) -> pd.DataFrame:
    return pd.read_csv(
        BytesIO(content),
        dtype=str,
        keep_default_na=False,
        encoding=encoding,
        skipinitialspace=True,
    )


def _decode_csv(content: bytes) -> pd.DataFrame:
    for encoding in CSV_ENCODINGS[:-1]:
        try:
            return _read_csv(content, encoding)
        except UnicodeDecodeError as exc:
            logger.warning("CSV payload is not %s (%s), trying next encoding", encoding, exc)
    return _read_csv(content, CSV_ENCODINGS[-1])


def _nfc(value: object) -> str:
    return unicodedata.normalize("NFC", str(value))


def parse_table(content: bytes, *, excel: bool = False) -> List[Row]:
    """Decode a delimited-text or spreadsheet payload into header-keyed rows."""

    if excel:
        frame = pd.read_excel(BytesIO(content), dtype=str, keep_default_na=False)
    else:
        frame = _decode_csv(content)
    frame = frame.fillna("")
    frame.columns = [_nfc(col).strip() for col in frame.columns]
    return [
        {_nfc(key): _nfc(value) for key, value in record.items()}
        for record in frame.to_dict(orient="records")
    ]


class DatasetFetcher:
    """Downloads a table over plain HTTP GET with a bounded timeout."""

    def __init__(
        self,
        *,
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    async def fetch_rows(self, url: str) -> List[Row]:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
            follow_redirects=True,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            content = response.content

        if not content.strip():
            return []
        return parse_table(content, excel=_looks_like_excel(url, content))
