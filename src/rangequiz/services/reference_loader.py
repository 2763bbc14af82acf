"""Service for fetching and parsing the hand reference table."""
import asyncio
import csv
import io
import logging
import math
from pathlib import Path
from typing import List, Optional
from urllib.parse import urljoin

import httpx

from rangequiz.errors import FetchError, ParseError
from rangequiz.models.quiz_models import Item, Number

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Hand", "Color", "Players", "misses")
MIN_WEIGHT = 1


def ensure_minimum_misses(misses: Number) -> int:
    """Apply the weight floor so every hand stays selectable."""
    return max(MIN_WEIGHT, int(misses))


def parse_number(value: Optional[str], fallback: Number = 0) -> Number:
    """Parse a numeric cell, returning fallback for anything non-numeric."""
    if value is None:
        return fallback
    text = value.strip()
    if not text:
        return fallback
    try:
        parsed = float(text)
    except ValueError:
        return fallback
    if not math.isfinite(parsed):
        return fallback
    return int(parsed) if parsed.is_integer() else parsed


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def resolve_source(base_path: str, file_name: str) -> str:
    """Join the reference file name onto the deployment base path."""
    if is_url(base_path):
        return urljoin(base_path.rstrip("/") + "/", file_name)
    return str(Path(base_path) / file_name)


class ReferenceLoader:
    """Loads the static hand table into items."""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    async def fetch(self, source: str) -> str:
        """Read the raw table from a URL or a filesystem path."""
        logger.info(f"Fetching reference table from {source}")
        if is_url(source):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(source)
                    response.raise_for_status()
            except httpx.HTTPError as e:
                raise FetchError(f"Failed to fetch reference table: {e}") from e
            try:
                return response.content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"Reference table is not valid UTF-8: {e}") from e

        try:
            return await asyncio.to_thread(Path(source).read_text, encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Reference table is not valid UTF-8: {e}") from e
        except OSError as e:
            raise FetchError(f"Failed to read reference table: {e}") from e

    def load(self, raw_table: str) -> List[Item]:
        """Parse the raw CSV text into items, keeping row order."""
        reader = csv.DictReader(io.StringIO(raw_table.lstrip("\ufeff")))
        try:
            header = reader.fieldnames
        except csv.Error as e:
            raise ParseError(f"Failed to parse reference table header: {e}") from e
        if not header:
            raise ParseError("Reference table is empty")

        header = [name.strip() for name in header]
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise ParseError(f"Reference table is missing columns: {', '.join(missing)}")
        reader.fieldnames = header

        items = []
        try:
            for row in reader:
                if None in row:
                    raise ParseError(f"Too many fields on line {reader.line_num}")
                if not any((value or "").strip() for value in row.values()):
                    continue  # blank line
                if None in row.values():
                    raise ParseError(f"Too few fields on line {reader.line_num}")
                item = self._row_to_item(row)
                if item is not None:
                    items.append(item)
        except csv.Error as e:
            raise ParseError(f"Failed to parse reference table on line {reader.line_num}: {e}") from e

        logger.info(f"Loaded {len(items)} hands from reference table")
        return items

    @staticmethod
    def _row_to_item(row: dict) -> Optional[Item]:
        hand = (row.get("Hand") or "").strip()
        if not hand:
            return None
        return Item(
            hand=hand,
            color=(row.get("Color") or "").strip(),
            players=parse_number(row.get("Players"), 0),
            misses=ensure_minimum_misses(math.ceil(parse_number(row.get("misses"), 1))),
        )
