"""
Rate Desk - Data Loader
Fetches the rate card from the remote spreadsheet, a local file or the
built-in backup, and parses CSV / JSON / XLSX payloads into role records.

Sources are tried in order until one returns a non-empty table:

    remote download (content-type dispatch) -> CSV export -> local file -> backup
"""

import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

import pandas as pd
import requests

from rate_desk import config
from rate_desk.utils.errors import DataAcquisitionError
from rate_desk.utils.models import RateTable, RoleRecord
from rate_desk.utils.rate_card_data import backup_rate_table

logger = logging.getLogger(__name__)

SHEET_HEADERS = ['Role', 'Onshore Cost/hr', 'Offshore Cost/hr', 'Nearshore Cost/hr', 'Client Rate/hr']


# =============================================================================
# PARSING
# =============================================================================

def parse_numeric(value) -> float:
    """Parse formatted number strings. Anything unparseable is 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if pd.isna(value) else float(value)
    if pd.isna(value):
        return 0.0
    cleaned = str(value).replace('$', '').replace(',', '').replace('%', '').replace(' ', '').strip()
    if cleaned.startswith('(') and cleaned.endswith(')'):
        cleaned = '-' + cleaned[1:-1]
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def _cost(value, role: str, column: str) -> float:
    cost = parse_numeric(value)
    if cost < 0 or cost != cost:
        logger.warning("%s: %s is %r, using 0", role, column, value)
        return 0.0
    return cost


def _client_rate(value, role: str) -> Optional[float]:
    if value is None or (not isinstance(value, str) and pd.isna(value)) or str(value).strip() == '':
        return None
    return _cost(value, role, 'client rate')


def _role_name(value) -> str:
    if value is None:
        return ''
    if not isinstance(value, str) and pd.isna(value):
        return ''
    return str(value).strip().strip('"').strip()


def build_rate_table(rows: Iterable[tuple], source: str = 'data') -> RateTable:
    """
    Turn (role, onshore, offshore, nearshore[, client_rate]) rows into a table.
    Rows without a role are dropped; a repeated role keeps its first row.
    Raises DataAcquisitionError when nothing usable remains.
    """
    records = []
    seen = set()
    for row in rows:
        row = list(row) + [None] * (5 - len(row))
        role = _role_name(row[0])
        if not role:
            continue
        if role in seen:
            logger.warning("%s: duplicate role '%s' ignored", source, role)
            continue
        seen.add(role)
        records.append(RoleRecord(
            role=role,
            onshore_cost=_cost(row[1], role, 'onshore cost'),
            offshore_cost=_cost(row[2], role, 'offshore cost'),
            nearshore_cost=_cost(row[3], role, 'nearshore cost'),
            client_rate=_client_rate(row[4], role),
        ))

    if not records:
        raise DataAcquisitionError(f"No data found in {source}")
    return RateTable(tuple(records))


def parse_frame(df: pd.DataFrame, source: str = 'sheet') -> RateTable:
    """Columns A-D (and optional E) in sheet order; the header row is already consumed."""
    if df is None or df.empty:
        raise DataAcquisitionError(f"{source} has no data rows")
    if df.shape[1] < 4:
        raise DataAcquisitionError(f"{source} needs at least 4 columns, found {df.shape[1]}")
    width = min(df.shape[1], 5)
    rows = (tuple(r) for r in df.iloc[:, :width].itertuples(index=False, name=None))
    return build_rate_table(rows, source)


def parse_csv_text(text: str) -> RateTable:
    """Header row, then role, onshore, offshore, nearshore[, client rate]."""
    if not text or not text.strip():
        raise DataAcquisitionError("CSV is empty")
    try:
        df = pd.read_csv(io.StringIO(text.strip()), dtype=str, skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataAcquisitionError(f"CSV parsing error: {e}") from e
    return parse_frame(df, 'CSV')


def _lookup(item: dict, location: str):
    nested = item.get(location)
    if isinstance(nested, dict) and nested.get('cost') not in (None, ''):
        return nested.get('cost')
    for key in (f'{location}Cost', f'{location}_cost', f'{location.capitalize()} Cost/hr'):
        if item.get(key) not in (None, ''):
            return item[key]
    return 0


def parse_json_records(data: Any) -> RateTable:
    """
    Accepts the app's own shape ({"role", "onshore": {"cost"}, ..., "clientRate"})
    or rows keyed by the sheet headers ("Role", "Onshore Cost/hr", ...).
    """
    if not isinstance(data, list):
        raise DataAcquisitionError(f"JSON rate card must be a list, got {type(data).__name__}")

    rows = []
    for item in data:
        if not isinstance(item, dict):
            continue
        rate = item.get('clientRate', item.get('client_rate', item.get('Client Rate/hr')))
        rows.append((
            item.get('role') or item.get('Role') or '',
            _lookup(item, 'onshore'),
            _lookup(item, 'offshore'),
            _lookup(item, 'nearshore'),
            rate,
        ))
    return build_rate_table(rows, 'JSON')


def parse_workbook(content: bytes, worksheet: str = None) -> RateTable:
    """Read the rate card worksheet from an .xlsx payload (first sheet if it is missing)."""
    worksheet = worksheet or config.WORKSHEET_NAME
    try:
        book = pd.ExcelFile(io.BytesIO(content), engine='openpyxl')
        sheet = worksheet
        if worksheet not in book.sheet_names:
            logger.warning("Worksheet '%s' not found, reading '%s'", worksheet, book.sheet_names[0])
            sheet = book.sheet_names[0]
        df = book.parse(sheet, dtype=object)
    except Exception as e:
        raise DataAcquisitionError(f"Workbook parsing error: {e}") from e
    return parse_frame(df, f"worksheet '{sheet}'")


def parse_payload(content: bytes, content_type: str = '', name: str = '',
                  worksheet: str = None) -> RateTable:
    """Dispatch on content type (or file extension) to the matching parser."""
    content_type = (content_type or '').lower()
    suffix = Path(name).suffix.lower() if name else ''

    if 'json' in content_type or suffix == '.json':
        try:
            data = json.loads(content.decode('utf-8-sig'))
        except (UnicodeDecodeError, ValueError) as e:
            raise DataAcquisitionError(f"JSON parsing error: {e}") from e
        return parse_json_records(data)

    if ('spreadsheetml' in content_type or 'excel' in content_type
            or suffix in ('.xlsx', '.xlsm') or content[:2] == b'PK'):
        return parse_workbook(content, worksheet)

    if 'text' in content_type or 'csv' in content_type or suffix in ('.csv', '.txt'):
        try:
            text = content.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise DataAcquisitionError(f"CSV is not UTF-8 text: {e}") from e
        return parse_csv_text(text)

    raise DataAcquisitionError(f"Cannot parse content type '{content_type or 'unknown'}'")


def load_rate_card_file(file, name: str = None, worksheet: str = None) -> RateTable:
    """Load from a path or an uploaded file object (anything with .read())."""
    if hasattr(file, 'read'):
        content = file.read()
        name = name or getattr(file, 'name', '')
    else:
        path = Path(file)
        if not path.exists():
            raise DataAcquisitionError(f"Rate card file not found: {path}")
        content = path.read_bytes()
        name = name or path.name
    if isinstance(content, str):
        content = content.encode('utf-8')
    return parse_payload(content, name=name, worksheet=worksheet)


# =============================================================================
# ACQUISITION STRATEGIES
# =============================================================================

class AcquisitionStrategy:
    """One way of getting the rate card. load() returns a table or raises DataAcquisitionError."""
    name = 'source'

    def load(self) -> RateTable:
        raise NotImplementedError


class _HttpStrategy(AcquisitionStrategy):
    accept = '*/*'

    def __init__(self, url: str, session: requests.Session = None, timeout: float = None):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = config.REQUEST_TIMEOUT if timeout is None else timeout

    def _get(self):
        try:
            response = self.session.get(self.url, timeout=self.timeout,
                                        headers={'Accept': self.accept})
            response.raise_for_status()
        except requests.RequestException as e:
            raise DataAcquisitionError(f"{self.name} request failed: {e}") from e
        return response


class RemoteWorkbookStrategy(_HttpStrategy):
    """Direct download; JSON, CSV text or an .xlsx workbook depending on the response."""
    name = 'remote spreadsheet'
    accept = 'application/json, text/plain, */*'

    def __init__(self, url, session=None, timeout=None, worksheet: str = None):
        super().__init__(url, session, timeout)
        self.worksheet = worksheet or config.WORKSHEET_NAME

    def load(self) -> RateTable:
        response = self._get()
        content_type = response.headers.get('content-type', '')
        return parse_payload(response.content, content_type=content_type, worksheet=self.worksheet)


class CsvExportStrategy(_HttpStrategy):
    """Spreadsheet exported as CSV text."""
    name = 'CSV export'
    accept = 'text/csv, text/plain, */*'

    def load(self) -> RateTable:
        return parse_csv_text(self._get().text)


class LocalFileStrategy(AcquisitionStrategy):
    name = 'local file'

    def __init__(self, path, worksheet: str = None):
        self.path = Path(path)
        self.worksheet = worksheet or config.WORKSHEET_NAME

    def load(self) -> RateTable:
        return load_rate_card_file(self.path, worksheet=self.worksheet)


class StaticBackupStrategy(AcquisitionStrategy):
    """Built-in table; always succeeds."""
    name = 'backup data'

    def __init__(self, factory: Callable[[], RateTable] = backup_rate_table):
        self.factory = factory

    def load(self) -> RateTable:
        return self.factory()


def build_default_strategies(file_id: str = None, worksheet: str = None,
                             local_file: str = None, session: requests.Session = None,
                             timeout: float = None,
                             include_backup: bool = True) -> List[AcquisitionStrategy]:
    """Strategy chain from configuration."""
    strategies: List[AcquisitionStrategy] = []
    worksheet = worksheet or config.WORKSHEET_NAME

    url = config.source_url(file_id)
    if url:
        session = session or requests.Session()
        strategies.append(RemoteWorkbookStrategy(url, session, timeout, worksheet))
        strategies.append(CsvExportStrategy(url, session, timeout))

    local_file = config.LOCAL_RATE_CARD if local_file is None else local_file
    if local_file:
        path = config.get_data_path(local_file, required=False)
        if path is not None:
            strategies.append(LocalFileStrategy(path, worksheet))
        else:
            logger.warning("Local rate card '%s' not found, skipping", local_file)

    if include_backup:
        strategies.append(StaticBackupStrategy())
    return strategies


# =============================================================================
# CHAIN
# =============================================================================

@dataclass(frozen=True)
class AcquisitionResult:
    table: RateTable
    source: str
    loaded_at: datetime


def acquire_rate_table(strategies: Iterable[AcquisitionStrategy]) -> AcquisitionResult:
    """Try each strategy in order; the first non-empty table wins."""
    failures = []
    for strategy in strategies:
        try:
            table = strategy.load()
        except DataAcquisitionError as e:
            logger.warning("%s failed: %s", strategy.name, e)
            failures.append(f"{strategy.name}: {e}")
            continue
        if not len(table):
            logger.warning("%s returned no roles", strategy.name)
            failures.append(f"{strategy.name}: no roles")
            continue
        logger.info("Data loaded from %s! %d roles found.", strategy.name, len(table))
        return AcquisitionResult(table=table, source=strategy.name, loaded_at=datetime.now())

    raise DataAcquisitionError(
        "Could not load the rate card from any source"
        + (f" ({'; '.join(failures)})" if failures else "")
    )
