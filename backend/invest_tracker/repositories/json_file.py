"""
Flat JSON file backend.

Layout (one directory per owner, files in the original flat formats):

    <data_dir>/<owner_id>/investments.json                list of records
    <data_dir>/<owner_id>/manual_asset_prices.json        {name: price}
    <data_dir>/<owner_id>/historical_portfolio_value.json [{date, value}]

Files are read fully, mutated in memory and written back, so every write
holds the store's WriteQueue and a lock file next to the data file
(`<file>.lock`) for the whole cycle. The lock file serializes writers in
other processes too (Celery worker, maintenance scripts). Writes go to a
temp file that replaces the target atomically; readers never see a partial
file.
"""
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional
import asyncio
import json
import logging
import os
import tempfile

from filelock import FileLock, Timeout
from pydantic import ValidationError

from invest_tracker.config import settings
from invest_tracker.exceptions import ConflictError, NotFoundError, StorageError
from invest_tracker.models.investment import InvestmentCategory
from invest_tracker.repositories.base import (
    InvestmentRepository,
    ManualPriceStore,
    SnapshotStore,
    is_money_named,
    validate_owner_id,
)
from invest_tracker.schemas.investment import InvestmentCreate, InvestmentRecord
from invest_tracker.schemas.portfolio import HistoricalValuePoint
from invest_tracker.services.snapshot_aggregator import sort_series, upsert_series_entry

logger = logging.getLogger(__name__)

INVESTMENTS_FILE = "investments.json"
MANUAL_PRICES_FILE = "manual_asset_prices.json"
HISTORY_FILE = "historical_portfolio_value.json"


def _json_default(value: Any) -> Any:
    """Write Decimals as plain JSON numbers and dates as ISO strings."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonFileStore:
    """Reads and atomically writes one JSON document per owner."""

    def __init__(self, root: Path, filename: str, default_factory: Callable[[], Any]):
        self.root = Path(root)
        self.filename = filename
        self.default_factory = default_factory

    def path_for(self, owner_id: str) -> Path:
        return self.root / validate_owner_id(owner_id) / self.filename

    def _read_sync(self, path: Path) -> Any:
        if not path.exists():
            return self.default_factory()
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {path.name}: {e}") from e

    def _write_sync(self, path: Path, data: Any) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2, default=_json_default)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError) as e:
            raise StorageError(f"Cannot write {path.name}: {e}") from e

    def lock_for(self, owner_id: str) -> FileLock:
        path = self.path_for(owner_id)
        # Acquired and released from different threads
        return FileLock(f"{path}.lock", thread_local=False)

    def _acquire_sync(self, lock: FileLock) -> None:
        try:
            Path(lock.lock_file).parent.mkdir(parents=True, exist_ok=True)
            lock.acquire(timeout=settings.storage_lock_timeout)
        except Timeout as e:
            raise StorageError(f"Timed out waiting for {Path(lock.lock_file).name}") from e
        except OSError as e:
            raise StorageError(f"Cannot lock {Path(lock.lock_file).name}: {e}") from e

    @asynccontextmanager
    async def exclusive(self, owner_id: str):
        """Hold the owner's lock file for one read-modify-write cycle."""
        lock = self.lock_for(owner_id)
        await asyncio.to_thread(self._acquire_sync, lock)
        try:
            yield
        finally:
            lock.release()

    async def read(self, owner_id: str) -> Any:
        return await asyncio.to_thread(self._read_sync, self.path_for(owner_id))

    async def write(self, owner_id: str, data: Any) -> None:
        await asyncio.to_thread(self._write_sync, self.path_for(owner_id), data)

    def owners(self) -> List[str]:
        """Owner directories that contain this store's file."""
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name for entry in self.root.iterdir()
            if entry.is_dir() and (entry / self.filename).is_file()
        )


def _to_record(owner_id: str, raw: Any) -> Optional[InvestmentRecord]:
    if not isinstance(raw, dict):
        return None
    try:
        return InvestmentRecord.model_validate({**raw, "ownerId": owner_id})
    except ValidationError as e:
        logger.warning(f"Skipping malformed investment record for {owner_id}: {e.error_count()} errors")
        return None


def _next_id(raw_records: List[Any]) -> int:
    ids = []
    for raw in raw_records:
        if isinstance(raw, dict):
            try:
                ids.append(int(raw.get("id")))
            except (TypeError, ValueError):
                continue
    return max(ids) + 1 if ids else 1


class JsonInvestmentRepository(InvestmentRepository):
    """Investments stored in `<owner>/investments.json`."""

    def __init__(self, root: Path):
        super().__init__()
        self._files = JsonFileStore(root, INVESTMENTS_FILE, list)

    async def _read_list(self, owner_id: str) -> List[Any]:
        data = await self._files.read(owner_id)
        if not isinstance(data, list):
            raise StorageError(f"{INVESTMENTS_FILE} for {owner_id} is not a list")
        return data

    async def list_by_owner(self, owner_id: str) -> List[InvestmentRecord]:
        records = []
        for raw in await self._read_list(owner_id):
            record = _to_record(owner_id, raw)
            if record is not None:
                records.append(record)
        return records

    async def list_owners(self) -> List[str]:
        return await asyncio.to_thread(self._files.owners)

    async def create(self, owner_id: str, data: InvestmentCreate) -> InvestmentRecord:
        async with self.write_queue, self._files.exclusive(owner_id):
            raw_records = await self._read_list(owner_id)

            if data.category == InvestmentCategory.MONEY:
                for raw in raw_records:
                    if isinstance(raw, dict) and is_money_named(raw.get("category"), raw.get("name"), data.name):
                        raise ConflictError(f"A Money holding named '{data.name}' already exists")

            raw = {
                "id": _next_id(raw_records),
                "category": data.category.value,
                "name": data.name,
                "quantity": data.quantity,
                "date": data.date,
                "totalPurchasePrice": data.total_purchase_price,
            }
            raw_records.append(raw)
            await self._files.write(owner_id, raw_records)

        logger.info(f"Created investment {raw['id']} ({data.category.value}: {data.name}) for {owner_id}")
        return _to_record(owner_id, raw)

    async def update_value_by_name(self, owner_id: str, name: str, value: Decimal) -> InvestmentRecord:
        async with self.write_queue, self._files.exclusive(owner_id):
            raw_records = await self._read_list(owner_id)
            for raw in raw_records:
                if isinstance(raw, dict) and is_money_named(raw.get("category"), raw.get("name"), name):
                    raw["totalPurchasePrice"] = value
                    # Legacy files carried a stored currentValue; it is derived now
                    raw.pop("currentValue", None)
                    raw.pop("purchasePricePerUnit", None)
                    await self._files.write(owner_id, raw_records)
                    return _to_record(owner_id, raw)

        raise NotFoundError(f"No Money holding named '{name}'")

    async def delete_by_id(self, owner_id: str, investment_id: int) -> None:
        async with self.write_queue, self._files.exclusive(owner_id):
            raw_records = await self._read_list(owner_id)
            kept = [
                raw for raw in raw_records
                if not (isinstance(raw, dict) and str(raw.get("id")) == str(investment_id))
            ]
            if len(kept) == len(raw_records):
                raise NotFoundError(f"Investment {investment_id} not found")
            await self._files.write(owner_id, kept)

        logger.info(f"Deleted investment {investment_id} for {owner_id}")

    async def delete_by_category(self, owner_id: str, category: str) -> int:
        async with self.write_queue, self._files.exclusive(owner_id):
            raw_records = await self._read_list(owner_id)
            kept = [
                raw for raw in raw_records
                if not (isinstance(raw, dict) and raw.get("category") == category)
            ]
            removed = len(raw_records) - len(kept)
            if removed:
                await self._files.write(owner_id, kept)
        return removed


class JsonManualPriceStore(ManualPriceStore):
    """Overrides stored in `<owner>/manual_asset_prices.json`."""

    def __init__(self, root: Path):
        super().__init__()
        self._files = JsonFileStore(root, MANUAL_PRICES_FILE, dict)

    async def get(self, owner_id: str) -> Dict[str, Any]:
        data = await self._files.read(owner_id)
        if not isinstance(data, dict):
            raise StorageError(f"{MANUAL_PRICES_FILE} for {owner_id} is not an object")
        return data

    async def upsert(self, owner_id: str, name: str, price: Decimal) -> Dict[str, Any]:
        async with self.write_queue, self._files.exclusive(owner_id):
            data = await self.get(owner_id)
            data[name.lower()] = price
            await self._files.write(owner_id, data)
        logger.info(f"Manual price for '{name.lower()}' set to {price} ({owner_id})")
        return data

    async def remove(self, owner_id: str, names: Iterable[str]) -> int:
        wanted = {name.lower() for name in names}
        async with self.write_queue, self._files.exclusive(owner_id):
            data = await self.get(owner_id)
            kept = {key: value for key, value in data.items() if key.lower() not in wanted}
            removed = len(data) - len(kept)
            if removed:
                await self._files.write(owner_id, kept)
        return removed


class JsonSnapshotStore(SnapshotStore):
    """Series stored in `<owner>/historical_portfolio_value.json`, in append order."""

    def __init__(self, root: Path):
        super().__init__()
        self._files = JsonFileStore(root, HISTORY_FILE, list)

    async def _read_points(self, owner_id: str) -> List[HistoricalValuePoint]:
        data = await self._files.read(owner_id)
        if not isinstance(data, list):
            raise StorageError(f"{HISTORY_FILE} for {owner_id} is not a list")
        points = []
        for raw in data:
            try:
                points.append(HistoricalValuePoint.model_validate(raw))
            except ValidationError:
                logger.warning(f"Skipping malformed history entry for {owner_id}: {raw!r}")
        return points

    async def list(self, owner_id: str) -> List[HistoricalValuePoint]:
        return sort_series(await self._read_points(owner_id))

    async def upsert_for_date(self, owner_id: str, day: date, value: Decimal) -> HistoricalValuePoint:
        async with self.write_queue, self._files.exclusive(owner_id):
            series = upsert_series_entry(await self._read_points(owner_id), day, value)
            await self._files.write(owner_id, [point.model_dump() for point in series])
        return HistoricalValuePoint(date=day, value=value)
