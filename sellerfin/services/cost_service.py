"""
Unit cost editing and propagation.

A unit cost belongs to a product: every order line sharing the SKU (or the
product name when there is no SKU) carries the same cost.

The editing helpers (apply_cost_to_orders, EditableCost,
CostSaveDebouncer) are not used by the HTTP routes. They are the contract for
interactive clients that patch costs locally and persist them in the
background through PUT /api/costs.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sellerfin.core.config import settings
from sellerfin.models import RawOrder, TikTokOrder
from .calculations import OrderLine, is_empty_sku, product_key, read_field, to_number, to_order_line
from .numeric_validation import CURRENCY_MAX, format_decimal_br, parse_numeric_input_safe

logger = logging.getLogger(__name__)

MARKETPLACE_MODELS = {
    "shopee": RawOrder,
    "tiktok": TikTokOrder,
}

BATCH_SUCCESS = "success"
BATCH_PARTIAL = "partial"
BATCH_FAILED = "failed"


def order_model(marketplace: str):
    try:
        return MARKETPLACE_MODELS[marketplace]
    except KeyError:
        raise ValueError(f"Unknown marketplace: {marketplace}")


class CostSyncTracker:
    """Per-user monotonically increasing version, bumped on every applied batch edit"""

    def __init__(self):
        self._versions: Dict[UUID, int] = {}
        self._lock = threading.Lock()

    def current(self, user_id: UUID) -> int:
        return self._versions.get(user_id, 0)

    def bump(self, user_id: UUID) -> int:
        with self._lock:
            version = self._versions.get(user_id, 0) + 1
            self._versions[user_id] = version
            return version


sync_tracker = CostSyncTracker()


@dataclass
class BatchCostResult:
    updated_groups: int = 0
    failed_groups: int = 0
    sync_version: int = 0
    status: str = BATCH_SUCCESS
    rows_updated: int = 0
    updated_skus: List[str] = field(default_factory=list)
    updated_names: List[str] = field(default_factory=list)


@dataclass
class MissingCost:
    key: str
    sku: Optional[str]
    nome_produto: Optional[str]
    quantidade: float = 0


def _name_filter(model, nome_produto: str):
    """Rows of a product without SKU"""
    return (
        model.nome_produto == nome_produto,
        or_(model.sku.is_(None), func.trim(model.sku).in_(["", "-"])),
    )


class CostService:
    """Writes unit costs to every matching order line"""

    @staticmethod
    def update_unit_cost(
        db: Session,
        user_id: UUID,
        sku: Optional[str],
        nome_produto: Optional[str],
        cost: float,
        marketplace: str = "shopee",
    ) -> int:
        """Set the unit cost of one product. Returns the number of order lines touched."""
        if cost < 0:
            raise ValueError("Custo não pode ser negativo.")
        model = order_model(marketplace)

        query = db.query(model).filter(model.user_id == user_id)
        if not is_empty_sku(sku):
            query = query.filter(model.sku == sku.strip())
        elif nome_produto:
            query = query.filter(*_name_filter(model, nome_produto))
        else:
            raise ValueError("Informe o SKU ou o nome do produto.")

        try:
            count = query.update({model.custo_unitario: cost}, synchronize_session=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save unit cost for {sku or nome_produto}: {e}")
            raise

        logger.info(f"Unit cost {cost} applied to {count} {marketplace} rows ({sku or nome_produto})")
        return count

    @staticmethod
    def batch_update_costs(
        db: Session,
        user_id: UUID,
        groups: Iterable[Any],
        cost: float,
        marketplace: str = "shopee",
    ) -> BatchCostResult:
        """
        Apply one cost to many product groups.

        SKU groups go out in a single statement, name-only groups one by one.
        Each write commits on its own, so a failure leaves earlier writes in
        place and is reported through the result status.
        """
        if cost <= 0:
            raise ValueError("Valor deve ser maior que zero.")
        model = order_model(marketplace)

        skus: List[str] = []
        names: List[str] = []
        for group in groups:
            sku = read_field(group, "sku")
            if not is_empty_sku(sku):
                if sku.strip() not in skus:
                    skus.append(sku.strip())
            else:
                name = read_field(group, "nome_produto")
                if name and name not in names:
                    names.append(name)

        result = BatchCostResult()

        if skus:
            try:
                result.rows_updated += db.query(model).filter(
                    model.user_id == user_id,
                    model.sku.in_(skus),
                ).update({model.custo_unitario: cost}, synchronize_session=False)
                db.commit()
                result.updated_groups += len(skus)
                result.updated_skus.extend(skus)
            except SQLAlchemyError as e:
                db.rollback()
                result.failed_groups += len(skus)
                logger.warning(f"Batch cost update failed for {len(skus)} SKUs: {e}")

        for name in names:
            try:
                result.rows_updated += db.query(model).filter(
                    model.user_id == user_id,
                    *_name_filter(model, name),
                ).update({model.custo_unitario: cost}, synchronize_session=False)
                db.commit()
                result.updated_groups += 1
                result.updated_names.append(name)
            except SQLAlchemyError as e:
                db.rollback()
                result.failed_groups += 1
                logger.warning(f"Batch cost update failed for product '{name}': {e}")

        if result.updated_groups:
            result.sync_version = sync_tracker.bump(user_id)
        else:
            result.sync_version = sync_tracker.current(user_id)

        if result.failed_groups == 0:
            result.status = BATCH_SUCCESS
        elif result.updated_groups:
            result.status = BATCH_PARTIAL
        else:
            result.status = BATCH_FAILED

        logger.info(
            f"Batch cost {cost}: {result.updated_groups} groups updated, "
            f"{result.failed_groups} failed, {result.rows_updated} rows"
        )
        return result

    @staticmethod
    def known_costs(db: Session, user_id: UUID, marketplace: str = "shopee") -> Dict[str, float]:
        """Registered unit cost per product key (latest non-zero wins)"""
        model = order_model(marketplace)
        rows = db.query(model.sku, model.nome_produto, model.custo_unitario).filter(
            model.user_id == user_id,
            model.custo_unitario > 0,
        ).order_by(model.updated_at.asc(), model.created_at.asc(), model.id.asc()).all()

        costs: Dict[str, float] = {}
        for sku, nome_produto, custo in rows:
            costs[product_key(OrderLine(sku=sku, nome_produto=nome_produto))] = float(custo)
        return costs


def apply_cost_to_orders(
    orders: Iterable[Any],
    cost: float,
    skus: Iterable[str] = (),
    names: Iterable[str] = (),
) -> List[OrderLine]:
    """Local copy of the orders with the cost patched on matching lines"""
    sku_set = {s.strip() for s in skus}
    name_set = set(names)
    patched: List[OrderLine] = []
    for row in orders:
        line = to_order_line(row)
        if is_empty_sku(line.sku):
            matches = line.nome_produto in name_set
        else:
            matches = line.sku.strip() in sku_set
        patched.append(replace(line, custo_unitario=cost) if matches else line)
    return patched


def find_missing_costs(rows: Iterable[Any], known_costs: Dict[str, float]) -> List[MissingCost]:
    """Products in an import without a registered or provided cost"""
    missing: Dict[str, MissingCost] = {}
    for row in rows:
        line = to_order_line(row)
        key = product_key(line)
        if line.custo_unitario > 0 or known_costs.get(key, 0) > 0:
            continue
        entry = missing.get(key)
        if entry is None:
            entry = missing[key] = MissingCost(
                key=key,
                sku=None if is_empty_sku(line.sku) else line.sku.strip(),
                nome_produto=line.nome_produto,
            )
        entry.quantidade += line.quantidade
    return list(missing.values())


# ===================== EDITING STATE =====================

def format_cost_text(cost: float) -> str:
    return format_decimal_br(cost) if cost > 0 else ""


class EditableCost:
    """
    State of one editable cost field.

    Local typing wins over values coming from the server, except when the
    server announces a newer sync version or the field is bound to another
    product.
    """

    def __init__(self, cost: Any = 0, sync_version: int = 0, sku: Optional[str] = None, nome_produto: Optional[str] = None):
        self.text = format_cost_text(to_number(cost))
        self.sync_version = sync_version
        self.sku = sku
        self.nome_produto = nome_produto
        self.has_ever_edited = False

    @property
    def value(self) -> float:
        return parse_numeric_input_safe(self.text, max_value=CURRENCY_MAX, max_decimal_places=4)

    def type(self, text: str) -> float:
        """User typed; returns the cost to save (0 when invalid)"""
        self.text = text
        self.has_ever_edited = True
        return self.value

    def refresh(self, cost: Any, sync_version: int, sku: Optional[str] = None, nome_produto: Optional[str] = None) -> bool:
        """Offer a server value. Returns True when the local text was replaced."""
        newer = sync_version > self.sync_version
        rebound = (sku, nome_produto) != (self.sku, self.nome_produto)
        if not (newer or rebound or not self.has_ever_edited):
            return False

        self.text = format_cost_text(to_number(cost))
        self.sync_version = max(self.sync_version, sync_version)
        self.sku = sku
        self.nome_produto = nome_produto
        if newer or rebound:
            self.has_ever_edited = False
        return True


SaveCallback = Callable[[Optional[str], Optional[str], float], Awaitable[Any]]


class CostSaveDebouncer:
    """At most one write per field per debounce window; newer values replace pending ones"""

    def __init__(self, save: SaveCallback, delay: Optional[float] = None):
        self._save = save
        self.delay = settings.COST_SAVE_DEBOUNCE_SECONDS if delay is None else delay
        self._pending: Dict[Tuple[Optional[str], Optional[str]], asyncio.Task] = {}

    @property
    def pending_count(self) -> int:
        return sum(1 for task in self._pending.values() if not task.done())

    def submit(self, sku: Optional[str], nome_produto: Optional[str], cost: float) -> asyncio.Task:
        key = (sku, nome_produto)
        previous = self._pending.get(key)
        if previous is not None and not previous.done():
            previous.cancel()
        task = asyncio.ensure_future(self._run(key, cost))
        self._pending[key] = task
        return task

    async def _run(self, key: Tuple[Optional[str], Optional[str]], cost: float):
        await asyncio.sleep(self.delay)
        # Past the window the write can no longer be replaced
        if self._pending.get(key) is asyncio.current_task():
            del self._pending[key]
        return await self._save(key[0], key[1], cost)

    async def flush(self):
        """Wait for every pending write"""
        tasks = list(self._pending.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def cancel_all(self):
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()
