"""
Order import flow: column mapping, row building, the upload state machine
and persistence of Shopee and TikTok files.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sellerfin.models import RawOrder, TikTokOrder, TikTokSettlement, TikTokStatement
from .calculations import product_key, to_number, to_order_line
from .cost_service import CostService, MissingCost, find_missing_costs
from .tabular import parse_date_value

logger = logging.getLogger(__name__)

IMPORT_BATCH_SIZE = 100

DEFAULT_MAPPING = {
    "order_id": "ID do pedido",
    "sku": "SKU do produto",
    "nome_produto": "Nome do produto",
    "variacao": "Nome da variação",
    "quantidade": "Quantidade",
    "total_faturado": "Preço acordado",
    "rebate_shopee": "Rebate da Shopee",
    "data_pedido": "Data de criação do pedido",
}

REQUIRED_FIELDS = ("order_id", "nome_produto", "quantidade", "total_faturado")

FIELD_LABELS = {
    "order_id": "ID do Pedido",
    "sku": "SKU",
    "nome_produto": "Nome do Produto",
    "variacao": "Variação",
    "quantidade": "Quantidade",
    "total_faturado": "Total Faturado",
    "rebate_shopee": "Rebate Shopee",
    "data_pedido": "Data do Pedido",
}


class MappingError(ValueError):
    """A required field is not mapped to a column of the file"""

    def __init__(self, field_name: str):
        self.field = field_name
        super().__init__(f'O campo "{FIELD_LABELS.get(field_name, field_name)}" é obrigatório e precisa ser mapeado')


class ImportStateError(ValueError):
    """Action not allowed in the current import step"""


# ===================== MAPPING =====================

def suggest_mapping(headers: Iterable[str]) -> Dict[str, Optional[str]]:
    """Default column names matched against headers by case-insensitive containment"""
    headers = [h for h in headers if h and h.strip()]
    mapping: Dict[str, Optional[str]] = {}
    for field_name, default in DEFAULT_MAPPING.items():
        wanted = default.lower()
        mapping[field_name] = next(
            (h for h in headers if wanted in h.lower() or h.lower() in wanted),
            None,
        )
    return mapping


def validate_mapping(mapping: Dict[str, Optional[str]], headers: Iterable[str]) -> None:
    headers = set(headers)
    for field_name in REQUIRED_FIELDS:
        column = mapping.get(field_name)
        if not column or column not in headers:
            raise MappingError(field_name)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def build_order_rows(rows: Iterable[Dict[str, Any]], mapping: Dict[str, Optional[str]]) -> List[Dict[str, Any]]:
    """Mapped file rows as order dicts; rows without order id or product name are dropped"""
    def get(row, field_name):
        column = mapping.get(field_name)
        return row.get(column) if column else None

    built = []
    for row in rows:
        order_id = _text(get(row, "order_id"))
        nome_produto = _text(get(row, "nome_produto"))
        if not order_id or not nome_produto:
            continue
        quantity = to_number(get(row, "quantidade"))
        built.append({
            "order_id": order_id,
            "sku": _text(get(row, "sku")) or None,
            "nome_produto": nome_produto,
            "variacao": _text(get(row, "variacao")) or None,
            "quantidade": max(1, int(math.floor(quantity + 0.5))),
            "total_faturado": to_number(get(row, "total_faturado")),
            "rebate_shopee": to_number(get(row, "rebate_shopee")),
            "custo_unitario": 0.0,
            "data_pedido": parse_date_value(get(row, "data_pedido")),
        })
    return built


def apply_known_costs(rows: List[Dict[str, Any]], costs: Dict[str, float]) -> List[Dict[str, Any]]:
    """Fill custo_unitario from registered/provided costs keyed by SKU or name"""
    for row in rows:
        cost = costs.get(product_key(to_order_line(row)), 0)
        if cost > 0 and not row.get("custo_unitario"):
            row["custo_unitario"] = cost
    return rows


# ===================== STATE MACHINE =====================

STEP_UPLOAD = "upload"
STEP_MAPPING = "mapping"
STEP_PREVIEW = "preview"
STEP_SUCCESS = "success"


class ImportSession:
    """
    Upload wizard: upload -> mapping -> preview -> success.

    Preview is blocked while products without cost remain; reset goes back
    to upload from any step.
    """

    TRANSITIONS = {
        STEP_UPLOAD: [STEP_MAPPING],
        STEP_MAPPING: [STEP_PREVIEW, STEP_UPLOAD],
        STEP_PREVIEW: [STEP_SUCCESS, STEP_MAPPING, STEP_UPLOAD],
        STEP_SUCCESS: [STEP_UPLOAD],
    }

    def __init__(self, known_costs: Optional[Dict[str, float]] = None):
        self.step = STEP_UPLOAD
        self.known_costs: Dict[str, float] = dict(known_costs or {})
        self.provided_costs: Dict[str, float] = {}
        self.headers: List[str] = []
        self.file_rows: List[Dict[str, Any]] = []
        self.mapping: Dict[str, Optional[str]] = {}
        self.rows: List[Dict[str, Any]] = []
        self.imported_count = 0

    def _move(self, target: str):
        if target not in self.TRANSITIONS[self.step]:
            raise ImportStateError(f"Transição inválida: {self.step} -> {target}")
        self.step = target

    @property
    def costs(self) -> Dict[str, float]:
        return {**self.known_costs, **self.provided_costs}

    @property
    def missing_costs(self) -> List[MissingCost]:
        if not self.rows:
            return []
        return find_missing_costs(self.rows, self.costs)

    def load(self, headers: List[str], rows: List[Dict[str, Any]]) -> Dict[str, Optional[str]]:
        """File read: suggest a mapping and go to the mapping step"""
        if not rows:
            raise ImportStateError("O arquivo não contém dados suficientes")
        self._move(STEP_MAPPING)
        self.headers = headers
        self.file_rows = rows
        self.mapping = suggest_mapping(headers)
        return self.mapping

    def set_mapping(self, mapping: Dict[str, Optional[str]]) -> List[MissingCost]:
        """Adopt a mapping, rebuild the rows and report products without cost"""
        if self.step != STEP_MAPPING:
            raise ImportStateError(f"Mapeamento não permitido na etapa {self.step}")
        validate_mapping(mapping, self.headers)
        self.mapping = dict(mapping)
        self.rows = build_order_rows(self.file_rows, self.mapping)
        return self.missing_costs

    def provide_costs(self, costs: Dict[str, float]) -> List[MissingCost]:
        for key, cost in costs.items():
            if cost > 0:
                self.provided_costs[key] = cost
        return self.missing_costs

    def preview(self) -> List[Dict[str, Any]]:
        if self.step == STEP_MAPPING:
            validate_mapping(self.mapping, self.headers)
            if not self.rows:
                self.rows = build_order_rows(self.file_rows, self.mapping)
            missing = self.missing_costs
            if missing:
                raise ImportStateError(f"{len(missing)} produtos sem custo cadastrado")
        self._move(STEP_PREVIEW)
        return apply_known_costs(self.rows, self.costs)

    def back_to_mapping(self):
        self._move(STEP_MAPPING)

    def complete(self, imported_count: int):
        self._move(STEP_SUCCESS)
        self.imported_count = imported_count

    def reset(self):
        if self.step != STEP_UPLOAD:
            self._move(STEP_UPLOAD)
        self.__init__(self.known_costs)


# ===================== PERSISTENCE =====================

@dataclass
class ImportStats:
    total: int = 0
    imported: int = 0
    errors: int = 0


@dataclass
class SettlementImportResult:
    settlements: ImportStats = field(default_factory=ImportStats)
    statements: ImportStats = field(default_factory=ImportStats)


class ImportService:
    """Writes parsed import rows for one user"""

    @staticmethod
    def _replace(db: Session, user_id: UUID, *models):
        try:
            for model in models:
                db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to clear previous import for user {user_id}: {e}")
            raise

    @staticmethod
    def _insert_batches(db: Session, user_id: UUID, model, rows: List[Dict[str, Any]]) -> ImportStats:
        stats = ImportStats(total=len(rows))
        columns = set(model.__table__.columns.keys())
        for start in range(0, len(rows), IMPORT_BATCH_SIZE):
            batch = rows[start:start + IMPORT_BATCH_SIZE]
            try:
                db.add_all([
                    model(user_id=user_id, **{k: v for k, v in row.items() if k in columns})
                    for row in batch
                ])
                db.commit()
                stats.imported += len(batch)
            except SQLAlchemyError as e:
                db.rollback()
                stats.errors += len(batch)
                logger.warning(f"{model.__tablename__}: batch at row {start} failed: {e}")
        return stats

    @staticmethod
    def import_shopee_orders(
        db: Session,
        user_id: UUID,
        rows: List[Dict[str, Any]],
        replace_existing: bool = True,
        costs: Optional[Dict[str, float]] = None,
    ) -> ImportStats:
        """Store mapped Shopee rows, carrying registered and newly provided unit costs"""
        known = CostService.known_costs(db, user_id, "shopee")
        known.update({k: v for k, v in (costs or {}).items() if v > 0})
        if replace_existing:
            ImportService._replace(db, user_id, RawOrder)

        rows = apply_known_costs([dict(r) for r in rows], known)
        stats = ImportService._insert_batches(db, user_id, RawOrder, rows)
        logger.info(f"Shopee import for {user_id}: {stats.imported}/{stats.total} rows, {stats.errors} errors")
        return stats

    @staticmethod
    def import_tiktok_orders(
        db: Session,
        user_id: UUID,
        rows: List[Dict[str, Any]],
        replace_existing: bool = True,
        costs: Optional[Dict[str, float]] = None,
    ) -> ImportStats:
        known = CostService.known_costs(db, user_id, "tiktok")
        known.update({k: v for k, v in (costs or {}).items() if v > 0})
        if replace_existing:
            ImportService._replace(db, user_id, TikTokOrder)

        rows = apply_known_costs([dict(r) for r in rows], known)
        stats = ImportService._insert_batches(db, user_id, TikTokOrder, rows)
        logger.info(f"TikTok order import for {user_id}: {stats.imported}/{stats.total} rows, {stats.errors} errors")
        return stats

    @staticmethod
    def import_tiktok_settlements(
        db: Session,
        user_id: UUID,
        settlements: List[Dict[str, Any]],
        statements: Optional[List[Dict[str, Any]]] = None,
        replace_existing: bool = True,
    ) -> SettlementImportResult:
        if replace_existing:
            ImportService._replace(db, user_id, TikTokSettlement, TikTokStatement)

        result = SettlementImportResult()
        if statements:
            if not replace_existing:
                # Statements are unique per id; re-imports update in place
                ids = [s["statement_id"] for s in statements]
                try:
                    db.query(TikTokStatement).filter(
                        TikTokStatement.user_id == user_id,
                        TikTokStatement.statement_id.in_(ids),
                    ).delete(synchronize_session=False)
                    db.commit()
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.error(f"Failed to replace TikTok statements: {e}")
                    raise
            result.statements = ImportService._insert_batches(db, user_id, TikTokStatement, statements)

        result.settlements = ImportService._insert_batches(db, user_id, TikTokSettlement, settlements)
        logger.info(
            f"TikTok settlement import for {user_id}: {result.settlements.imported} settlements, "
            f"{result.statements.imported} statements"
        )
        return result
