"""
Internal costing of invoices.

Costing rows are internal-only cost lines attached to an invoice, optionally
to one of its line items. The CostingWorkspace holds an editable draft of one
invoice's rows next to the last saved baseline and tracks which line items
carry unsaved changes. Every mutating costing endpoint goes through a
workspace, so adding rows, applying templates and importing price
calculations all end in the same save payload.
"""
import copy
import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from invoicedesk.core.errors import CostingError
from invoicedesk.schemas.costing import ItemCostingStatusEnum, TemplateLoadModeEnum

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("item_type", "description", "quantity", "price")


def to_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def field_value(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def line_total(quantity: Any, price: Any) -> float:
    return round(to_number(quantity) * to_number(price), 2)


def normalize_item_key(name: Optional[str]) -> str:
    if not name:
        return ""
    return re.sub(r"\s+", "_", name.strip().lower())


@dataclass
class CostingRowDraft:
    item_type: str = ""
    description: Optional[str] = None
    quantity: float = 1
    price: float = 0
    invoice_item_id: Optional[uuid.UUID] = None
    item_no: Optional[int] = None
    line_total: float = 0
    sort_order: int = 0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        self.item_type = (self.item_type or "").strip()
        self.quantity = to_number(self.quantity)
        self.price = to_number(self.price)
        self.line_total = line_total(self.quantity, self.price)

    @classmethod
    def from_source(cls, source: Any, **overrides) -> "CostingRowDraft":
        """
        Build a draft from an ORM row, a pydantic model or a plain dict.
        """
        values = {
            "item_type": field_value(source, "item_type") or "",
            "description": field_value(source, "description"),
            "quantity": field_value(source, "quantity", 1),
            "price": field_value(source, "price", 0),
            "invoice_item_id": field_value(source, "invoice_item_id"),
            "item_no": field_value(source, "item_no"),
            "sort_order": field_value(source, "sort_order", 0) or 0,
        }
        source_id = field_value(source, "id")
        if source_id is not None:
            values["id"] = source_id
        values.update(overrides)
        return cls(**values)

    @property
    def is_valid(self) -> bool:
        return is_valid_row(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "invoice_item_id": self.invoice_item_id,
            "item_no": self.item_no,
            "item_type": self.item_type,
            "description": self.description,
            "quantity": self.quantity,
            "price": self.price,
            "line_total": self.line_total,
            "sort_order": self.sort_order,
        }

    def to_template_item(self) -> Dict[str, Any]:
        return {
            "item_type": self.item_type,
            "description": self.description,
            "quantity": self.quantity,
            "price": self.price,
            "line_total": self.line_total,
        }


@dataclass(frozen=True)
class ProfitMargin:
    costing_total: float
    profit: float
    margin_percent: float
    is_positive: bool


def costing_total(rows: Iterable[Any]) -> float:
    return round(sum(to_number(field_value(r, "line_total", 0)) for r in rows), 2)


def profit_margin(invoice_total: Any, total_cost: Any) -> Optional[ProfitMargin]:
    """
    Markup over cost: profit relative to the costing total.
    Undefined (None) while nothing has been costed.
    """
    cost = round(to_number(total_cost), 2)
    if cost <= 0:
        return None
    profit = round(to_number(invoice_total) - cost, 2)
    return ProfitMargin(
        costing_total=cost,
        profit=profit,
        margin_percent=round(profit / cost * 100, 2),
        is_positive=profit >= 0,
    )


def is_valid_row(row: Any) -> bool:
    return bool((field_value(row, "item_type") or "").strip())


def _is_placeholder(row: Any) -> bool:
    return not is_valid_row(row) and to_number(field_value(row, "line_total", 0)) == 0


def has_existing_items(rows: Sequence[Any]) -> bool:
    """
    False for an empty list or a single untouched placeholder row.
    """
    if not rows:
        return False
    return not (len(rows) == 1 and _is_placeholder(rows[0]))


def can_save_as_template(rows: Sequence[Any]) -> bool:
    if not rows:
        return False
    return not (len(rows) == 1 and to_number(field_value(rows[0], "line_total", 0)) == 0)


def merge_rows(
    existing: Sequence[CostingRowDraft], incoming: Iterable[Any], mode: TemplateLoadModeEnum
) -> List[CostingRowDraft]:
    """
    Replace or append incoming rows. Incoming rows always get fresh ids.
    """
    fresh = [CostingRowDraft.from_source(r, id=uuid.uuid4()) for r in incoming]
    if TemplateLoadModeEnum(mode) == TemplateLoadModeEnum.REPLACE:
        return fresh
    kept = list(existing) if has_existing_items(existing) else []
    return kept + fresh


def rows_from_item_template(template: Any, invoice_item_id: Optional[uuid.UUID], item_no: Optional[int]) -> List[CostingRowDraft]:
    key = normalize_item_key(field_value(template, "item_name"))
    rows = sorted(field_value(template, "rows") or [], key=lambda r: field_value(r, "sort_order", 0) or 0)
    drafts = []
    for row in rows:
        description = field_value(row, "sub_item_name") or ""
        if field_value(row, "description"):
            description = f"{description} - {field_value(row, 'description')}"
        drafts.append(CostingRowDraft(
            invoice_item_id=invoice_item_id,
            item_no=item_no,
            item_type=key,
            description=description,
            quantity=field_value(row, "default_qty", 0),
            price=field_value(row, "default_price", 0),
        ))
    return drafts


@dataclass(frozen=True)
class LineItemRef:
    id: uuid.UUID
    description: str
    total: float


@dataclass
class ItemGroup:
    item: LineItemRef
    item_no: int
    rows: List[CostingRowDraft]
    subtotal: float
    status: ItemCostingStatusEnum


TemplateLookup = Callable[[str], Any]


class CostingWorkspace:
    """
    Editable costing draft of one invoice.

    `rows` is the draft, `baseline` maps each line item id (None for
    invoice-level rows) to its last saved rows, and `dirty_items` holds the
    keys whose draft differs from the baseline.
    """

    def __init__(
        self,
        line_items: Iterable[Any],
        rows: Iterable[Any] = (),
        invoice_total: Any = 0,
        template_lookup: Optional[TemplateLookup] = None,
    ):
        self.line_items: List[LineItemRef] = [
            LineItemRef(id=field_value(i, "id"), description=field_value(i, "description") or "", total=to_number(field_value(i, "total", 0)))
            for i in line_items
        ]
        self.invoice_total = round(to_number(invoice_total), 2)
        self.template_lookup = template_lookup
        self.rows: List[CostingRowDraft] = [CostingRowDraft.from_source(r) for r in rows]
        self.baseline: Dict[Optional[uuid.UUID], List[CostingRowDraft]] = {}
        self._snapshot_baseline()
        self.dirty_items: Set[Optional[uuid.UUID]] = set()
        self.applied_templates: Dict[Optional[uuid.UUID], Set[str]] = {}
        self.selected_item_id: Optional[uuid.UUID] = None
        self.pending_switch: Optional[uuid.UUID] = None

    # --- lookups ---
    def _snapshot_baseline(self) -> None:
        self.baseline = {}
        for row in self.rows:
            self.baseline.setdefault(row.invoice_item_id, []).append(copy.copy(row))

    def item_number(self, item_id: Optional[uuid.UUID]) -> Optional[int]:
        if item_id is None:
            return None
        for index, item in enumerate(self.line_items):
            if item.id == item_id:
                return index + 1
        raise CostingError("Invoice item does not belong to this invoice")

    def rows_for(self, item_id: Optional[uuid.UUID]) -> List[CostingRowDraft]:
        return [r for r in self.rows if r.invoice_item_id == item_id]

    def get_row(self, row_id: uuid.UUID) -> CostingRowDraft:
        for row in self.rows:
            if row.id == row_id:
                return row
        raise CostingError("Costing row not found")

    def _resolve_item(self, item_id: Optional[uuid.UUID], required: bool = True) -> Optional[uuid.UUID]:
        target = item_id if item_id is not None else self.selected_item_id
        if target is None:
            if required:
                raise CostingError("Please select an invoice item first")
            return None
        self.item_number(target)
        return target

    def mark_dirty(self, item_id: Optional[uuid.UUID]) -> None:
        self.dirty_items.add(item_id)

    def is_dirty(self, item_id: Optional[uuid.UUID] = None) -> bool:
        if item_id is None and self.selected_item_id is None:
            return bool(self.dirty_items)
        return (item_id if item_id is not None else self.selected_item_id) in self.dirty_items

    # --- selection ---
    def select_item(self, item_id: uuid.UUID) -> bool:
        """
        Select a line item. Returns False, leaving the switch pending, when
        the current item has unsaved changes.
        """
        self.item_number(item_id)
        if self.selected_item_id is not None and self.selected_item_id in self.dirty_items:
            self.pending_switch = item_id
            return False
        self.selected_item_id = item_id
        return True

    def confirm_switch(self) -> bool:
        """
        Discard the current item's unsaved rows and move to the pending item.
        """
        if self.pending_switch is None or self.selected_item_id is None:
            return False
        current = self.selected_item_id
        saved = [copy.copy(r) for r in self.baseline.get(current, [])]
        self.rows = [r for r in self.rows if r.invoice_item_id != current] + saved
        self.dirty_items.discard(current)
        self.selected_item_id = self.pending_switch
        self.pending_switch = None
        return True

    def cancel_switch(self) -> None:
        self.pending_switch = None

    # --- row editing ---
    def add_row(self, item_id: Optional[uuid.UUID] = None, **values) -> CostingRowDraft:
        target = self._resolve_item(item_id)
        row = CostingRowDraft(
            invoice_item_id=target,
            item_no=self.item_number(target),
            item_type=values.get("item_type", ""),
            description=values.get("description", ""),
            quantity=values.get("quantity", 1),
            price=values.get("price", 0),
        )
        self.rows.append(row)
        self.mark_dirty(target)
        return row

    def add_invoice_row(self, **values) -> CostingRowDraft:
        """
        Row that costs the invoice as a whole rather than one line item.
        """
        row = CostingRowDraft(
            item_type=values.get("item_type", ""),
            description=values.get("description", ""),
            quantity=values.get("quantity", 1),
            price=values.get("price", 0),
        )
        self.rows.append(row)
        self.mark_dirty(None)
        return row

    def update_row(self, row_id: uuid.UUID, field_name: str, value: Any):
        """
        Change one field of a row. When a new item_type has an item template
        that was neither applied nor skipped for this line item yet, the
        template is returned so the caller can offer it.
        """
        if field_name not in EDITABLE_FIELDS:
            raise CostingError(f"Field '{field_name}' cannot be edited")
        row = self.get_row(row_id)
        if field_name in ("quantity", "price"):
            setattr(row, field_name, to_number(value))
            row.line_total = line_total(row.quantity, row.price)
        elif field_name == "item_type":
            row.item_type = (value or "").strip()
        else:
            row.description = value
        self.mark_dirty(row.invoice_item_id)

        if field_name == "item_type" and row.item_type and self.template_lookup:
            key = normalize_item_key(row.item_type)
            if key not in self.applied_templates.get(row.invoice_item_id, set()):
                template = self.template_lookup(row.item_type)
                if template is not None and field_value(template, "rows"):
                    return template
        return None

    def remove_row(self, row_id: uuid.UUID) -> CostingRowDraft:
        row = self.get_row(row_id)
        self.rows = [r for r in self.rows if r.id != row_id]
        self.mark_dirty(row.invoice_item_id)
        return row

    def reset_item(self, item_id: Optional[uuid.UUID] = None) -> int:
        target = self._resolve_item(item_id)
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.invoice_item_id != target]
        self.mark_dirty(target)
        return before - len(self.rows)

    def reset_all(self) -> int:
        removed = len(self.rows)
        for key in {r.invoice_item_id for r in self.rows}:
            self.mark_dirty(key)
        self.rows = []
        return removed

    def replace_rows(self, incoming: Iterable[Any]) -> None:
        """
        Replace the whole draft with submitted rows, validating their links.
        """
        new_rows = []
        for source in incoming:
            item_id = field_value(source, "invoice_item_id")
            new_rows.append(CostingRowDraft.from_source(
                source, id=uuid.uuid4(), item_no=self.item_number(item_id)
            ))
        for key in {r.invoice_item_id for r in self.rows} | {r.invoice_item_id for r in new_rows}:
            self.mark_dirty(key)
        self.rows = new_rows

    # --- templates ---
    def apply_item_template(self, template: Any, item_id: Optional[uuid.UUID] = None) -> List[CostingRowDraft]:
        target = self._resolve_item(item_id)
        key = normalize_item_key(field_value(template, "item_name"))
        new_rows = rows_from_item_template(template, target, self.item_number(target))
        # Empty rows of the same type are superseded by the template rows
        self.rows = [
            r for r in self.rows
            if not (r.invoice_item_id == target and normalize_item_key(r.item_type) == key and r.line_total == 0)
        ] + new_rows
        self.applied_templates.setdefault(target, set()).add(key)
        self.mark_dirty(target)
        logger.info(f"Item template '{field_value(template, 'item_name')}' applied to item {target}: {len(new_rows)} rows")
        return new_rows

    def skip_item_template(self, template: Any, item_id: Optional[uuid.UUID] = None) -> None:
        target = self._resolve_item(item_id)
        self.applied_templates.setdefault(target, set()).add(normalize_item_key(field_value(template, "item_name")))

    def load_template(
        self, rows: Iterable[Any], mode: TemplateLoadModeEnum, item_id: Optional[uuid.UUID] = None
    ) -> List[CostingRowDraft]:
        """
        Load saved rows in replace or append mode. With item_id the merge is
        limited to that line item and the loaded rows are linked to it;
        otherwise it covers the whole invoice.
        """
        if item_id is not None:
            item_no = self.item_number(item_id)
            incoming = [
                CostingRowDraft.from_source(r, invoice_item_id=item_id, item_no=item_no) for r in rows
            ]
            scope = self.rows_for(item_id)
            outside = [r for r in self.rows if r.invoice_item_id != item_id]
            touched = {item_id}
        else:
            incoming = [CostingRowDraft.from_source(r) for r in rows]
            for r in incoming:
                r.item_no = self.item_number(r.invoice_item_id)
            scope = list(self.rows)
            outside = []
            touched = {r.invoice_item_id for r in self.rows} | {r.invoice_item_id for r in incoming}

        merged = merge_rows(scope, incoming, mode)
        self.rows = outside + merged
        for key in touched:
            self.mark_dirty(key)
        return merged[-len(incoming):] if incoming else []

    # --- derived values ---
    def item_status(self, item_id: uuid.UUID) -> ItemCostingStatusEnum:
        item_rows = self.rows_for(item_id)
        has_valid = any(r.is_valid and r.line_total > 0 for r in item_rows)
        dirty = item_id in self.dirty_items
        if has_valid and not dirty:
            return ItemCostingStatusEnum.COSTED
        if item_rows or dirty:
            return ItemCostingStatusEnum.IN_PROGRESS
        return ItemCostingStatusEnum.NOT_COSTED

    def grouped(self) -> List[ItemGroup]:
        groups = []
        for index, item in enumerate(self.line_items):
            item_rows = self.rows_for(item.id)
            groups.append(ItemGroup(
                item=item,
                item_no=index + 1,
                rows=item_rows,
                subtotal=costing_total(item_rows),
                status=self.item_status(item.id),
            ))
        return groups

    def unassigned_rows(self) -> List[CostingRowDraft]:
        return self.rows_for(None)

    def grand_total(self) -> float:
        return costing_total(self.rows)

    def profit_margin(self) -> Optional[ProfitMargin]:
        return profit_margin(self.invoice_total, self.grand_total())

    # --- saving ---
    def build_save_payload(self, allow_empty: bool = False) -> List[CostingRowDraft]:
        """
        Valid rows in persistence order. Rows without a type are drafts and
        are dropped. An empty payload is only accepted with allow_empty,
        which is how resets are persisted.
        """
        valid = [r for r in self.rows if r.is_valid]
        if not valid and not allow_empty:
            raise CostingError("Add at least one costing item")
        payload = []
        for index, row in enumerate(valid):
            saved = copy.copy(row)
            saved.sort_order = index
            saved.item_no = self.item_number(row.invoice_item_id)
            saved.line_total = line_total(saved.quantity, saved.price)
            payload.append(saved)
        return payload

    def mark_saved(self, rows: Iterable[Any]) -> None:
        self.rows = [CostingRowDraft.from_source(r) for r in rows]
        self._snapshot_baseline()
        self.dirty_items.clear()
        self.pending_switch = None
