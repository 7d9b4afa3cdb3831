import uuid

import pytest

from invoicedesk.core.errors import CostingError
from invoicedesk.schemas.costing import ItemCostingStatusEnum, TemplateLoadModeEnum
from invoicedesk.services.costing import (
    CostingRowDraft,
    CostingWorkspace,
    can_save_as_template,
    has_existing_items,
    merge_rows,
    normalize_item_key,
    profit_margin,
)

ITEM_A = uuid.uuid4()
ITEM_B = uuid.uuid4()
LINE_ITEMS = [
    {"id": ITEM_A, "description": "Business cards", "total": 2500},
    {"id": ITEM_B, "description": "Letterheads", "total": 2000},
]


def saved_row(item_id, item_type, quantity, price, **extra):
    return {"id": uuid.uuid4(), "invoice_item_id": item_id, "item_type": item_type,
            "quantity": quantity, "price": price, "line_total": quantity * price, **extra}


def workspace(rows=(), total=4500, lookup=None):
    return CostingWorkspace(LINE_ITEMS, rows, total, template_lookup=lookup)


def test_line_total_is_recomputed_from_quantity_and_price():
    row = CostingRowDraft(item_type="paper", quantity="3", price=12.25, line_total=999)
    assert row.line_total == 36.75
    assert CostingRowDraft(item_type="paper", quantity="abc", price=5).line_total == 0


def test_profit_margin_is_markup_over_cost():
    margin = profit_margin(1500, 1000)
    assert margin.profit == 500
    assert margin.margin_percent == 50
    assert margin.is_positive

    loss = profit_margin(800, 1000)
    assert loss.profit == -200
    assert loss.margin_percent == -20
    assert not loss.is_positive


def test_profit_margin_undefined_without_cost():
    assert profit_margin(1500, 0) is None
    assert profit_margin(1500, -10) is None


def test_placeholder_row_is_not_existing_content():
    assert not has_existing_items([])
    assert not has_existing_items([CostingRowDraft()])
    assert has_existing_items([CostingRowDraft(item_type="plate")])
    assert has_existing_items([CostingRowDraft(), CostingRowDraft()])


def test_can_save_as_template_rejects_single_zero_row():
    assert not can_save_as_template([])
    assert not can_save_as_template([CostingRowDraft(item_type="plate", quantity=1, price=0)])
    assert can_save_as_template([CostingRowDraft(item_type="plate", quantity=1, price=10)])


def test_merge_replace_drops_existing_rows():
    existing = [CostingRowDraft(item_type="plate", quantity=1, price=100)]
    merged = merge_rows(existing, [{"item_type": "paper", "quantity": 2, "price": 10}], TemplateLoadModeEnum.REPLACE)
    assert [r.item_type for r in merged] == ["paper"]


def test_merge_append_keeps_existing_and_gives_fresh_ids():
    existing = [CostingRowDraft(item_type="plate", quantity=1, price=100)]
    template_row = {"id": existing[0].id, "item_type": "paper", "quantity": 2, "price": 10}
    merged = merge_rows(existing, [template_row], TemplateLoadModeEnum.APPEND)
    assert [r.item_type for r in merged] == ["plate", "paper"]
    assert merged[1].id != existing[0].id


def test_merge_append_onto_placeholder_replaces_it():
    merged = merge_rows([CostingRowDraft()], [{"item_type": "paper", "quantity": 1, "price": 5}], "append")
    assert len(merged) == 1
    assert merged[0].item_type == "paper"


def test_add_row_requires_selected_item():
    ws = workspace()
    with pytest.raises(CostingError):
        ws.add_row(item_type="plate")

    assert ws.select_item(ITEM_A)
    row = ws.add_row(item_type="plate", quantity=2, price=150)
    assert row.invoice_item_id == ITEM_A
    assert row.item_no == 1
    assert ws.is_dirty(ITEM_A)


def test_unknown_item_is_rejected():
    ws = workspace()
    with pytest.raises(CostingError):
        ws.add_row(uuid.uuid4(), item_type="plate")


def test_switching_away_from_dirty_item_needs_confirmation():
    ws = workspace([saved_row(ITEM_A, "plate", 1, 100)])
    ws.select_item(ITEM_A)
    ws.add_row(item_type="paper", quantity=10, price=2)

    assert ws.select_item(ITEM_B) is False
    assert ws.selected_item_id == ITEM_A
    assert ws.pending_switch == ITEM_B

    ws.cancel_switch()
    assert ws.pending_switch is None
    assert ws.selected_item_id == ITEM_A

    ws.select_item(ITEM_B)
    assert ws.confirm_switch()
    assert ws.selected_item_id == ITEM_B
    # Unsaved row of item A was discarded, the saved one survives
    assert [r.item_type for r in ws.rows_for(ITEM_A)] == ["plate"]
    assert not ws.is_dirty(ITEM_A)


def test_update_row_recomputes_total_and_marks_dirty():
    ws = workspace([saved_row(ITEM_A, "plate", 1, 100)])
    row = ws.rows[0]
    ws.update_row(row.id, "quantity", 3)
    assert row.line_total == 300
    assert ws.is_dirty(ITEM_A)
    with pytest.raises(CostingError):
        ws.update_row(row.id, "line_total", 5)


def test_changing_item_type_offers_item_template_once():
    template = {"item_name": "Plate", "rows": [{"sub_item_name": "CTP plate", "default_qty": 4, "default_price": 350}]}
    lookups = []

    def lookup(name):
        lookups.append(name)
        return template if normalize_item_key(name) == "plate" else None

    ws = workspace(lookup=lookup)
    ws.select_item(ITEM_A)
    row = ws.add_row()
    assert ws.update_row(row.id, "item_type", "Plate") is template

    ws.apply_item_template(template)
    other = ws.add_row()
    assert ws.update_row(other.id, "item_type", "plate") is None
    assert ws.update_row(other.id, "item_type", "ink") is None
    assert lookups == ["Plate", "ink"]


def test_apply_item_template_replaces_empty_rows_of_same_type():
    template = {
        "item_name": "Plate",
        "rows": [
            {"sub_item_name": "CTP plate", "description": "4 colour", "default_qty": 4, "default_price": 350, "sort_order": 0},
            {"sub_item_name": "Plate making", "default_qty": 1, "default_price": 200, "sort_order": 1},
        ],
    }
    ws = workspace()
    ws.select_item(ITEM_A)
    ws.add_row(item_type="plate")
    ws.add_row(item_type="paper", quantity=5, price=10)

    new_rows = ws.apply_item_template(template)
    assert [r.description for r in new_rows] == ["CTP plate - 4 colour", "Plate making"]
    assert all(r.item_type == "plate" for r in new_rows)
    assert [r.item_type for r in ws.rows_for(ITEM_A)] == ["paper", "plate", "plate"]
    assert ws.grand_total() == 50 + 1400 + 200


def test_skipped_item_template_is_not_offered_again():
    template = {"item_name": "Plate", "rows": [{"sub_item_name": "CTP", "default_qty": 1, "default_price": 1}]}
    ws = workspace(lookup=lambda name: template)
    ws.select_item(ITEM_A)
    row = ws.add_row()
    ws.skip_item_template(template)
    assert ws.update_row(row.id, "item_type", "Plate") is None


def test_load_template_for_one_item_in_replace_mode():
    ws = workspace([saved_row(ITEM_A, "plate", 1, 100), saved_row(ITEM_B, "paper", 10, 5)])
    ws.load_template([{"item_type": "design", "quantity": 1, "price": 500}], "replace", ITEM_A)

    assert [r.item_type for r in ws.rows_for(ITEM_A)] == ["design"]
    assert ws.rows_for(ITEM_A)[0].item_no == 1
    assert [r.item_type for r in ws.rows_for(ITEM_B)] == ["paper"]
    assert ws.is_dirty(ITEM_A)
    assert not ws.is_dirty(ITEM_B)


def test_load_template_for_one_item_in_append_mode():
    ws = workspace([saved_row(ITEM_A, "plate", 1, 100)])
    loaded = ws.load_template([{"item_type": "design", "quantity": 1, "price": 500}], TemplateLoadModeEnum.APPEND, ITEM_A)
    assert len(loaded) == 1
    assert [r.item_type for r in ws.rows_for(ITEM_A)] == ["plate", "design"]
    assert ws.grand_total() == 600


def test_item_status():
    ws = workspace([saved_row(ITEM_A, "plate", 1, 100)])
    assert ws.item_status(ITEM_A) == ItemCostingStatusEnum.COSTED
    assert ws.item_status(ITEM_B) == ItemCostingStatusEnum.NOT_COSTED

    ws.select_item(ITEM_B)
    ws.add_row(item_type="paper")
    assert ws.item_status(ITEM_B) == ItemCostingStatusEnum.IN_PROGRESS


def test_grouped_rows_and_unassigned_rows():
    ws = workspace([
        saved_row(ITEM_B, "paper", 10, 5),
        saved_row(None, "transport", 1, 300),
    ])
    groups = ws.grouped()
    assert [g.item_no for g in groups] == [1, 2]
    assert groups[0].rows == []
    assert groups[1].subtotal == 50
    assert [r.item_type for r in ws.unassigned_rows()] == ["transport"]
    assert ws.grand_total() == 350


def test_build_save_payload_drops_untyped_rows():
    ws = workspace()
    ws.select_item(ITEM_B)
    ws.add_row(item_type="paper", quantity=2, price=10)
    ws.add_row()
    ws.add_invoice_row(item_type="transport", quantity=1, price=100)

    payload = ws.build_save_payload()
    assert [r.item_type for r in payload] == ["paper", "transport"]
    assert [r.sort_order for r in payload] == [0, 1]
    assert payload[0].item_no == 2
    assert payload[1].item_no is None


def test_build_save_payload_requires_a_valid_row_unless_resetting():
    ws = workspace()
    ws.select_item(ITEM_A)
    ws.add_row()
    with pytest.raises(CostingError):
        ws.build_save_payload()
    assert ws.build_save_payload(allow_empty=True) == []


def test_reset_item_only_clears_that_item():
    ws = workspace([saved_row(ITEM_A, "plate", 1, 100), saved_row(ITEM_B, "paper", 10, 5)])
    assert ws.reset_item(ITEM_A) == 1
    assert ws.rows_for(ITEM_A) == []
    assert len(ws.rows_for(ITEM_B)) == 1
    assert ws.reset_all() == 1
    assert ws.rows == []


def test_remove_row_marks_its_item_dirty():
    ws = workspace([saved_row(ITEM_A, "plate", 1, 100), saved_row(ITEM_A, "paper", 10, 5)])
    assert ws.item_status(ITEM_A) == ItemCostingStatusEnum.COSTED
    plate = ws.rows_for(ITEM_A)[0]

    removed = ws.remove_row(plate.id)
    assert removed.id == plate.id
    assert [r.item_type for r in ws.rows_for(ITEM_A)] == ["paper"]
    assert ws.is_dirty(ITEM_A)
    assert not ws.is_dirty(ITEM_B)
    assert ws.item_status(ITEM_A) == ItemCostingStatusEnum.IN_PROGRESS
    assert ws.grand_total() == 50

    with pytest.raises(CostingError):
        ws.remove_row(uuid.uuid4())


def test_mark_saved_clears_dirty_state():
    ws = workspace()
    ws.select_item(ITEM_A)
    ws.add_row(item_type="plate", quantity=1, price=100)
    ws.mark_saved(ws.build_save_payload())
    assert not ws.is_dirty()
    assert ws.item_status(ITEM_A) == ItemCostingStatusEnum.COSTED
    assert ws.profit_margin().profit == 4400
