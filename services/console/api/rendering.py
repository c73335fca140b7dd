"""HTML for the console page. All user and backend text goes through ``escape``."""

from html import escape
from urllib.parse import quote
from typing import Optional

from services.console.application.schemas import CustomerRecord, OrderRecord
from services.console.application.state import (
    Console,
    CustomerForm,
    CustomerDirectory,
    OrderBuilder,
    OrdersListing,
)
from shared.core.order_status import OrderStatus
from shared.core.pricing import format_money, format_percent

PAGE_STYLE = """
* { box-sizing: border-box; }
body { margin: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
       background: linear-gradient(135deg, #020617, #0f172a, #020617); color: #e2e8f0; min-height: 100vh; }
header { position: sticky; top: 0; background: rgba(15, 23, 42, 0.6); border-bottom: 1px solid #1e293b; }
header .bar { max-width: 72rem; margin: 0 auto; padding: 1rem; display: flex; justify-content: space-between; align-items: center; }
header h1 { margin: 0; font-size: 1.5rem; color: #fff; }
main { max-width: 72rem; margin: 0 auto; padding: 1.5rem 1rem; display: grid; grid-template-columns: 1fr 2fr; gap: 1rem; }
.panel { background: rgba(30, 41, 59, 0.5); border: 1px solid #334155; border-radius: 0.75rem; padding: 1rem; margin-bottom: 1rem; }
.panel h3 { margin: 0 0 0.75rem; color: #fff; }
.grid { display: grid; gap: 0.5rem; }
.grid-2 { grid-template-columns: repeat(2, 1fr); }
.grid-3 { grid-template-columns: repeat(3, 1fr); }
.grid-5 { grid-template-columns: repeat(5, 1fr); align-items: center; }
input, select { background: #0f172a; color: #fff; border: 0; border-radius: 0.25rem; padding: 0.4rem 0.6rem; width: 100%; }
button { cursor: pointer; border: 0; border-radius: 0.25rem; padding: 0.4rem 0.9rem; color: #fff; background: #2563eb; }
button:disabled { opacity: 0.6; cursor: default; }
button.link { background: none; padding: 0; color: #93c5fd; }
button.danger { background: none; color: #fca5a5; }
button.create { background: #059669; }
.error { color: #f87171; font-size: 0.875rem; margin-bottom: 0.5rem; }
.muted { color: #94a3b8; font-size: 0.875rem; }
.row { display: flex; justify-content: space-between; align-items: center; }
.list > * { border-bottom: 1px solid #334155; padding: 0.5rem 0; }
.customer { width: 100%; text-align: left; background: none; padding: 0.5rem; }
.customer .email { color: #cbd5e1; font-size: 0.875rem; }
.customer.selected { background: rgba(51, 65, 85, 0.5); }
.totals { text-align: right; }
.preview { margin-top: 0.5rem; }
"""


def _error(message: str) -> str:
    return f'<div class="error">{escape(message)}</div>' if message else ""


def _money(value) -> str:
    return "" if value is None else f"${format_money(value)}"


def _plain(value) -> str:
    """Input box value without trailing zeros"""
    return escape(format_percent(value))


def render_header() -> str:
    return """
<header>
  <div class="bar">
    <h1>Order Management</h1>
    <p class="muted">Customers &bull; Orders &bull; Items</p>
  </div>
</header>"""


def render_customer_form(form: CustomerForm) -> str:
    return f"""
<form class="panel" method="post" action="/customers">
  <h3>New Customer</h3>
  {_error(form.error)}
  <div class="grid grid-2">
    <input name="name" placeholder="Name" value="{escape(form.name)}" required>
    <input name="email" placeholder="Email" value="{escape(form.email)}" required>
    <input name="phone" placeholder="Phone" value="{escape(form.phone)}">
    <input name="address" placeholder="Address" value="{escape(form.address)}">
  </div>
  <p><button type="submit">Add Customer</button></p>
</form>"""


def _render_customer_entry(customer: CustomerRecord, selected: Optional[CustomerRecord]) -> str:
    css = "customer selected" if selected is not None and selected.id == customer.id else "customer"
    select_url = "/customers/" + quote(customer.id, safe="") + "/select"
    return f"""
    <form method="post" action="{escape(select_url)}">
      <button type="submit" class="{css}">
        <div><strong>{escape(customer.name)}</strong></div>
        <div class="email">{escape(customer.email)}</div>
      </button>
    </form>"""


def render_customers_list(directory: CustomerDirectory, selected: Optional[CustomerRecord] = None) -> str:
    entries = "".join(_render_customer_entry(c, selected) for c in directory.customers)
    if not directory.customers:
        entries = '<div class="muted">No customers yet.</div>'
    return f"""
<div class="panel">
  <h3>Customers</h3>
  {_error(directory.error)}
  <div class="list">{entries}</div>
</div>"""


def _render_item_row(index: int, item) -> str:
    prefix = f"items-{index}-"
    return f"""
    <div class="grid grid-5">
      <input name="{prefix}name" placeholder="Item name" value="{escape(item.name)}">
      <input type="number" min="1" name="{prefix}quantity" placeholder="Qty" value="{_plain(item.quantity)}">
      <input type="number" min="0" step="0.01" name="{prefix}unit_price" placeholder="Unit price" value="{_plain(item.unit_price)}">
      <input type="number" min="0" max="100" step="0.01" name="{prefix}discount_percent" placeholder="Item % off" value="{_plain(item.discount_percent)}">
      <button type="submit" class="danger" name="action" value="remove_item:{index}">Remove</button>
    </div>"""


def render_order_builder(builder: OrderBuilder, directory: CustomerDirectory) -> str:
    selected_id = builder.selected.id if builder.selected else ""
    customer_options = ['<option value="">Choose...</option>']
    for customer in directory.customers:
        chosen = " selected" if customer.id == selected_id else ""
        customer_options.append(f'<option value="{escape(customer.id)}"{chosen}>{escape(customer.name)}</option>')

    status_options = []
    for status in OrderStatus.values():
        chosen = " selected" if status == builder.status else ""
        status_options.append(f'<option value="{status}"{chosen}>{status}</option>')

    if builder.items:
        rows = "".join(_render_item_row(i, item) for i, item in enumerate(builder.items))
    else:
        rows = '<div class="muted">No items yet.</div>'

    customer_select = "".join(customer_options)
    status_select = "".join(status_options)

    preview = builder.preview()
    create_disabled = "" if builder.can_create else " disabled"

    return f"""
<form class="panel" method="post" action="/orders/draft">
  <h3>Create Order</h3>
  {_error(builder.error)}
  <button type="submit" name="action" value="save" hidden></button>
  <div class="grid grid-3">
    <label><div class="muted">Select Customer</div>
      <select name="customer_id" onchange="this.form.submit()">{customer_select}</select>
    </label>
    <label><div class="muted">Status</div>
      <select name="status" onchange="this.form.submit()">{status_select}</select>
    </label>
    <label><div class="muted">Order Discount %</div>
      <input type="number" min="0" max="100" step="0.01" name="order_discount_percent" value="{_plain(builder.order_discount_percent)}">
    </label>
  </div>
  <div class="row">
    <strong>Items</strong>
    <button type="submit" class="link" name="action" value="add_item">+ Add item</button>
  </div>
  <div class="grid">{rows}</div>
  <div class="preview muted">
    Subtotal {_money(preview.subtotal)} &bull; Discounts {_money(preview.discount_total)} &bull; Total {_money(preview.total)}
  </div>
  <p>
    <button type="submit" class="link" name="action" value="save">Update preview</button>
    <button type="submit" class="create" name="action" value="create"{create_disabled}>Create Order</button>
  </p>
</form>"""


def _render_order(order: OrderRecord) -> str:
    totals = order.recomputed_totals()
    lines = "".join(
        f"""
      <div class="row">
        <div>- {escape(item.name)} x{item.quantity} @ {_money(item.unit_price)} ({escape(format_percent(item.discount_percent))}% off)</div>
        <div>{_money(line_total)}</div>
      </div>"""
        for item, line_total in zip(order.items, totals.item_totals)
    )
    return f"""
  <div>
    <div class="row">
      <div>
        <div><strong>{escape(order.display_customer)}</strong></div>
        <div class="muted">Status: {escape(order.status)}</div>
      </div>
      <div class="totals">
        <div><strong>{_money(order.total)}</strong></div>
        <div class="muted">Subtotal {_money(order.subtotal)} &bull; Discounts {_money(order.discount_total)}</div>
      </div>
    </div>
    <div class="muted">{lines}</div>
  </div>"""


def render_orders_list(listing: OrdersListing) -> str:
    if listing.loading:
        body = '<div class="muted">Loading...</div>'
    else:
        body = "".join(_render_order(o) for o in listing.orders)
        if not listing.orders:
            body = '<div class="muted">No orders yet.</div>'
    return f"""
<div class="panel">
  <div class="row">
    <h3>Orders</h3>
    <form method="post" action="/orders/refresh"><button type="submit" class="link">Refresh</button></form>
  </div>
  {_error(listing.error)}
  <div class="list">{body}</div>
</div>"""


def render_page(console: Console) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Order Management</title>
  <style>{PAGE_STYLE}</style>
</head>
<body>
{render_header()}
<main>
  <div>
    {render_customer_form(console.customer_form)}
    {render_customers_list(console.directory, console.builder.selected)}
  </div>
  <div>
    {render_order_builder(console.builder, console.directory)}
    {render_orders_list(console.listing)}
  </div>
</main>
</body>
</html>"""
