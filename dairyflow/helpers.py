from collections import Counter
from io import BytesIO

import pandas as pd

MISSING = "-"

# ============================================
# SEARCH & GROUPING
# ============================================

def search_records(records, term, fields):
    if not term or not term.strip():
        return list(records)
    needle = term.strip().lower()
    matches = []
    for record in records:
        for field in fields:
            value = record.get(field)
            if value is not None and needle in str(value).lower():
                matches.append(record)
                break
    return matches


def group_by(records, key, default="Uncategorized"):
    grouped = {}
    for record in records:
        grouped.setdefault(record.get(key) or default, []).append(record)
    return grouped


def build_search_params(search_type, term, allowed):
    """Query params for the order list endpoints; empty term means no filter."""
    if search_type not in allowed:
        raise ValueError(f"Unsupported search type: {search_type}")
    if not term or not term.strip():
        return {}
    return {search_type: term.strip()}


def status_counts(orders):
    return Counter((o.get("status") or "unknown").lower() for o in orders)

# ============================================
# NUMBERS
# ============================================

def to_float(value, default=0.0):
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_price(text):
    price = to_float(text, default=None)
    if price is None or price <= 0:
        raise ValueError("Please enter a valid price greater than zero.")
    return price


def format_money(value):
    amount = to_float(value, default=None)
    if amount is None:
        return MISSING
    return f"₹{amount:,.2f}"


def format_quantity(value):
    return f"{to_float(value):.3f}"

# ============================================
# ORDER LINES
# ============================================

def lines_from_price_plan(product_prices):
    return [
        {
            "product": p["product"],
            "product_name": p.get("product_name", ""),
            "quantity": "",
            "unit_price": p.get("price", ""),
        }
        for p in product_prices
    ]


def positive_lines(items, keep=("id", "product", "product_name", "quantity", "unit_price")):
    lines = []
    for item in items:
        if to_float(item.get("quantity")) > 0:
            lines.append({k: item[k] for k in keep if k in item and item[k] is not None})
    return lines


def find_price(product_prices, product_id):
    for p in product_prices:
        if p.get("product") == product_id:
            return p
    return None


def price_discount(price, general_price):
    """Percent below the general price; negative when the seller pays more."""
    general = to_float(general_price)
    if general <= 0:
        return 0.0
    return round((general - to_float(price)) / general * 100, 1)


def format_discount(percent):
    if not percent:
        return MISSING
    if percent > 0:
        return f"{percent:.1f}%"
    return f"+{abs(percent):.1f}%"


def seller_price_rows(product_prices, general_prices):
    rows = []
    for p in product_prices:
        general = find_price(general_prices, p.get("product")) or {}
        rows.append({
            "product": p.get("product_name"),
            "price": format_money(p.get("price")),
            "general_price": format_money(general.get("price")),
            "discount": format_discount(price_discount(p.get("price"), general.get("price"))),
        })
    return rows


def with_product_price(plan, product_id, price):
    """Copy of ``plan`` with one product's price replaced."""
    updated = [
        dict(p, price=f"{price:.2f}") if p.get("product") == product_id else p
        for p in plan.get("product_prices") or []
    ]
    return dict(plan, product_prices=updated)


def with_extra_quantity(item, extra):
    updated = dict(item)
    updated["extra_quantity"] = extra
    updated["total_quantity"] = format_quantity(
        to_float(item.get("sales_quantity")) + to_float(extra)
    )
    return updated


def new_purchase_line(product, sales_quantity="", extra_quantity="", remaining_quantity=""):
    return {
        "product_id": product["id"],
        "product_name": product["name"],
        "sales_quantity": sales_quantity or "0.000",
        "extra_quantity": extra_quantity or "0.000",
        "remaining_quantity": remaining_quantity or "0.000",
        "total_quantity": format_quantity(to_float(sales_quantity) + to_float(extra_quantity)),
    }


def available_products(products, items, key="product_id"):
    taken = {str(item.get(key)) for item in items}
    return [p for p in products if str(p["id"]) not in taken]

# ============================================
# REPORT TABLES
# ============================================

def period_keys(rows, *breakdown_getters):
    keys = set()
    for row in rows:
        for getter in breakdown_getters:
            keys.update((getter(row) or {}).keys())
    return sorted(keys)


def pivot_breakdowns(rows, name_key, name_label, totals, breakdowns):
    """Flatten per-period breakdown dicts into one column per period.

    ``totals`` maps a column label to a row key, ``breakdowns`` maps a
    column prefix to a function returning the row's ``{period: value}``
    dict. Periods missing from a row render as ``-``.
    """
    getters = list(breakdowns.values())
    periods = period_keys(rows, *getters)
    table = []
    for row in rows:
        record = {name_label: row.get(name_key)}
        for label, key in totals.items():
            record[label] = row.get(key)
        for prefix, getter in breakdowns.items():
            values = getter(row) or {}
            for period in periods:
                record[f"{prefix} {period}".strip()] = values.get(period, MISSING)
        table.append(record)
    return pd.DataFrame(table)


def heatmap_frame(data):
    statuses = data.get("statuses") or []
    rows = []
    for row in data.get("heatmap") or []:
        record = {"Route": row.get("route")}
        for status in statuses:
            record[status.replace("_", " ").title()] = row.get(status, 0)
        rows.append(record)
    return pd.DataFrame(rows)


REPORT_SECTIONS = {
    "loading_orders": "Loading Orders",
    "delivery_orders": "Delivery Orders",
    "public_sales": "Public Sales",
    "returned_orders": "Returned Orders",
    "broken_orders": "Broken Orders",
    "delivery_expenses": "Delivery Expenses",
    "cash_denominations": "Cash Denominations",
}


def report_sections(report):
    """One DataFrame per delivery report section, nested item lists dropped."""
    sections = {}
    for key, title in REPORT_SECTIONS.items():
        records = report.get(key) or []
        flat = [{k: v for k, v in r.items() if not isinstance(v, (list, dict))} for r in records]
        sections[title] = pd.DataFrame(flat)
    return sections


def sections_to_excel(sections):
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for title, frame in sections.items():
            # Excel sheet names are capped at 31 characters
            frame.to_excel(writer, sheet_name=title[:31], index=False)
    return buffer.getvalue()


def read_price_sheet(file_name, data):
    """Load an uploaded price plan workbook and check its columns."""
    if not file_name.lower().endswith((".xlsx", ".xlsm")):
        raise ValueError("Please upload an .xlsx file")
    frame = pd.read_excel(BytesIO(data), sheet_name=0, engine="openpyxl")
    frame.columns = [str(c).strip().lower() for c in frame.columns]
    missing = {"product", "price"} - set(frame.columns)
    if missing:
        raise ValueError(f"Missing column(s): {', '.join(sorted(missing))}")
    return frame
