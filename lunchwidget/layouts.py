# lunchwidget/layouts.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from lunchwidget.aggregator import _to_float, fixed2
from lunchwidget.widget_config import COLORS, MONTHS, REGULAR_FONT, SMALL_FONT, WidgetConfig

DIVIDER = "-" * 43


# ---- render tree ----
@dataclass
class Node:
    kind: str                                   # "stack" | "text" | "spacer"
    layout: Optional[str] = None                # stacks: "vertical" | "horizontal"
    spacing: Optional[int] = None
    text: Optional[str] = None
    font: Optional[Tuple[str, int]] = None
    color: Optional[str] = None
    align: Optional[str] = None                 # "left" | "center" | "right"
    length: Optional[int] = None                # spacers: None = flexible
    children: List["Node"] = field(default_factory=list)

    def add_stack(self, layout: str = "horizontal", spacing: Optional[int] = None) -> "Node":
        node = Node("stack", layout=layout, spacing=spacing)
        self.children.append(node)
        return node

    def add_text(self, text: str, font=REGULAR_FONT, color: str = COLORS["text"], align: str = "left") -> "Node":
        node = Node("text", text=text, font=font, color=color, align=align)
        self.children.append(node)
        return node

    def add_spacer(self, length: Optional[int] = None) -> "Node":
        node = Node("spacer", length=length)
        self.children.append(node)
        return node

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind}
        if self.kind == "stack":
            out["layout"] = self.layout
            if self.spacing is not None:
                out["spacing"] = self.spacing
            out["children"] = [c.to_dict() for c in self.children]
        elif self.kind == "text":
            out.update({
                "text": self.text,
                "font": {"name": self.font[0], "size": self.font[1]} if self.font else None,
                "color": self.color,
                "align": self.align,
            })
        else:
            out["length"] = self.length
        return out


@dataclass
class WidgetTree:
    title: str
    gradient: Tuple[str, str]
    root: Node
    size: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "size": self.size,
            "background": {"colors": list(self.gradient), "locations": [0.0, 1.0]},
            "root": self.root.to_dict(),
        }


# ---- shared pieces ----
def _field(data: Mapping[str, Any], key: str, default: str = "--") -> str:
    v = data.get(key)
    return default if v is None else str(v)


def _sign_color(value: str) -> str:
    return COLORS["red"] if value.startswith("-") else COLORS["green"]


def _centered_header(main: Node, text: str) -> None:
    heading = main.add_stack("horizontal")
    heading.add_spacer()
    heading.add_text(text, align="center")
    heading.add_spacer()


def _metric_row(main: Node, label: str, value: str, value_color: str) -> None:
    row = main.add_stack("horizontal")
    row.add_text(label)
    row.add_spacer()
    row.add_text(value, color=value_color, align="right")


def _metric_block(main: Node, data: Mapping[str, Any], labels: Mapping[str, str]) -> None:
    total = _field(data, "total", "0.00")
    savings = _field(data, "savings", "0")
    _metric_row(main, labels["income"], _field(data, "income", "0.00"), COLORS["green"])
    _metric_row(main, labels["spent"], _field(data, "spent", "0.00"), COLORS["red"])
    _metric_row(main, labels["total"], total, COLORS["green"] if _to_float(total) >= 0 else COLORS["red"])
    _metric_row(main, labels["savings"], savings, _sign_color(savings))


def _pending(data: Mapping[str, Any]) -> int:
    return int(data.get("pendingTransactions") or 0)


def _accounts_in_error(data: Optional[Mapping[str, Any]]) -> int:
    return int((data or {}).get("accountsInError") or 0)


def period_label(config: WidgetConfig, today: date) -> str:
    return "Current Pay cycle" if config.pay_cycle_mode else MONTHS[today.month - 1]


# ---- layouts ----
def layout_small(main: Node, data: Mapping[str, Any], config: WidgetConfig, today: date) -> None:
    _centered_header(main, "LUNCH MONEY")
    main.add_spacer(5)

    _metric_block(main, data, {"income": "🟢", "spent": "🔴", "total": "💰", "savings": "🏦"})

    if _pending(data) > 0:
        main.add_spacer(5)
        _metric_row(main, "⏳", str(_pending(data)), COLORS["text"])

    if _accounts_in_error(data) > 0:
        main.add_text("❗ Sync Error", color=COLORS["red"])

    main.add_spacer()


def layout_medium(main: Node, data: Mapping[str, Any], config: WidgetConfig, today: date) -> None:
    _centered_header(main, f"💰 LUNCH MONEY - {period_label(config, today)} 💰")
    main.add_spacer(2)

    _metric_block(main, data, {
        "income": "🟢 Total Income: ",
        "spent": "🔴 Total Expenses: ",
        "total": "💰 Net Income: ",
        "savings": "🏦 Savings rate: ",
    })

    if _pending(data) > 0:
        _metric_row(main, "⏳ Pending Reviews:", str(_pending(data)), COLORS["text"])

    errors = _accounts_in_error(data)
    if errors > 0:
        main.add_text(f"❗ Sync Error(s) in {errors} Account(s).", color=COLORS["red"])
    else:
        main.add_text("Oldest Balance Syncs")
        main.add_text(f"     - Plaid: {_field(data, 'plaidOldestUpdate')}", font=SMALL_FONT)
        main.add_text(f"     - Manual: {_field(data, 'manualOldestUpdate')}", font=SMALL_FONT)


def _transaction_row(main: Node, tx: Mapping[str, Any]) -> None:
    line = main.add_stack("horizontal")
    line.add_text(f"{tx.get('date', '')} {tx.get('payee', '')}")
    line.add_spacer()
    line.add_text(fixed2(-_to_float(tx.get("to_base"))), align="right")


def layout_large(main: Node, data: Mapping[str, Any], config: WidgetConfig, today: date) -> None:
    layout_medium(main, data, config, today)

    main.add_spacer(10)
    main.add_text(DIVIDER)
    main.add_spacer(5)

    for tx in data.get("lastTransactions") or []:
        _transaction_row(main, tx)

    main.add_spacer()


LAYOUTS: Dict[str, Callable[[Node, Mapping[str, Any], WidgetConfig, date], None]] = {
    "small": layout_small,
    "medium": layout_medium,
    "large": layout_large,
    "extraLarge": layout_large,
}


def _layout_no_data(main: Node, config: WidgetConfig, today: date) -> None:
    _centered_header(main, "LUNCH MONEY")
    main.add_spacer(5)
    main.add_text("No data available", color=COLORS["red"])
    main.add_spacer()


def render_widget(
    size: Optional[str],
    data: Optional[Mapping[str, Any]],
    config: WidgetConfig,
    today: Optional[date] = None,
) -> WidgetTree:
    """
    Build the render tree for one widget family. Unknown sizes leave the
    main stack empty (the host may not know its layout yet); a missing
    snapshot renders the no-data state.
    """
    today = today or date.today()
    if _accounts_in_error(data) > 0:
        gradient = (COLORS["error1"], COLORS["error2"])
    else:
        gradient = (COLORS["bg1"], COLORS["bg2"])

    root = Node("stack", layout="vertical")
    main = root.add_stack("vertical", spacing=2)

    layout = LAYOUTS.get(size or "")
    if layout is not None:
        if data is None:
            _layout_no_data(main, config, today)
        else:
            layout(main, data, config, today)

    return WidgetTree(title="Lunch Money", gradient=gradient, root=root, size=size)


# ---- terminal adapter ----
def _line_for_row(row: Node, width: int) -> str:
    groups: List[List[str]] = [[]]
    for child in row.children:
        if child.kind == "spacer":
            groups.append([])
        elif child.kind == "text":
            groups[-1].append(child.text or "")
        else:
            groups[-1].append(" ".join(_lines_for(child, width)))
    parts = [" ".join(g) for g in groups]

    if len(parts) == 3 and not parts[0] and not parts[2]:
        return parts[1].center(width).rstrip()
    if len(parts) >= 2:
        left, right = parts[0], " ".join(p for p in parts[1:] if p)
        gap = max(1, width - len(left) - len(right))
        return f"{left}{' ' * gap}{right}"
    return parts[0]


def _lines_for(node: Node, width: int) -> List[str]:
    if node.kind == "text":
        return [node.text or ""]
    if node.kind == "spacer":
        return [""] if (node.length or 0) >= 5 else []
    if node.layout == "horizontal":
        return [_line_for_row(node, width)]
    lines: List[str] = []
    for child in node.children:
        lines.extend(_lines_for(child, width))
    return lines


def render_text(tree: WidgetTree, width: int = 44) -> str:
    """Plain-text drawing of a render tree (colors and fonts dropped)."""
    return "\n".join(_lines_for(tree.root, width))
