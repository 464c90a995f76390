"""Row selection over the paginated review tables"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set
from bookkeeping_gateway.domain.models import Transaction

SORTABLE_COLUMNS = {
    "amount": lambda t: t.amount,
    "created_at": lambda t: t.created_at,
    "account": lambda t: t.account.name,
    "category": lambda t: t.category.name,
    "kind": lambda t: t.kind.value,
}


def selected_items(rows: Sequence[Transaction], selection: Set[str]) -> List[Transaction]:
    """Rows whose id is in the selection, in row order"""
    return [row for row in rows if row.id in selection]


def matches_filter(txn: Transaction, text: str) -> bool:
    """Case-insensitive substring match across the visible columns"""
    needle = text.strip().lower()
    if not needle:
        return True

    haystack = [
        txn.id,
        txn.kind.value,
        txn.account.name,
        txn.category.name,
        txn.currency.name,
        str(txn.amount),
        txn.remark or "",
        txn.participant.display_name if txn.participant else "",
    ]
    return any(needle in value.lower() for value in haystack)


@dataclass
class TableState:
    """Filter, sort, pagination and selection state of one table"""

    page_size: int = 10
    page_index: int = 0
    global_filter: str = ""
    sort_column: Optional[str] = None
    sort_descending: bool = False
    selection: Set[str] = field(default_factory=set)


class SelectionTracker:
    """
    Derives the selected rows from the table state.

    Rows default to transactions; another table passes its own `matches`
    filter and sortable `columns`.

    The selection is never authoritative: `selected()` recomputes it from
    the current row model on every call. Any pagination change clears it so
    a selection made on one page cannot leak into a bulk action on another.
    """

    def __init__(
        self,
        source: Callable[[], Iterable[Any]],
        page_size: int = 10,
        matches: Callable[[Any, str], bool] = matches_filter,
        columns: Dict[str, Callable[[Any], Any]] = SORTABLE_COLUMNS,
    ):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._source = source
        self._matches = matches
        self._columns = columns
        self.state = TableState(page_size=page_size)

    def filtered_rows(self) -> List[Transaction]:
        rows = [t for t in self._source() if self._matches(t, self.state.global_filter)]
        if self.state.sort_column is not None:
            rows.sort(key=self._columns[self.state.sort_column], reverse=self.state.sort_descending)
        return rows

    def rows(self) -> List[Transaction]:
        """Current page of the row model"""
        start = self.state.page_index * self.state.page_size
        return self.filtered_rows()[start : start + self.state.page_size]

    def page_count(self) -> int:
        return max(1, math.ceil(len(self.filtered_rows()) / self.state.page_size))

    def selected(self) -> List[Transaction]:
        return selected_items(self.rows(), self.state.selection)

    def toggle(self, transaction_id: str, value: bool = True) -> None:
        """Select or deselect one row; ids not on the current page are ignored"""
        if value:
            if transaction_id in {row.id for row in self.rows()}:
                self.state.selection.add(transaction_id)
        else:
            self.state.selection.discard(transaction_id)

    def toggle_all_page_rows(self, value: bool) -> None:
        page_ids = {row.id for row in self.rows()}
        if value:
            self.state.selection |= page_ids
        else:
            self.state.selection -= page_ids

    def clear(self) -> None:
        self.state.selection = set()

    def set_page(self, page_index: int) -> None:
        if page_index < 0:
            raise ValueError("page_index must be non-negative")
        self.state.page_index = page_index
        self.clear()

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.state.page_size = page_size
        self.state.page_index = 0
        self.clear()

    def set_filter(self, text: str) -> None:
        # Filtering resets to the first page, which is a pagination change
        self.state.global_filter = text
        self.set_page(0)

    def set_sorting(self, column: Optional[str], descending: bool = False) -> None:
        if column is not None and column not in self._columns:
            raise ValueError(f"Unknown sort column: {column}")
        self.state.sort_column = column
        self.state.sort_descending = descending
