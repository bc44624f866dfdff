"""
Form Aggregate base class.

Every wizard page follows the same pattern:

    Idle -> Editing -> (Blurred -> Formatted) -> Idle

- edit_amount() runs on every keystroke: the raw text is sanitized and
  stored as-is, so "12." survives while the user is typing
- blur() formats the value and stores its canonical two-decimal form
- after every change the page's derived values are recomputed from the
  full record, listeners are notified, and the attached auto-save
  coordinator gets the full page record

Fields are addressed by dotted paths of attribute names. Items of a
list section are addressed by id, never by position:

    "services"                     income services amount
    "inventory.initial_value"      nested section
    "items#3.amount"               amount of the expense with id 3
"""

import re
from enum import Enum
from typing import Any, Callable, ClassVar, Optional, get_args, get_origin

from tax_intake.formatting.currency import (
    check_amount,
    format_on_blur,
    normalize,
    sanitize,
    unformat,
)
from tax_intake.models.forms import PageName, RecordModel, is_money_field
from tax_intake.models.issues import AmountIssue


class FieldState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    BLURRED = "blurred"
    FORMATTED = "formatted"


_ITEM_ID = re.compile(r"#\d+")

PageListener = Callable[["FormPage"], None]


class FormPage:
    """
    One wizard page: its record, field states, amount issues and the
    auto-save hook.

    Subclasses set `name` and `record_type`, and list the paths of
    monetary fields that may go negative in `negative_fields` (item ids
    stripped, e.g. "assets.bank_balance").
    """

    name: ClassVar[PageName]
    record_type: ClassVar[type[RecordModel]]
    negative_fields: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, record: Optional[RecordModel] = None):
        self._record = record if record is not None else self.record_type()
        self._states: dict[str, FieldState] = {}
        self._issues: dict[str, AmountIssue] = {}
        self._high_water: dict[str, int] = {}
        self._listeners: list[PageListener] = []
        self._coordinator = None
        self._recompute()

    # -------------------------------------------------------------------------
    # Record access
    # -------------------------------------------------------------------------

    @property
    def record(self) -> RecordModel:
        """Copy of the current record."""
        return self._record.model_copy(deep=True)

    def to_record(self) -> dict[str, Any]:
        return self._record.to_record()

    def load_record(self, data: dict[str, Any]) -> None:
        """
        Replace the page's record with saved data.

        Does not schedule a save: the data came from the remote store.

        Raises:
            pydantic.ValidationError: If data does not fit the page schema
        """
        self._record = self.record_type.model_validate(data)
        self._states.clear()
        self._issues.clear()
        self._high_water.clear()
        self._changed(persist=False)

    def get(self, path: str) -> Any:
        node, attr = self._resolve(path)
        return getattr(node, attr)

    def display(self, path: str) -> str:
        """What the input box shows: raw while editing, formatted otherwise."""
        node, attr = self._resolve(path)
        value = getattr(node, attr)
        if not is_money_field(type(node), attr):
            return "" if value is None else str(value)
        if self.field_state(path) == FieldState.EDITING:
            return value
        return format_on_blur(value)

    def field_state(self, path: str) -> FieldState:
        return self._states.get(path, FieldState.IDLE)

    def issue(self, path: str) -> Optional[AmountIssue]:
        return self._issues.get(path)

    @property
    def issues(self) -> dict[str, AmountIssue]:
        return dict(self._issues)

    def allows_negative(self, path: str) -> bool:
        return _ITEM_ID.sub("", path) in self.negative_fields

    # -------------------------------------------------------------------------
    # Field transitions
    # -------------------------------------------------------------------------

    def edit_amount(self, path: str, raw: str) -> str:
        """Handle a keystroke in a monetary field. Returns the stored value."""
        node, attr = self._resolve_money(path)
        allow_negative = self.allows_negative(path)

        value = sanitize(raw, allow_negative=allow_negative)
        setattr(node, attr, value)
        self._states[path] = FieldState.EDITING

        # Checked with the sign kept so a typed minus can be reported
        self._set_issue(path, check_amount(
            sanitize(raw, allow_negative=True),
            allow_negative=allow_negative,
            field=path,
        ))
        self._changed()
        return value

    def blur(self, path: str) -> str:
        """Handle the user leaving a monetary field. Returns the display text."""
        node, attr = self._resolve_money(path)

        self._states[path] = FieldState.BLURRED
        display = format_on_blur(getattr(node, attr))
        self._states[path] = FieldState.FORMATTED
        setattr(node, attr, unformat(display))

        self._set_issue(path, check_amount(
            getattr(node, attr),
            allow_negative=self.allows_negative(path),
            field=path,
        ))
        self._states[path] = FieldState.IDLE
        self._changed()
        return display

    def set_value(self, path: str, value: Any) -> None:
        """
        Set a field outright (text, choices, or a complete amount).

        Amounts are normalized; other values are validated by the model.
        """
        node, attr = self._resolve(path)
        if is_money_field(type(node), attr):
            value = normalize(value, allow_negative=self.allows_negative(path))
            self._states.pop(path, None)
        setattr(node, attr, value)
        self._changed()

    # -------------------------------------------------------------------------
    # List sections
    # -------------------------------------------------------------------------

    def items(self, section: str) -> list:
        node, attr, _ = self._resolve_list(section)
        return [item.model_copy() for item in getattr(node, attr)]

    def add_item(self, section: str, **values: Any) -> int:
        """
        Append an item to a list section. Returns its id.

        Ids are never reused on this page, not even after the item with
        the highest id is removed.
        """
        node, attr, item_type = self._resolve_list(section)
        current = getattr(node, attr)
        item_id = self._next_id(section, current)

        data = {}
        for key, value in values.items():
            if is_money_field(item_type, key):
                value = normalize(
                    value,
                    allow_negative=self.allows_negative(f"{section}.{key}"),
                )
            data[key] = value

        setattr(node, attr, [*current, item_type(id=item_id, **data)])
        self._changed()
        return item_id

    def update_item(self, section: str, item_id: int, **values: Any) -> None:
        node, attr, item_type = self._resolve_list(section)
        item = self._find_item(getattr(node, attr), item_id, section)

        for key, value in values.items():
            if key == "id":
                raise ValueError("Item ids cannot be changed")
            if is_money_field(item_type, key):
                value = normalize(
                    value,
                    allow_negative=self.allows_negative(f"{section}.{key}"),
                )
                self._states.pop(f"{section}#{item_id}.{key}", None)
            setattr(item, key, value)
        self._changed()

    def remove_item(self, section: str, item_id: int) -> None:
        """Remove an item. Sibling ids are left untouched."""
        node, attr, _ = self._resolve_list(section)
        current = getattr(node, attr)
        remaining = [item for item in current if item.id != item_id]
        if len(remaining) == len(current):
            raise KeyError(f"No item {item_id} in {section}")

        # Keep the high-water mark so the removed id is never handed out again
        self._high_water[section] = max(
            self._high_water.get(section, 0),
            max(item.id for item in current),
        )
        setattr(node, attr, remaining)

        prefix = f"{section}#{item_id}."
        for path in [p for p in self._states if p.startswith(prefix)]:
            del self._states[path]
        for path in [p for p in self._issues if p.startswith(prefix)]:
            del self._issues[path]
        self._changed()

    # -------------------------------------------------------------------------
    # Listeners and auto-save
    # -------------------------------------------------------------------------

    def subscribe(self, listener: PageListener) -> None:
        """Call listener(page) after every change."""
        self._listeners.append(listener)

    def attach(self, coordinator) -> None:
        """Send every subsequent change to an AutoSaveCoordinator."""
        self._coordinator = coordinator

    def detach(self) -> None:
        self._coordinator = None

    async def leave(self, flush: bool = True) -> None:
        """
        Page exit: flush (or drop) the pending save and stop auto-saving.
        """
        coordinator, self._coordinator = self._coordinator, None
        if coordinator is not None:
            await coordinator.page_exit(self.name.value, flush=flush)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _recompute(self) -> None:
        """Recompute page-level derived values from the full record."""
        pass

    def _changed(self, persist: bool = True) -> None:
        self._recompute()
        for listener in list(self._listeners):
            listener(self)
        if persist and self._coordinator is not None and not self._coordinator.closed:
            self._coordinator.schedule_save(self.name.value, self.to_record())

    def _set_issue(self, path: str, issue: Optional[AmountIssue]) -> None:
        if issue is None:
            self._issues.pop(path, None)
        else:
            self._issues[path] = issue

    def _next_id(self, section: str, current: list) -> int:
        highest = max([self._high_water.get(section, 0), *(item.id for item in current)])
        self._high_water[section] = highest + 1
        return highest + 1

    @staticmethod
    def _find_item(items: list, item_id: int, section: str):
        for item in items:
            if item.id == item_id:
                return item
        raise KeyError(f"No item {item_id} in {section}")

    def _resolve(self, path: str) -> tuple[RecordModel, str]:
        node: Any = self._record
        parts = path.split(".")
        for part in parts[:-1]:
            name, marker, item_id = part.partition("#")
            if name not in type(node).model_fields:
                raise KeyError(f"Unknown field: {path}")
            node = getattr(node, name)
            if marker:
                node = self._find_item(node, int(item_id), name)

        attr = parts[-1]
        if not isinstance(node, RecordModel) or attr not in type(node).model_fields:
            raise KeyError(f"Unknown field: {path}")
        return node, attr

    def _resolve_money(self, path: str) -> tuple[RecordModel, str]:
        node, attr = self._resolve(path)
        if not is_money_field(type(node), attr):
            raise ValueError(f"{path} is not a monetary field")
        return node, attr

    def _resolve_list(self, section: str) -> tuple[RecordModel, str, type[RecordModel]]:
        node, attr = self._resolve(section)
        annotation = type(node).model_fields[attr].annotation
        if get_origin(annotation) is not list:
            raise KeyError(f"{section} is not a list section")
        return node, attr, get_args(annotation)[0]
