from __future__ import annotations

import re
from datetime import date, datetime
from typing import Callable, Optional

import flet as ft

from core.settings import UI
from services.dashboard import OPEN, TaskModal


def close_dialog(page: ft.Page, dlg: Optional[ft.AlertDialog]):
    if not dlg:
        return
    try:
        page.close(dlg)
    except Exception:
        dlg.open = False
        page.update()


def confirm_dialog(page: ft.Page, *, title: str, description: str, on_confirm: Callable[[], None]):
    """Cancel / Continue alert; ``on_confirm`` runs after the dialog closes."""
    dlg: ft.AlertDialog | None = None

    def _cancel(_):
        close_dialog(page, dlg)

    def _continue(_):
        close_dialog(page, dlg)
        on_confirm()

    dlg = ft.AlertDialog(
        modal=True,
        title=ft.Text(title),
        content=ft.Text(description),
        actions=[
            ft.TextButton("Cancel", on_click=_cancel),
            ft.FilledButton("Continue", on_click=_continue),
        ],
        actions_alignment=ft.MainAxisAlignment.END,
    )
    page.open(dlg)
    return dlg


def _parse_date(s: str) -> Optional[date]:
    try:
        return datetime.strptime((s or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def _parse_time(s: str):
    m = re.match(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$", s or "")
    if not m:
        return None
    h, minute, sec = int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)
    if 0 <= h <= 23 and 0 <= minute <= 59 and 0 <= sec <= 59:
        return h, minute, sec
    return None


def combine_date_time(date_str: str, time_str: str) -> Optional[datetime]:
    """Naive local datetime from ``YYYY-MM-DD`` and ``HH:MM[:SS]`` fields."""
    d = _parse_date(date_str)
    t = _parse_time(time_str)
    if not d or not t:
        return None
    return datetime(d.year, d.month, d.day, t[0], t[1], t[2])


class TaskDialog:
    """flet rendering of a :class:`TaskModal`."""

    def __init__(self, page: ft.Page, modal: TaskModal):
        self.page = page
        self.modal = modal
        self.dialog: ft.AlertDialog | None = None

        modal.open()
        values = modal.values
        reminder: datetime = values["reminder_time"]

        self.title_tf = ft.TextField(
            label="Title",
            value=values["title"],
            hint_text="Read book",
            helper_text="This is the title of your task",
        )
        self.description_tf = ft.TextField(
            label="Description",
            value=values["description"],
            hint_text="Read lord of the rings",
            helper_text="This is the description of your task",
            multiline=True,
            min_lines=3,
            max_lines=5,
            max_length=UI.description_max_length,
        )
        self.date_tf = ft.TextField(label="Date", value=reminder.strftime("%Y-%m-%d"), width=160)
        self.time_tf = ft.TextField(
            label="Time",
            value=reminder.strftime("%H:%M"),
            width=120,
            helper_text="When should we remind you?",
        )
        self.date_picker = ft.DatePicker(
            first_date=date(2000, 1, 1),
            last_date=date(2100, 12, 31),
            value=reminder.date(),
            on_change=self._on_date_picked,
        )
        self.time_picker = ft.TimePicker(value=reminder.time(), on_change=self._on_time_picked)
        self.completed_cb = ft.Checkbox(label="Have you completed this task?", value=values["completed"])
        self.submit_btn = ft.FilledButton("Submit", on_click=self.on_submit)

        fields: list[ft.Control] = [
            self.title_tf,
            self.description_tf,
            ft.Row(
                [
                    self.date_tf,
                    ft.IconButton(
                        icon=ft.Icons.CALENDAR_MONTH,
                        tooltip="Pick a date",
                        on_click=lambda e: self.page.open(self.date_picker),
                    ),
                    self.time_tf,
                    ft.IconButton(
                        icon=ft.Icons.SCHEDULE,
                        tooltip="Pick a time",
                        on_click=lambda e: self.page.open(self.time_picker),
                    ),
                ],
                spacing=6,
                wrap=True,
            ),
        ]
        if modal.shows_status_field:
            fields.append(self.completed_cb)
        fields.append(ft.Row([self.submit_btn], alignment=ft.MainAxisAlignment.END))

        self.dialog = ft.AlertDialog(
            title=ft.Text(modal.title),
            content=ft.Container(
                width=480,
                content=ft.Column(fields, spacing=12, tight=True, scroll=ft.ScrollMode.ADAPTIVE),
            ),
            on_dismiss=self._on_dismiss,
        )

    def show(self):
        self.page.open(self.dialog)

    def _on_date_picked(self, e: ft.ControlEvent):
        value = e.control.value
        if value:
            self.date_tf.value = value.strftime("%Y-%m-%d")
            self.page.update()

    def _on_time_picked(self, e: ft.ControlEvent):
        value = e.control.value
        if value:
            self.time_tf.value = value.strftime("%H:%M")
            self.page.update()

    def _on_dismiss(self, _):
        self.modal.cancel()

    def _values(self) -> dict:
        return {
            "title": self.title_tf.value or "",
            "description": self.description_tf.value or "",
            "reminder_time": combine_date_time(self.date_tf.value, self.time_tf.value),
            "completed": bool(self.completed_cb.value) if self.modal.shows_status_field
            else bool(self.modal.values.get("completed", False)),
        }

    def _show_errors(self):
        self.title_tf.error_text = self.modal.error_for("title")
        self.description_tf.error_text = self.modal.error_for("description")
        self.time_tf.error_text = self.modal.error_for("reminder_time")
        self.page.update()

    def on_submit(self, _):
        self.submit_btn.disabled = True
        self.page.update()
        self.modal.submit(self._values())
        if self.modal.state == OPEN:
            self.submit_btn.disabled = False
            self._show_errors()
            return
        close_dialog(self.page, self.dialog)
