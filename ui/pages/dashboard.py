# taskboard/ui/pages/dashboard.py
from datetime import date, datetime

import flet as ft

from core.settings import UI
from models.session import Session
from services.dashboard import CREATE, DUPLICATE, EDIT, DashboardController, TaskCard
from services.linkify import LinkSegment
from ui.dialogs import TaskDialog, confirm_dialog


def _description_text(card: TaskCard) -> ft.Text:
    spans = []
    for seg in card.segments:
        style = ft.TextStyle(
            decoration=ft.TextDecoration.LINE_THROUGH if card.completed else None,
        )
        if isinstance(seg, LinkSegment):
            style.decoration = ft.TextDecoration.UNDERLINE
            style.color = UI.theme.link
            spans.append(ft.TextSpan(seg.url, url=seg.url, style=style))
        else:
            spans.append(ft.TextSpan(seg.text, style=style))
    return ft.Text(
        spans=spans,
        size=13,
        max_lines=UI.description_preview_lines,
        overflow=ft.TextOverflow.ELLIPSIS,
        tooltip=card.description,
    )


class DashboardPage:
    def __init__(self, app, session: Session):
        self.app = app
        self.session = session
        self.controller = DashboardController(
            session,
            app.store,
            notify=self._toast,
            on_tasks_changed=lambda _tasks: self.render(),
            on_sign_out=app.sign_out,
        )

        self.date_tf = ft.TextField(
            value=self.controller.selected_date.isoformat(),
            width=150,
            text_align=ft.TextAlign.CENTER,
            on_submit=self.on_date_submit,
            on_blur=self.on_date_submit,
        )
        self.date_picker = ft.DatePicker(
            first_date=date(2000, 1, 1),
            last_date=date(2100, 12, 31),
            on_change=self.on_date_picked,
        )

        header = ft.Row(
            [
                ft.Row(
                    [
                        ft.Text("Task board for", size=22, color=UI.theme.header_text),
                        self.date_tf,
                        ft.IconButton(
                            icon=ft.Icons.CALENDAR_MONTH,
                            tooltip="Pick a day",
                            on_click=lambda e: self.app.page.open(self.date_picker),
                        ),
                    ],
                    spacing=8,
                ),
                ft.Row(
                    [
                        ft.Text(session.user.email or "", color=UI.theme.header_text),
                        ft.FilledButton(
                            "Sign Out",
                            bgcolor=UI.theme.delete_button,
                            on_click=self.on_sign_out_click,
                        ),
                    ],
                    spacing=12,
                ),
            ],
            alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
            wrap=True,
        )

        self.grid = ft.Row(wrap=True, spacing=8, run_spacing=8, vertical_alignment=ft.CrossAxisAlignment.START)

        self.view = ft.Container(
            content=ft.Column(
                [header, ft.Column([self.grid], scroll=ft.ScrollMode.AUTO, expand=True)],
                spacing=14,
                expand=True,
            ),
            bgcolor=UI.theme.page_bg,
            expand=True,
            padding=20,
        )

    # ---------- lifecycle ----------
    def mount(self):
        self.controller.mount()

    def unmount(self):
        self.controller.unmount()

    # ---------- handlers ----------
    def on_date_submit(self, _):
        try:
            day = datetime.strptime((self.date_tf.value or "").strip(), "%Y-%m-%d").date()
        except ValueError:
            self.date_tf.value = self.controller.selected_date.isoformat()
            self.app.page.update()
            return
        if day != self.controller.selected_date:
            self.controller.set_date(day)

    def on_date_picked(self, e: ft.ControlEvent):
        value = e.control.value
        if value:
            self.date_tf.value = value.strftime("%Y-%m-%d")
            self.controller.set_date(value.date() if isinstance(value, datetime) else value)

    def on_sign_out_click(self, _):
        confirm_dialog(
            self.app.page,
            title="Sign Out",
            description="Are you sure you want to sign out?",
            on_confirm=self.controller.sign_out,
        )

    def _task(self, task_id: int):
        for task in self.controller.tasks:
            if task.id == task_id:
                return task
        return None

    def open_task_dialog(self, mode: str, task_id: int | None = None):
        task = self._task(task_id) if task_id is not None else None
        if mode != CREATE and task is None:
            return self._toast("Task not found", "")
        TaskDialog(self.app.page, self.controller.modal(mode, task)).show()

    def on_delete_click(self, task_id: int):
        task = self._task(task_id)
        if task is None:
            return
        confirm_dialog(
            self.app.page,
            title="Delete Task",
            description="Are you sure you want to delete this task? This action cannot be undone.",
            on_confirm=lambda: self.controller.delete(task),
        )

    def on_complete_click(self, task_id: int):
        task = self._task(task_id)
        if task is None:
            return
        confirm_dialog(
            self.app.page,
            title="Complete Task",
            description="Have you completed the task? This cannot be undone",
            on_confirm=lambda: self.controller.complete(task),
        )

    # ---------- render ----------
    def render(self):
        self.grid.controls = [self._card(card) for card in self.controller.cards()]
        self.grid.controls.append(self._create_card())
        self.app.page.update()

    def _card(self, card: TaskCard) -> ft.Control:
        title = ft.Text(
            card.title,
            size=18,
            weight=ft.FontWeight.W_600,
            expand=True,
            style=ft.TextStyle(decoration=ft.TextDecoration.LINE_THROUGH if card.completed else None),
        )
        options = ft.PopupMenuButton(
            items=[
                ft.PopupMenuItem(
                    text="Duplicate",
                    on_click=lambda e, tid=card.id: self.open_task_dialog(DUPLICATE, tid),
                ),
            ],
        )
        body = [
            ft.Row([title, options], vertical_alignment=ft.CrossAxisAlignment.START),
            _description_text(card),
            ft.Text(f"Due: {card.due}", size=12, color=ft.Colors.BLUE_GREY_400),
        ]
        if card.event_id:
            body.append(
                ft.Row(
                    [ft.Icon(ft.Icons.LINK, size=14), ft.Text("Google Calendar", size=12)],
                    spacing=4,
                )
            )
        if card.show_actions:
            body.append(
                ft.Row(
                    [
                        ft.FilledButton(
                            "Edit",
                            bgcolor=UI.theme.edit_button,
                            on_click=lambda e, tid=card.id: self.open_task_dialog(EDIT, tid),
                        ),
                        ft.FilledButton(
                            "Delete",
                            bgcolor=UI.theme.delete_button,
                            on_click=lambda e, tid=card.id: self.on_delete_click(tid),
                        ),
                        ft.FilledButton(
                            "Done",
                            bgcolor=UI.theme.done_button,
                            on_click=lambda e, tid=card.id: self.on_complete_click(tid),
                        ),
                    ],
                    spacing=4,
                )
            )
        return ft.Container(
            width=UI.card_width,
            height=UI.card_height,
            content=ft.Card(
                color=UI.theme.completed_card_bg if card.completed else None,
                content=ft.Container(ft.Column(body, spacing=8), padding=16),
            ),
        )

    def _create_card(self) -> ft.Control:
        return ft.Container(
            width=UI.card_width,
            height=UI.card_height,
            content=ft.Card(
                content=ft.Container(
                    padding=16,
                    content=ft.Column(
                        [
                            ft.Text("Create Task", size=18, weight=ft.FontWeight.W_600),
                            ft.Text(
                                "Task description. Tasks can only be created for today or "
                                "tomorrow. Stick to about 3-4 tasks a day.",
                                size=13,
                            ),
                            ft.FilledButton(
                                "Create",
                                bgcolor=UI.theme.create_button,
                                on_click=lambda e: self.open_task_dialog(CREATE),
                            ),
                        ],
                        spacing=12,
                    ),
                ),
            ),
        )

    def _toast(self, title: str, description: str = ""):
        text = f"{title}: {description}" if description else title
        self.app.page.open(ft.SnackBar(ft.Text(text)))
