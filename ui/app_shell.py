# ui/app_shell.py
from __future__ import annotations

from typing import Optional

import flet as ft

from core.logging_setup import get_logger
from core.settings import UI
from models.session import Session
from services.google_auth import GoogleAuth
from services.task_store import TaskStore

from .pages.dashboard import DashboardPage


class AppShell:
    def __init__(self, page: ft.Page, auth: Optional[GoogleAuth] = None, store: Optional[TaskStore] = None):
        self.page = page
        self.page.title = UI.app_title
        self.page.horizontal_alignment = ft.CrossAxisAlignment.STRETCH
        self.page.vertical_alignment = ft.MainAxisAlignment.START

        self.auth = auth or GoogleAuth()
        self.store = store or TaskStore()
        self.logger = get_logger("ui")
        self._dashboard: DashboardPage | None = None
        self._auth_subscription = self.auth.on_auth_state_change(self._on_auth_change)

        self.sign_in_btn = ft.FilledButton(
            "Sign in with Google",
            icon=ft.Icons.LOGIN,
            on_click=self.on_sign_in_click,
        )
        self.sign_in_view = ft.Container(
            expand=True,
            alignment=ft.alignment.center,
            content=ft.Container(
                width=400,
                content=ft.Column(
                    [
                        ft.Text(UI.app_title, size=28, weight=ft.FontWeight.BOLD),
                        ft.Text("Sign in to see your tasks and mirror them to Google Calendar."),
                        self.sign_in_btn,
                    ],
                    spacing=16,
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                ),
            ),
        )

    # ---------- mount ----------
    def mount(self):
        self.show(self.auth.get_current_session())

    def show(self, session: Session | None):
        if self._dashboard is not None:
            self._dashboard.unmount()
            self._dashboard = None
        self.page.controls.clear()
        if session is None:
            self.page.add(self.sign_in_view)
            return
        self._dashboard = DashboardPage(self, session)
        self.page.add(self._dashboard.view)
        self._dashboard.mount()

    def _on_auth_change(self, event: str, session: Session | None):
        self.logger.info("Auth state changed: %s", event)
        self.show(session)

    # ---------- auth ----------
    def on_sign_in_click(self, _):
        self.sign_in_btn.disabled = True
        self.page.update()
        try:
            self.auth.sign_in()
        except Exception as exc:
            self.logger.exception("Sign-in failed")
            self.page.open(ft.SnackBar(ft.Text(f"Sign-in failed: {exc}")))
        finally:
            self.sign_in_btn.disabled = False
            self.page.update()

    def sign_out(self):
        self.auth.sign_out()
