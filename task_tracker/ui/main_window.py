from __future__ import annotations

import logging
from datetime import datetime

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QSplitter,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from task_tracker.domain.enums import ALL_SUBJECTS, Subject
from task_tracker.domain.errors import TaskTrackerError
from task_tracker.domain.filters import ViewSpec
from task_tracker.infra.repository import ChangeEvent
from task_tracker.services.task_service import TaskService

from .calendar import CalendarPanel
from .dialogs import TaskDialog, TaskForm
from .widgets import SORT_OPTIONS, STATUS_FILTERS, TaskItemWidget, TaskListWidget

logger = logging.getLogger(__name__)

# deadline badges count down, so redraw even when nothing changed
BADGE_REFRESH_MS = 60_000


class MainWindow(QWidget):
    def __init__(self, service: TaskService):
        super().__init__()
        self.setWindowTitle("3Iの為のTodoアプリ")
        self.resize(1180, 760)

        self.service = service

        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(12, 12, 12, 12)
        main_layout.addLayout(self._build_header())

        self.pages = QStackedWidget()
        self.pages.addWidget(self._build_list_page())
        self.calendar_panel = CalendarPanel(service, self.edit_task, self.new_task)
        self.pages.addWidget(self.calendar_panel)
        main_layout.addWidget(self.pages, 1)

        self.status_label = QLabel("")
        self.status_label.setProperty("class", "status-line")
        main_layout.addWidget(self.status_label)

        self._unsubscribe = self.service.subscribe(self.on_tasks_changed)

        self.badge_timer = QTimer(self)
        self.badge_timer.setInterval(BADGE_REFRESH_MS)
        self.badge_timer.timeout.connect(self.refresh)
        self.badge_timer.start()

        QShortcut(QKeySequence("Ctrl+N"), self, lambda: self.new_task(None))

        self.refresh()

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        title = QLabel("3Iの為のTodoアプリ")
        title.setProperty("class", "panel-title")

        self.list_button = QPushButton("リスト表示")
        self.list_button.setCheckable(True)
        self.list_button.setChecked(True)
        self.list_button.clicked.connect(lambda: self.show_page(0))

        self.calendar_button = QPushButton("カレンダー表示")
        self.calendar_button.setCheckable(True)
        self.calendar_button.setProperty("variant", "secondary")
        self.calendar_button.clicked.connect(lambda: self.show_page(1))

        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.list_button)
        header.addWidget(self.calendar_button)
        return header

    def _build_list_page(self) -> QWidget:
        splitter = QSplitter(Qt.Horizontal)
        splitter.addWidget(self._build_center())
        splitter.addWidget(self._build_side_panel())
        splitter.setStretchFactor(0, 2)
        splitter.setStretchFactor(1, 1)
        splitter.setSizes([760, 380])
        return splitter

    def _build_center(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("CenterPanel")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        self.filter_list = QListWidget()
        self.filter_list.setObjectName("FilterList")
        self.filter_list.setFlow(QListWidget.LeftToRight)
        self.filter_list.setFixedHeight(40)
        self.filter_list.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        for label, key in STATUS_FILTERS:
            item = QListWidgetItem(label)
            item.setData(Qt.UserRole, key)
            self.filter_list.addItem(item)
        self.filter_list.setCurrentRow(0)
        self.filter_list.currentItemChanged.connect(self.refresh)

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("タスク名で検索")
        self.search_input.textChanged.connect(self.refresh)

        self.subject_combo = QComboBox()
        self.subject_combo.addItem("すべて", ALL_SUBJECTS)
        for subject in Subject:
            self.subject_combo.addItem(subject.value, subject.value)
        self.subject_combo.currentIndexChanged.connect(self.refresh)

        self.sort_combo = QComboBox()
        for label, key in SORT_OPTIONS:
            self.sort_combo.addItem(label, key)
        self.sort_combo.currentIndexChanged.connect(self.refresh)

        controls = QHBoxLayout()
        controls.addWidget(QLabel("検索"))
        controls.addWidget(self.search_input, 1)
        controls.addWidget(QLabel("科目"))
        controls.addWidget(self.subject_combo)
        controls.addWidget(QLabel("並べ替え"))
        controls.addWidget(self.sort_combo)

        self.task_list = TaskListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.setSpacing(8)
        self.task_list.itemDoubleClicked.connect(
            lambda item: self.edit_task(item.data(Qt.UserRole))
        )

        self.empty_label = QLabel("現在、登録されているタスクはありません。")
        self.empty_label.setStyleSheet("color: #EF4444;")

        remove_done_button = QPushButton("完了済みのタスクを削除")
        remove_done_button.setProperty("variant", "danger")
        remove_done_button.clicked.connect(self.remove_completed)

        layout.addWidget(self.filter_list)
        layout.addLayout(controls)
        layout.addWidget(self.empty_label)
        layout.addWidget(self.task_list, 1)
        layout.addWidget(remove_done_button, 0, Qt.AlignLeft)
        return frame

    def _build_side_panel(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("SidePanel")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        greeting = QLabel("こんにちは！")
        greeting.setProperty("class", "panel-title")
        self.stats_label = QLabel("")
        self.stats_label.setProperty("class", "stats")

        form_title = QLabel("新しいタスクの追加")
        form_title.setProperty("class", "section-title")
        self.add_form = TaskForm()

        add_button = QPushButton("追加")
        add_button.clicked.connect(self.add_task)

        layout.addWidget(greeting)
        layout.addWidget(self.stats_label)
        layout.addSpacing(12)
        layout.addWidget(form_title)
        layout.addLayout(self.add_form)
        layout.addWidget(add_button)
        layout.addStretch()
        return frame

    def current_spec(self) -> ViewSpec:
        current = self.filter_list.currentItem()
        return ViewSpec(
            status=current.data(Qt.UserRole) if current else STATUS_FILTERS[0][1],
            subject=self.subject_combo.currentData(),
            search=self.search_input.text(),
            sort=self.sort_combo.currentData(),
        )

    def refresh(self, *_args) -> None:
        tasks = self.service.compute_view(self.current_spec())
        self.task_list.clear()
        for task in tasks:
            item = QListWidgetItem()
            item.setData(Qt.UserRole, task.id)
            widget = TaskItemWidget(task, self.service.classify(task), self.on_toggle_done)
            self.task_list.addItem(item)
            self.task_list.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())
        self.task_list.sync_item_sizes()
        self.empty_label.setVisible(not tasks)

        stats = self.service.compute_stats()
        self.stats_label.setText(
            f"未完了タスク数: {stats.uncompleted_count}\n"
            f"全タスク数: {stats.total_count}\n"
            f"今日締め切りのタスク数: {stats.due_today_count}\n"
            f"今後7日間のタスク数: {stats.due_next_7_days_count}"
        )
        self.calendar_panel.refresh()

    def on_tasks_changed(self, event: ChangeEvent) -> None:
        if event.persistence_error is not None:
            self.status_label.setText(f"保存に失敗しました: {event.persistence_error}")
        else:
            self.status_label.clear()
        # the sender may be a widget inside the list that refresh() deletes
        QTimer.singleShot(0, self.refresh)

    def show_page(self, index: int) -> None:
        self.pages.setCurrentIndex(index)
        self.list_button.setChecked(index == 0)
        self.calendar_button.setChecked(index == 1)

    def add_task(self) -> None:
        try:
            self.service.create_task(self.add_form.data())
        except TaskTrackerError as exc:
            QMessageBox.warning(self, "入力エラー", str(exc))
            return
        self.add_form.clear()

    def new_task(self, default_deadline: datetime | None) -> None:
        dialog = TaskDialog(self.service.create_task, default_deadline=default_deadline, parent=self)
        dialog.exec()

    def edit_task(self, task_id: str) -> None:
        task = self.service.get_task(task_id)
        if task is None:
            return
        dialog = TaskDialog(
            lambda data: self.service.update_task(task_id, data),
            task=task,
            on_delete=lambda: self.service.delete_task(task_id),
            parent=self,
        )
        dialog.exec()

    def on_toggle_done(self, task_id: str, value: bool) -> None:
        try:
            self.service.set_done(task_id, value)
        except TaskTrackerError as exc:
            QMessageBox.warning(self, "エラー", str(exc))

    def remove_completed(self) -> None:
        confirm = QMessageBox.question(self, "確認", "完了済みのタスクをすべて削除しますか？")
        if confirm != QMessageBox.Yes:
            return
        removed = self.service.remove_completed()
        self.status_label.setText(f"{removed}件の完了済みタスクを削除しました。")

    def show_load_warning(self, warning: str | None) -> None:
        if not warning:
            return
        logger.warning("Startup warning shown to user: %s", warning)
        QMessageBox.warning(self, "読み込みエラー", warning)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._unsubscribe()
        super().closeEvent(event)
