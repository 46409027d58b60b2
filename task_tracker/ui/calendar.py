from __future__ import annotations

from datetime import date, datetime, time

from PySide6.QtCore import QDate, Qt
from PySide6.QtGui import QColor, QTextCharFormat
from PySide6.QtWidgets import (
    QCalendarWidget,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from task_tracker.domain.deadline import priority_stars
from task_tracker.domain.entities import TaskEntity
from task_tracker.domain.filters import ViewSpec
from task_tracker.services.task_service import TaskService

from .widgets import SUBJECT_COLORS, URGENCY_ICONS


class CalendarPanel(QWidget):
    """Month calendar of deadlines.

    Days holding a deadline are tinted with the subject colour of their first
    task; the list under the calendar shows the selected day.
    """

    def __init__(self, service: TaskService, on_open_task, on_new_task, parent=None):
        super().__init__(parent)
        self.service = service
        self._on_open_task = on_open_task
        self._on_new_task = on_new_task
        self._marked: list[date] = []

        self.calendar = QCalendarWidget()
        self.calendar.setGridVisible(True)
        self.calendar.setVerticalHeaderFormat(QCalendarWidget.NoVerticalHeader)
        self.calendar.setNavigationBarVisible(True)
        self.calendar.setMinimumHeight(320)
        self.calendar.selectionChanged.connect(self.refresh_day)
        self.calendar.activated.connect(self._new_task_on_date)

        self.day_title = QLabel("")
        self.day_title.setProperty("class", "section-title")

        self.day_list = QListWidget()
        self.day_list.setObjectName("CalendarDayList")
        self.day_list.itemDoubleClicked.connect(self._open_item)

        add_button = QPushButton("この日にタスクを追加")
        add_button.setProperty("variant", "secondary")
        add_button.clicked.connect(lambda: self._new_task_on_date(self.calendar.selectedDate()))

        header = QHBoxLayout()
        header.addWidget(self.day_title)
        header.addStretch()
        header.addWidget(add_button)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.calendar)
        layout.addLayout(header)
        layout.addWidget(self.day_list)

    def refresh(self) -> None:
        days = self.service.calendar_days()
        empty = QTextCharFormat()
        for day in self._marked:
            self.calendar.setDateTextFormat(QDate(day.year, day.month, day.day), empty)
        self._marked = list(days)

        for day, tasks in days.items():
            fmt = QTextCharFormat()
            fmt.setBackground(QColor(SUBJECT_COLORS.get(tasks[0].subject, "#3B82F6")))
            fmt.setForeground(QColor("white"))
            fmt.setToolTip("\n".join(task.name for task in tasks))
            self.calendar.setDateTextFormat(QDate(day.year, day.month, day.day), fmt)
        self.refresh_day()

    def refresh_day(self) -> None:
        selected = self.calendar.selectedDate().toPython()
        tasks = self.service.compute_view(ViewSpec(due_on=selected))
        self.day_title.setText(f"{selected.month}月{selected.day}日のタスク ({len(tasks)})")
        self.day_list.clear()
        for task in tasks:
            item = QListWidgetItem(self._describe(task))
            item.setData(Qt.UserRole, task.id)
            item.setForeground(QColor(SUBJECT_COLORS.get(task.subject, "#3B82F6")))
            self.day_list.addItem(item)

    def _describe(self, task: TaskEntity) -> str:
        parts = [task.deadline.astimezone().strftime("%H:%M"), task.name, priority_stars(task.priority)]
        status = self.service.classify(task)
        if task.is_done:
            parts.append("(完了済み)")
        elif status is not None:
            parts.append(f"{URGENCY_ICONS[status.urgency]}{status.label}")
        return "  ".join(parts)

    def _open_item(self, item: QListWidgetItem) -> None:
        self._on_open_task(item.data(Qt.UserRole))

    def _new_task_on_date(self, selected: QDate) -> None:
        day = selected.toPython()
        self._on_new_task(datetime.combine(day, time()).astimezone())
