from __future__ import annotations

from PySide6.QtCore import QSize, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from task_tracker.domain.deadline import DeadlineStatus, priority_stars
from task_tracker.domain.entities import TaskEntity
from task_tracker.domain.enums import SortOption, StatusFilter, Subject, Urgency

STATUS_FILTERS = [
    ("すべて", StatusFilter.ALL),
    ("進行中", StatusFilter.ACTIVE),
    ("完了済み", StatusFilter.COMPLETED),
    ("期限切れ", StatusFilter.OVERDUE),
]

SORT_OPTIONS = [
    ("期限が早い順", SortOption.DEADLINE_ASC),
    ("期限が遅い順", SortOption.DEADLINE_DESC),
    ("優先度が高い順", SortOption.PRIORITY_HIGH),
    ("優先度が低い順", SortOption.PRIORITY_LOW),
]

PRIORITY_OPTIONS = [(priority_stars(value), value) for value in range(1, 6)]

SUBJECT_COLORS = {
    Subject.JAPANESE: "#2563EB",
    Subject.SOCIAL_STUDIES: "#D97706",
    Subject.ANALYSIS_1: "#059669",
    Subject.ANALYSIS_2: "#65A30D",
    Subject.LINEAR_ALGEBRA: "#4F46E5",
    Subject.PHYSICS: "#9333EA",
    Subject.PHYSICAL_EDUCATION: "#EAB308",
    Subject.ENGLISH: "#0284C7",
    Subject.ENGLISH_EXPRESSION: "#F97316",
    Subject.INFORMATION: "#7C3AED",
    Subject.PROGRAMMING_2: "#16A34A",
    Subject.PROGRAMMING_3: "#0D9488",
    Subject.ALGORITHMS: "#0891B2",
    Subject.LOGIC_CIRCUITS: "#DC2626",
    Subject.ELECTRONIC_CIRCUITS: "#C2410C",
    Subject.KNOWLEDGE_SCIENCE: "#C026D3",
    Subject.LAB_WORK: "#78716C",
    Subject.APPLIED_INTRO: "#475569",
    Subject.APPLIED_PBL: "#047857",
    Subject.OTHER: "#6B7280",
}

URGENCY_COLORS = {
    Urgency.OVERDUE: "#DC2626",
    Urgency.DUE_SOON: "#F97316",
    Urgency.UPCOMING: "#3B82F6",
}

URGENCY_ICONS = {
    Urgency.OVERDUE: "🔥",
    Urgency.DUE_SOON: "⚠️",
    Urgency.UPCOMING: "⏳",
}


def format_deadline(task: TaskEntity) -> str:
    if task.deadline is None:
        return ""
    local = task.deadline.astimezone()
    return f"{local.year}年{local.month}月{local.day}日 {local.hour}時{local.minute}分"


def make_badge(status: DeadlineStatus) -> QLabel:
    badge = QLabel(f"{URGENCY_ICONS[status.urgency]}{status.label}")
    badge.setProperty("class", "deadline-badge")
    badge.setStyleSheet(
        f"background-color: {URGENCY_COLORS[status.urgency]}; color: white;"
        " border-radius: 4px; padding: 1px 6px;"
    )
    badge.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
    return badge


class TaskItemWidget(QWidget):
    def __init__(self, task: TaskEntity, status: DeadlineStatus | None, on_toggle):
        super().__init__()
        self.task = task
        self._on_toggle = on_toggle

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(64)
        color = SUBJECT_COLORS.get(task.subject, "#9CA3AF")
        self.setStyleSheet(f"#TaskCard {{ border-left: 8px solid {color}; }}")
        if task.is_done:
            self.setProperty("done", True)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)

        self.done_check = QCheckBox()
        self.done_check.setChecked(task.is_done)
        self.done_check.toggled.connect(self._handle_toggle)

        title = QLabel(task.name)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        title.setMinimumWidth(0)
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        if task.is_done:
            font = title.font()
            font.setStrikeOut(True)
            title.setFont(font)

        subject = QLabel(f"科目：{task.subject.value}")
        subject.setProperty("class", "task-subject")

        priority = QLabel(priority_stars(task.priority))
        priority.setProperty("class", "task-priority")
        priority.setStyleSheet("color: #FB923C;")
        priority.setToolTip(f"優先度 {task.priority}")

        header = QHBoxLayout()
        header.setSpacing(8)
        header.addWidget(self.done_check, 0, Qt.AlignTop)
        header.addWidget(title, 1)
        header.addWidget(subject, 0, Qt.AlignTop)
        header.addWidget(priority, 0, Qt.AlignTop)
        layout.addLayout(header)

        if task.deadline is not None:
            meta_row = QHBoxLayout()
            meta_row.setSpacing(8)
            meta = QLabel(f"期限: {format_deadline(task)}")
            meta.setProperty("class", "task-meta")
            meta_row.addWidget(meta)
            if status is not None and not task.is_done:
                meta_row.addWidget(make_badge(status))
            meta_row.addStretch()
            layout.addLayout(meta_row)

        if task.memo:
            memo = QLabel(task.memo)
            memo.setProperty("class", "task-meta")
            memo.setWordWrap(True)
            layout.addWidget(memo)

    def _handle_toggle(self, checked: bool) -> None:
        self._on_toggle(self.task.id, checked)


class TaskListWidget(QListWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._h_margin = 12
        self._v_margin = 8
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self._update_viewport_margins()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.sync_item_sizes()

    def _update_viewport_margins(self) -> None:
        scrollbar_width = self.verticalScrollBar().width() or self.verticalScrollBar().sizeHint().width()
        right_margin = self._h_margin + (scrollbar_width if self.verticalScrollBar().isVisible() else 0)
        self.setViewportMargins(self._h_margin, self._v_margin, right_margin, self._v_margin)

    def sync_item_sizes(self) -> None:
        self._update_viewport_margins()
        viewport_width = self.viewport().width()
        for index in range(self.count()):
            item = self.item(index)
            widget = self.itemWidget(item)
            if widget:
                widget.setMinimumWidth(viewport_width)
                widget.setMaximumWidth(viewport_width)
                widget.adjustSize()
                hint = widget.sizeHint()
                item.setSizeHint(QSize(viewport_width, hint.height()))
                widget.resize(viewport_width, hint.height())
