from __future__ import annotations

from datetime import datetime

from PySide6.QtCore import QDate, QDateTime, QTime
from PySide6.QtWidgets import (
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QDateTimeEdit,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QRadioButton,
    QTextEdit,
    QVBoxLayout,
)

from task_tracker.domain.entities import TaskEntity
from task_tracker.domain.enums import Subject
from task_tracker.domain.errors import TaskTrackerError
from task_tracker.domain.validation import NAME_MAX_LENGTH, NAME_MIN_LENGTH
from task_tracker.infra.repository import DEFAULT_PRIORITY

from .widgets import PRIORITY_OPTIONS


class TaskForm(QFormLayout):
    """Name / subject / priority / deadline / memo inputs shared by the add
    panel and the edit dialog."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.name_input = QLineEdit()
        self.name_input.setMaxLength(NAME_MAX_LENGTH)
        self.name_input.setPlaceholderText(
            f"{NAME_MIN_LENGTH}文字以上、{NAME_MAX_LENGTH}文字以内で入力"
        )

        self.subject_combo = QComboBox()
        for subject in Subject:
            self.subject_combo.addItem(subject.value, subject)

        self.priority_group = QButtonGroup()
        priority_row = QHBoxLayout()
        for label, value in PRIORITY_OPTIONS:
            button = QRadioButton(str(value))
            button.setToolTip(label)
            self.priority_group.addButton(button, value)
            priority_row.addWidget(button)
        priority_row.addStretch()

        self.deadline_check = QCheckBox("期限を設定")
        self.deadline_check.toggled.connect(self._on_deadline_toggled)
        self.deadline_input = QDateTimeEdit()
        self.deadline_input.setCalendarPopup(True)
        self.deadline_input.setDisplayFormat("yyyy/MM/dd HH:mm")

        self.memo_input = QTextEdit()
        self.memo_input.setPlaceholderText("任意でメモを入力できます")
        self.memo_input.setMaximumHeight(90)

        self.addRow("名前", self.name_input)
        self.addRow("科目", self.subject_combo)
        self.addRow("優先度", priority_row)
        self.addRow(self.deadline_check, self.deadline_input)
        self.addRow("メモ", self.memo_input)

        self.clear()

    def _on_deadline_toggled(self, checked: bool) -> None:
        self.deadline_input.setEnabled(checked)

    def clear(self, default_deadline: datetime | None = None) -> None:
        self.name_input.clear()
        self.subject_combo.setCurrentIndex(0)
        self.priority_group.button(DEFAULT_PRIORITY).setChecked(True)
        self.memo_input.clear()
        self._set_deadline(default_deadline)

    def populate(self, task: TaskEntity) -> None:
        self.name_input.setText(task.name)
        index = self.subject_combo.findData(task.subject)
        if index >= 0:
            self.subject_combo.setCurrentIndex(index)
        button = self.priority_group.button(task.priority)
        if button is not None:
            button.setChecked(True)
        self.memo_input.setPlainText(task.memo)
        self._set_deadline(task.deadline)

    def _set_deadline(self, value: datetime | None) -> None:
        self.deadline_check.setChecked(value is not None)
        self.deadline_input.setEnabled(value is not None)
        if value is None:
            self.deadline_input.setDateTime(QDateTime.currentDateTime())
        else:
            local = value.astimezone()
            self.deadline_input.setDateTime(
                QDateTime(QDate(local.year, local.month, local.day), QTime(local.hour, local.minute))
            )

    def data(self) -> dict:
        deadline = None
        if self.deadline_check.isChecked():
            deadline = self.deadline_input.dateTime().toPython().astimezone()
        return {
            "name": self.name_input.text(),
            "subject": self.subject_combo.currentData(),
            "priority": self.priority_group.checkedId(),
            "deadline": deadline,
            "memo": self.memo_input.toPlainText(),
        }


class TaskDialog(QDialog):
    """New-task and edit-task modal.

    ``on_submit`` receives the form data and may raise a ``TaskTrackerError``;
    the dialog then stays open and shows the message.
    """

    def __init__(
        self,
        on_submit,
        task: TaskEntity | None = None,
        default_deadline: datetime | None = None,
        on_delete=None,
        parent=None,
    ):
        super().__init__(parent)
        self._on_submit = on_submit
        self._on_delete = on_delete
        self.setWindowTitle("タスクの編集" if task else "新しいタスクの追加")
        self.setMinimumWidth(420)

        self.form = TaskForm()
        if task is not None:
            self.form.populate(task)
        else:
            self.form.clear(default_deadline)

        save_button = QPushButton("保存" if task else "追加")
        save_button.clicked.connect(self._submit)

        cancel_button = QPushButton("キャンセル")
        cancel_button.setProperty("variant", "ghost")
        cancel_button.clicked.connect(self.reject)

        buttons = QHBoxLayout()
        if task is not None and on_delete is not None:
            delete_button = QPushButton("削除")
            delete_button.setProperty("variant", "danger")
            delete_button.clicked.connect(self._delete)
            buttons.addWidget(delete_button)
        buttons.addStretch()
        buttons.addWidget(cancel_button)
        buttons.addWidget(save_button)

        layout = QVBoxLayout(self)
        layout.addLayout(self.form)
        layout.addLayout(buttons)

    def _submit(self) -> None:
        try:
            self._on_submit(self.form.data())
        except TaskTrackerError as exc:
            QMessageBox.warning(self, "入力エラー", str(exc))
            return
        self.accept()

    def _delete(self) -> None:
        confirm = QMessageBox.question(self, "確認", "このタスクを削除しますか？")
        if confirm != QMessageBox.Yes:
            return
        try:
            self._on_delete()
        except TaskTrackerError as exc:
            QMessageBox.warning(self, "エラー", str(exc))
            return
        self.accept()
