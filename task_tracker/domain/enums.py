from __future__ import annotations

from enum import IntEnum, StrEnum


class Subject(StrEnum):
    JAPANESE = "国語3"
    SOCIAL_STUDIES = "社会3"
    ANALYSIS_1 = "解析1"
    ANALYSIS_2 = "解析2"
    LINEAR_ALGEBRA = "線形代数・微分方程式"
    PHYSICS = "基礎物理3"
    PHYSICAL_EDUCATION = "保健・体育3"
    ENGLISH = "英語5"
    ENGLISH_EXPRESSION = "英語表現3"
    INFORMATION = "情報3"
    PROGRAMMING_2 = "プログラミング2"
    PROGRAMMING_3 = "プログラミング3"
    ALGORITHMS = "アルゴリズムとデータ構造1"
    LOGIC_CIRCUITS = "論理回路2"
    ELECTRONIC_CIRCUITS = "電気電子回路1"
    KNOWLEDGE_SCIENCE = "知識科学概論"
    LAB_WORK = "知能情報実験実習1"
    APPLIED_INTRO = "応用専門概論"
    APPLIED_PBL = "応用専門PBL1"
    OTHER = "その他"


class StatusFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class SortOption(StrEnum):
    DEADLINE_ASC = "deadline_asc"
    DEADLINE_DESC = "deadline_desc"
    PRIORITY_HIGH = "priority_high"
    PRIORITY_LOW = "priority_low"


class Urgency(StrEnum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"


class PriorityLevel(IntEnum):
    LOWEST = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    HIGHEST = 5


ALL_SUBJECTS = "all"
