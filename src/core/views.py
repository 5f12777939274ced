"""
Derived View Builder

Read-only projections of stored records: filtered, sorted and grouped lists
for the task board, contact search, note board, voice log and enrichment
panel. Never persisted.
"""
import datetime as dt
from enum import StrEnum
from typing import Iterable, List, Optional, Sequence
from pydantic import BaseModel, Field, computed_field

from src.core.temporal import (
    DueCategory,
    DueClassification,
    classify_due,
    day_label,
    due_sort_key,
    local_date,
    as_aware,
)
from src.models.contact import Contact
from src.models.enrichment import (
    ContactEnrichment,
    EmployerProfile,
    EnrichmentStatus,
    NewsItem,
    ProfessionalProfile,
    SocialLinks,
)
from src.models.note import Note
from src.models.task import Task
from src.models.voice_interaction import VoiceInteraction


class TaskFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskView(BaseModel):
    task: Task
    due_category: DueCategory
    days_overdue: Optional[int] = None
    due_label: Optional[str] = None

    @classmethod
    def build(cls, task: Task, classification: DueClassification) -> "TaskView":
        return cls(
            task=task,
            due_category=classification.category,
            days_overdue=classification.days_overdue,
            due_label=classification.label,
        )

    @computed_field
    @property
    def is_overdue(self) -> bool:
        # Completed tasks never read as overdue
        return not self.task.is_completed and self.due_category == DueCategory.PAST_DUE


class NoteBoard(BaseModel):
    pinned: List[Note] = Field(default_factory=list)
    unpinned: List[Note] = Field(default_factory=list)


class VoiceLogGroup(BaseModel):
    label: str
    date: dt.date
    interactions: List[VoiceInteraction]


class VoiceLogView(BaseModel):
    groups: List[VoiceLogGroup] = Field(default_factory=list)
    intents: List[str] = Field(default_factory=list)
    total: int = 0


class EnrichmentView(BaseModel):
    contact_id: str
    status: EnrichmentStatus
    is_refreshing: bool
    can_retry: bool
    has_facts: bool
    profile: ProfessionalProfile
    employer: EmployerProfile
    social: SocialLinks
    news: List[NewsItem]
    news_total: int
    last_enriched_at: Optional[dt.datetime] = None
    error_detail: Optional[str] = None


# ============================================
# TASKS
# ============================================

def _matches_filter(view: TaskView, task_filter: TaskFilter) -> bool:
    if task_filter == TaskFilter.PENDING:
        return not view.task.is_completed
    if task_filter == TaskFilter.COMPLETED:
        return view.task.is_completed
    if task_filter == TaskFilter.OVERDUE:
        return view.is_overdue
    return True


def task_order_key(task: Task) -> tuple:
    """Incomplete before completed, then due ascending with undated last."""
    return (task.is_completed, due_sort_key(task.due_date))


def build_task_list(
    tasks: Iterable[Task],
    task_filter: TaskFilter = TaskFilter.ALL,
    now: Optional[dt.datetime] = None,
    tz: dt.tzinfo | str | None = None,
) -> List[TaskView]:
    """
    Filter and order tasks for the task board.

    The sort is stable, so tasks sharing a due date keep their input order.
    """
    now = now or dt.datetime.now(dt.UTC)
    views = [TaskView.build(task, classify_due(task.due_date, now, tz)) for task in tasks]
    selected = [view for view in views if _matches_filter(view, TaskFilter(task_filter))]
    return sorted(selected, key=lambda view: task_order_key(view.task))


# ============================================
# CONTACTS
# ============================================

def contact_matches(contact: Contact, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    fields = [contact.first_name, contact.last_name, contact.company, contact.email]
    if any(value and needle in value.lower() for value in fields):
        return True
    return any(needle in tag.lower() for tag in contact.tags)


def filter_contacts(contacts: Iterable[Contact], query: str = "") -> List[Contact]:
    return [contact for contact in contacts if contact_matches(contact, query)]


# ============================================
# NOTES
# ============================================

def _note_matches(note: Note, needle: str) -> bool:
    return needle in note.title.lower() or needle in note.content.lower()


def build_note_board(notes: Iterable[Note], query: str = "") -> NoteBoard:
    """
    Split notes into pinned and unpinned groups, each newest-updated first.
    Group membership decides placement; notes never move across groups.
    """
    needle = query.strip().lower()
    matching = [note for note in notes if not needle or _note_matches(note, needle)]

    def newest_first(group: List[Note]) -> List[Note]:
        return sorted(group, key=lambda note: as_aware(note.updated_at), reverse=True)

    return NoteBoard(
        pinned=newest_first([note for note in matching if note.is_pinned]),
        unpinned=newest_first([note for note in matching if not note.is_pinned]),
    )


# ============================================
# VOICE LOG
# ============================================

def _interaction_matches(interaction: VoiceInteraction, needle: str, intent: Optional[str]) -> bool:
    matches_search = (
        not needle
        or needle in interaction.transcription.lower()
        or needle in interaction.ai_response.lower()
    )
    matches_intent = not intent or interaction.intent == intent
    return matches_search and matches_intent


def build_voice_log(
    interactions: Sequence[VoiceInteraction],
    query: str = "",
    intent: Optional[str] = None,
    now: Optional[dt.datetime] = None,
    tz: dt.tzinfo | str | None = None,
) -> VoiceLogView:
    """
    Group the voice log by calendar day, newest first across and within groups.

    Search text matches transcription OR response; the intent filter is an
    exact match ANDed with the search.
    """
    now = now or dt.datetime.now(dt.UTC)
    needle = query.strip().lower()

    intents: List[str] = []
    for interaction in interactions:
        if interaction.intent not in intents:
            intents.append(interaction.intent)

    selected = [i for i in interactions if _interaction_matches(i, needle, intent)]
    selected = sorted(selected, key=lambda i: as_aware(i.created_at), reverse=True)

    groups: List[VoiceLogGroup] = []
    for interaction in selected:
        day = local_date(interaction.created_at, tz)
        if not groups or groups[-1].date != day:
            groups.append(VoiceLogGroup(
                label=day_label(interaction.created_at, now, tz),
                date=day,
                interactions=[],
            ))
        groups[-1].interactions.append(interaction)

    return VoiceLogView(groups=groups, intents=intents, total=len(selected))


# ============================================
# ENRICHMENT
# ============================================

def build_enrichment_view(enrichment: ContactEnrichment, news_limit: int = 3) -> EnrichmentView:
    """Enrichment panel model; news is cut to the display prefix here, not in storage."""
    return EnrichmentView(
        contact_id=enrichment.contact_id,
        status=enrichment.enrichment_status,
        is_refreshing=enrichment.is_refreshing,
        can_retry=enrichment.can_retry,
        has_facts=enrichment.has_facts,
        profile=enrichment.profile,
        employer=enrichment.employer,
        social=enrichment.social,
        news=enrichment.recent_news[:news_limit],
        news_total=len(enrichment.recent_news),
        last_enriched_at=enrichment.last_enriched_at,
        error_detail=enrichment.error_detail,
    )
