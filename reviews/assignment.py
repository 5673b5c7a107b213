"""
Логика назначения ревьюверов.

Чистые функции над уже загруженным состоянием: ростер команды (участники
с атрибутами ``id`` и ``is_active`` в порядке вступления) и PR (атрибуты
``status`` и ``author_id``). Здесь нет обращений к БД и логирования,
транзакции и запись - забота ReviewStore.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .errors import AuthorTeamNotFound, NotAssigned, NoCandidate, NotFound, PRMerged

MAX_REVIEWERS = 2

STATUS_MERGED = 'MERGED'


@dataclass
class MassDeactivationResult:
    team_name: str
    deactivated_count: int = 0
    reassigned_pr_ids: List[str] = field(default_factory=list)

    @property
    def reassigned_count(self) -> int:
        return len(self.reassigned_pr_ids)

    def mark_reassigned(self, pr_id: str):
        if pr_id not in self.reassigned_pr_ids:
            self.reassigned_pr_ids.append(pr_id)


def assign_reviewers_on_create(author_id: str, roster: Optional[Iterable], limit: int = MAX_REVIEWERS) -> list:
    """
    Выбирает до limit активных участников команды автора, кроме самого автора.
    Порядок выбора - порядок ростера.
    """
    if roster is None:
        raise AuthorTeamNotFound(f"Author '{author_id}' has no team")

    selected = []
    for member in roster:
        if len(selected) >= limit:
            break
        if member.id != author_id and member.is_active:
            selected.append(member)
    return selected


def find_replacement(roster: Iterable, old_reviewer_id: str, assigned_ids: Sequence[str],
                     author_id: str = None):
    """
    Первый активный участник ростера, который не заменяемый ревьювер,
    не назначен на PR и не автор. None, если такого нет.
    """
    excluded = set(assigned_ids)
    excluded.add(old_reviewer_id)
    if author_id is not None:
        excluded.add(author_id)

    for member in roster:
        if member.is_active and member.id not in excluded:
            return member
    return None


def reassign_reviewer(pr, old_reviewer_id: str, roster: Iterable, assigned_ids: Sequence[str]):
    """
    Подбирает замену ревьюверу. Проверки идут строго в порядке:
    PR существует, PR не смержен, ревьювер назначен, есть кандидат.
    """
    if pr is None:
        raise NotFound('PR not found')

    if pr.status == STATUS_MERGED:
        raise PRMerged()

    if old_reviewer_id not in assigned_ids:
        raise NotAssigned()

    candidate = find_replacement(roster, old_reviewer_id, assigned_ids, author_id=pr.author_id)
    if candidate is None:
        raise NoCandidate()
    return candidate


def replace_in_sequence(reviewer_ids: Sequence[str], old_id: str, new_id: str) -> List[str]:
    return [new_id if reviewer_id == old_id else reviewer_id for reviewer_id in reviewer_ids]


def plan_mass_deactivation(roster: Iterable, exclude_ids: Iterable[str]) -> List[str]:
    """
    Id всех участников ростера, кроме исключенных. Текущая активность
    и назначения значения не имеют.
    """
    excluded = set(exclude_ids or [])
    return [member.id for member in roster if member.id not in excluded]
