"""
ReviewStore - слой хранения поверх Django ORM.

Все записи выполняются в transaction.atomic: вызванные внутри транзакции
сервиса, методы присоединяются к ней, и операция сервиса фиксируется целиком
или откатывается целиком. Ростер всегда упорядочен по id строки членства,
то есть по порядку вступления в команду.
"""
import logging

from django.db import IntegrityError, transaction

from . import assignment
from .errors import NotFound, PRExists, TeamExists
from .models import PullRequest, ReviewerAssignment, Team, TeamMembership, User

logger = logging.getLogger(__name__)


class ReviewStore:

    # Команды и пользователи

    @classmethod
    def upsert_user(cls, user_id: str, username: str, is_active: bool) -> User:
        user, created = User.objects.update_or_create(
            id=user_id,
            defaults={'username': username, 'is_active': is_active},
        )
        return user

    @classmethod
    @transaction.atomic
    def create_team_atomic(cls, name: str, members: list) -> Team:
        if Team.objects.filter(name=name).exists():
            raise TeamExists()

        try:
            with transaction.atomic():
                team = Team.objects.create(name=name)
        except IntegrityError:
            raise TeamExists()

        for member in members:
            user = cls.upsert_user(member['user_id'], member['username'], member['is_active'])
            # Членство, однажды установленное, не переносится в другую команду
            TeamMembership.objects.get_or_create(user=user, defaults={'team': team})

        return team

    @classmethod
    def get_team(cls, name: str) -> Team:
        try:
            return Team.objects.get(name=name)
        except Team.DoesNotExist:
            raise NotFound(f"Team '{name}' not found")

    @classmethod
    def get_roster(cls, team_name: str) -> list:
        return list(
            User.objects.filter(membership__team__name=team_name).order_by('membership__id')
        )

    @classmethod
    def find_team_of_user(cls, user_id: str) -> str:
        membership = TeamMembership.objects.select_related('team').filter(user_id=user_id).first()
        if membership is None:
            raise NotFound(f"User '{user_id}' has no team")
        return membership.team.name

    @classmethod
    def find_active_candidates(cls, team_name: str, exclude_ids=()) -> list:
        return list(
            User.objects
            .filter(membership__team__name=team_name, is_active=True)
            .exclude(id__in=list(exclude_ids))
            .order_by('membership__id')
        )

    @classmethod
    def get_user(cls, user_id: str, for_update: bool = False) -> User:
        users = User.objects.select_for_update() if for_update else User.objects
        try:
            return users.get(id=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User '{user_id}' not found")

    @classmethod
    @transaction.atomic
    def set_user_active(cls, user_id: str, is_active: bool) -> User:
        user = cls.get_user(user_id, for_update=True)
        user.is_active = is_active
        user.save(update_fields=['is_active'])
        return user

    # Pull Request'ы

    @classmethod
    def get_pull_request(cls, pr_id: str, for_update: bool = False):
        prs = PullRequest.objects.select_for_update() if for_update else PullRequest.objects
        return prs.filter(id=pr_id).first()

    @classmethod
    def pull_request_exists(cls, pr_id: str) -> bool:
        return PullRequest.objects.filter(id=pr_id).exists()

    @classmethod
    def reviewer_ids(cls, pr_id: str) -> list:
        return list(
            ReviewerAssignment.objects
            .filter(pull_request_id=pr_id)
            .order_by('position')
            .values_list('user_id', flat=True)
        )

    @classmethod
    @transaction.atomic
    def create_pr_atomic(cls, pr_id: str, title: str, author_id: str, reviewer_ids: list) -> PullRequest:
        if cls.pull_request_exists(pr_id):
            raise PRExists()

        try:
            with transaction.atomic():
                pr = PullRequest.objects.create(id=pr_id, title=title, author_id=author_id)
        except IntegrityError:
            raise PRExists()

        ReviewerAssignment.objects.bulk_create([
            ReviewerAssignment(pull_request=pr, user_id=reviewer_id, position=position)
            for position, reviewer_id in enumerate(reviewer_ids)
        ])
        return pr

    @classmethod
    @transaction.atomic
    def set_status(cls, pr_id: str, status: str, timestamp) -> PullRequest:
        pr = cls.get_pull_request(pr_id, for_update=True)
        if pr is None:
            raise NotFound(f"PR '{pr_id}' not found")

        if pr.status != PullRequest.Status.MERGED:
            pr.status = status
            if status == PullRequest.Status.MERGED:
                pr.merged_at = timestamp
            pr.save()

        return pr

    @classmethod
    @transaction.atomic
    def replace_reviewer(cls, pr_id: str, old_id: str, new_id: str):
        updated = (
            ReviewerAssignment.objects
            .filter(pull_request_id=pr_id, user_id=old_id)
            .update(user_id=new_id)
        )
        if not updated:
            raise NotFound(f"Reviewer '{old_id}' not found on PR '{pr_id}'")

    @classmethod
    def list_assigned_pull_requests(cls, user_id: str) -> list:
        return list(
            PullRequest.objects
            .filter(assignments__user_id=user_id)
            .order_by('created_at', 'id')
        )

    # Массовая деактивация

    @classmethod
    @transaction.atomic
    def bulk_deactivate_and_reassign(cls, team_name: str, exclude_ids=()) -> assignment.MassDeactivationResult:
        team = Team.objects.select_for_update().filter(name=team_name).first()
        if team is None:
            raise NotFound(f"Team '{team_name}' not found")

        result = assignment.MassDeactivationResult(team_name=team_name)

        to_deactivate = assignment.plan_mass_deactivation(cls.get_roster(team_name), exclude_ids)
        User.objects.filter(id__in=to_deactivate).update(is_active=False)
        result.deactivated_count = len(to_deactivate)

        stale_assignments = list(
            ReviewerAssignment.objects
            .filter(
                pull_request__status=PullRequest.Status.OPEN,
                user__is_active=False,
                user__membership__team=team,
            )
            .select_related('pull_request')
            .order_by('pull_request__created_at', 'pull_request_id', 'position')
        )

        roster = cls.get_roster(team_name)
        for stale in stale_assignments:
            pr = stale.pull_request
            # Набор ревьюверов мог измениться на предыдущих шагах цикла
            assigned_ids = cls.reviewer_ids(pr.id)
            candidate = assignment.find_replacement(
                roster, stale.user_id, assigned_ids, author_id=pr.author_id
            )
            if candidate is None:
                logger.debug("No replacement for %s on PR %s", stale.user_id, pr.id)
                continue

            cls.replace_reviewer(pr.id, stale.user_id, candidate.id)
            result.mark_reassigned(pr.id)

        return result
