import logging

from django.conf import settings
from django.db import models, transaction
from django.db.models import Count
from django.utils import timezone

from . import assignment
from .errors import NotFound, PRExists
from .models import PullRequest, ReviewerAssignment, Team, User
from .storage import ReviewStore

logger = logging.getLogger(__name__)


class TeamService:
    """
    Сервис для управления командами и пользователями
    """

    @classmethod
    @transaction.atomic
    def create_team_with_members(cls, team_name: str, members_data: list) -> Team:
        """
        Создает команду с пользователями. Пользователи создаются или обновляются
        """
        team = ReviewStore.create_team_atomic(team_name, members_data)
        logger.info("Team %s created with %d members", team_name, len(members_data))
        return team

    @classmethod
    def get_team_with_members(cls, team_name: str) -> Team:
        return ReviewStore.get_team(team_name)

    @classmethod
    @transaction.atomic
    def bulk_deactivate_team_members(cls, team_name: str, exclude_user_ids: list = None):
        """
        Массовая деактивация пользователей команды с переназначением открытых PR.
        PR, для которых замены нет, остаются с неактивным ревьювером
        """
        result = ReviewStore.bulk_deactivate_and_reassign(team_name, exclude_user_ids or [])
        logger.info(
            "Team %s: deactivated %d users, reassigned %d PRs",
            team_name, result.deactivated_count, result.reassigned_count,
        )
        return result


class UserService:
    """
    Сервис для управления пользователями
    """

    @classmethod
    @transaction.atomic
    def set_user_active_status(cls, user_id: str, is_active: bool) -> User:
        user = ReviewStore.set_user_active(user_id, is_active)
        logger.info("User %s is_active=%s", user_id, is_active)
        return user

    @classmethod
    def get_user_review_assignments(cls, user_id: str) -> list:
        ReviewStore.get_user(user_id)
        return ReviewStore.list_assigned_pull_requests(user_id)


class PullRequestService:
    """
    Сервис для управления Pull Request'ами
    """

    @classmethod
    def reviewers_limit(cls) -> int:
        limit = getattr(settings, 'PR_REVIEWERS_LIMIT', assignment.MAX_REVIEWERS)
        return max(0, min(limit, assignment.MAX_REVIEWERS))

    @classmethod
    @transaction.atomic
    def create_pull_request(cls, pr_id: str, title: str, author_id: str) -> PullRequest:
        if ReviewStore.pull_request_exists(pr_id):
            raise PRExists()

        author = ReviewStore.get_user(author_id, for_update=True)

        try:
            team_name = ReviewStore.find_team_of_user(author.id)
        except NotFound:
            candidates = None
        else:
            candidates = ReviewStore.find_active_candidates(team_name, exclude_ids=[author.id])

        reviewers = assignment.assign_reviewers_on_create(author.id, candidates, limit=cls.reviewers_limit())
        reviewer_ids = [reviewer.id for reviewer in reviewers]

        pr = ReviewStore.create_pr_atomic(pr_id, title, author.id, reviewer_ids)
        logger.info("PR %s created by %s, reviewers: %s", pr_id, author.id, reviewer_ids)
        return pr

    @classmethod
    @transaction.atomic
    def merge_pull_request(cls, pr_id: str) -> PullRequest:
        pr = ReviewStore.set_status(pr_id, PullRequest.Status.MERGED, timezone.now())
        logger.info("PR %s merged at %s", pr_id, pr.merged_at)
        return pr

    @classmethod
    @transaction.atomic
    def reassign_reviewer(cls, pr_id: str, old_user_id: str) -> tuple:
        pr = ReviewStore.get_pull_request(pr_id, for_update=True)
        assigned_ids = ReviewStore.reviewer_ids(pr_id) if pr is not None else []

        try:
            team_name = ReviewStore.find_team_of_user(old_user_id)
        except NotFound:
            # Ревьювер без команды: заменить некем
            roster = []
        else:
            roster = ReviewStore.find_active_candidates(team_name, exclude_ids=[old_user_id, *assigned_ids])

        new_reviewer = assignment.reassign_reviewer(pr, old_user_id, roster, assigned_ids)

        ReviewStore.replace_reviewer(pr_id, old_user_id, new_reviewer.id)
        logger.info(
            "PR %s: reviewer %s replaced by %s, reviewers: %s",
            pr_id, old_user_id, new_reviewer.id,
            assignment.replace_in_sequence(assigned_ids, old_user_id, new_reviewer.id),
        )
        return pr, new_reviewer


class StatsService:
    """
    Сервис для сбора статистики
    """

    @classmethod
    def get_review_stats(cls):
        """
        Returns:
            dict: Статистика по пользователям, PR и командам
        """
        user_review_stats = (
            User.objects
            .annotate(
                prs_reviewed=Count('review_assignments'),
                open_prs_reviewed=Count(
                    'review_assignments',
                    filter=models.Q(review_assignments__pull_request__status=PullRequest.Status.OPEN),
                ),
                merged_prs_reviewed=Count(
                    'review_assignments',
                    filter=models.Q(review_assignments__pull_request__status=PullRequest.Status.MERGED),
                ),
            )
            .values('id', 'username', 'prs_reviewed', 'open_prs_reviewed', 'merged_prs_reviewed')
            .order_by('-prs_reviewed', 'id')
        )

        total_prs = PullRequest.objects.count()
        total_assignments = ReviewerAssignment.objects.count()
        pr_statistics = {
            'total_prs': total_prs,
            'open_prs': PullRequest.objects.filter(status=PullRequest.Status.OPEN).count(),
            'merged_prs': PullRequest.objects.filter(status=PullRequest.Status.MERGED).count(),
            'avg_reviewers': round(total_assignments / total_prs, 2) if total_prs else 0.0,
        }

        team_statistics = (
            Team.objects
            .annotate(
                team_name=models.F('name'),
                user_count=Count('memberships', distinct=True),
                pr_count=Count('memberships__user__authored_prs', distinct=True),
            )
            .values('team_name', 'user_count', 'pr_count')
            .order_by('name')
        )

        return {
            'user_review_stats': list(user_review_stats),
            'pr_statistics': pr_statistics,
            'team_statistics': list(team_statistics),
        }
