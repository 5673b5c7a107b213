from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from reviews.models import PullRequest, ReviewerAssignment, Team, TeamMembership, User


class TeamModelTest(TestCase):
    def test_create_team(self):
        """Тест создания команды"""
        team = Team.objects.create(name="backend")
        self.assertEqual(team.name, "backend")
        self.assertEqual(str(team), "backend")

    def test_team_unique_name(self):
        """Тест уникальности имени команды"""
        Team.objects.create(name="backend")
        with self.assertRaises(IntegrityError):
            Team.objects.create(name="backend")

    def test_roster_in_join_order(self):
        """Ростер упорядочен по порядку вступления, а не по id пользователя"""
        team = Team.objects.create(name="backend")
        for user_id in ["zed", "amy", "kim"]:
            user = User.objects.create(id=user_id, username=user_id.title())
            TeamMembership.objects.create(team=team, user=user)

        self.assertEqual([u.id for u in team.roster()], ["zed", "amy", "kim"])


class UserModelTest(TestCase):
    def setUp(self):
        self.team = Team.objects.create(name="backend")
        self.user = User.objects.create(id="user1", username="John Doe", is_active=True)

    def test_create_user(self):
        """Тест создания пользователя"""
        self.assertEqual(self.user.id, "user1")
        self.assertEqual(self.user.username, "John Doe")
        self.assertTrue(self.user.is_active)
        self.assertEqual(str(self.user), "John Doe (user1)")

    def test_team_name_without_team(self):
        self.assertIsNone(self.user.team_name)

    def test_team_name_with_team(self):
        TeamMembership.objects.create(team=self.team, user=self.user)
        user = User.objects.get(id="user1")
        self.assertEqual(user.team_name, "backend")

    def test_user_belongs_to_one_team(self):
        """Пользователь состоит максимум в одной команде"""
        other = Team.objects.create(name="frontend")
        TeamMembership.objects.create(team=self.team, user=self.user)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                TeamMembership.objects.create(team=other, user=self.user)


class PullRequestModelTest(TestCase):
    def setUp(self):
        self.team = Team.objects.create(name="backend")
        self.author = User.objects.create(id="author1", username="Author")
        self.reviewer1 = User.objects.create(id="reviewer1", username="Reviewer 1")
        self.reviewer2 = User.objects.create(id="reviewer2", username="Reviewer 2")

    def test_create_pull_request(self):
        """Тест создания PR"""
        pr = PullRequest.objects.create(id="pr-1", title="Test PR", author=self.author)
        ReviewerAssignment.objects.create(pull_request=pr, user=self.reviewer2, position=0)
        ReviewerAssignment.objects.create(pull_request=pr, user=self.reviewer1, position=1)

        self.assertEqual(pr.status, PullRequest.Status.OPEN)
        self.assertIsNone(pr.merged_at)
        self.assertEqual(pr.reviewers.count(), 2)
        self.assertEqual(pr.reviewer_ids(), ["reviewer2", "reviewer1"])
        self.assertEqual(str(pr), "Test PR (pr-1)")

    def test_pr_merge_sets_merged_at(self):
        """Тест мержа PR: merged_at проставляется при сохранении"""
        pr = PullRequest.objects.create(id="pr-1", title="Test PR", author=self.author)

        pr.status = PullRequest.Status.MERGED
        pr.save()

        self.assertIsNotNone(pr.merged_at)
        self.assertTrue(pr.merged_at <= timezone.now())

    def test_reviewer_assigned_once(self):
        pr = PullRequest.objects.create(id="pr-1", title="Test PR", author=self.author)
        ReviewerAssignment.objects.create(pull_request=pr, user=self.reviewer1, position=0)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                ReviewerAssignment.objects.create(pull_request=pr, user=self.reviewer1, position=1)
