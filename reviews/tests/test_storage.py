from django.test import TestCase
from django.utils import timezone

from reviews.errors import NotFound, PRExists, TeamExists
from reviews.models import PullRequest, Team, TeamMembership, User
from reviews.storage import ReviewStore


def member(user_id, is_active=True, username=None):
    return {"user_id": user_id, "username": username or user_id.upper(), "is_active": is_active}


class TeamStorageTest(TestCase):
    def test_create_team_atomic_creates_members_in_order(self):
        ReviewStore.create_team_atomic("backend", [member("u3"), member("u1"), member("u2", False)])

        roster = ReviewStore.get_roster("backend")

        self.assertEqual([u.id for u in roster], ["u3", "u1", "u2"])
        self.assertFalse(roster[2].is_active)

    def test_create_team_atomic_duplicate(self):
        ReviewStore.create_team_atomic("backend", [member("u1")])

        with self.assertRaises(TeamExists):
            ReviewStore.create_team_atomic("backend", [member("u9")])

        self.assertFalse(User.objects.filter(id="u9").exists())

    def test_create_team_upserts_existing_user(self):
        User.objects.create(id="u1", username="Old", is_active=False)

        ReviewStore.create_team_atomic("backend", [member("u1", True, "New")])

        user = User.objects.get(id="u1")
        self.assertEqual(user.username, "New")
        self.assertTrue(user.is_active)
        self.assertEqual(user.team_name, "backend")

    def test_membership_is_not_moved(self):
        """Пользователь, уже состоящий в команде, остается в ней"""
        ReviewStore.create_team_atomic("backend", [member("u1")])
        ReviewStore.create_team_atomic("frontend", [member("u1", False, "Renamed"), member("u2")])

        self.assertEqual(ReviewStore.find_team_of_user("u1"), "backend")
        self.assertEqual([u.id for u in ReviewStore.get_roster("frontend")], ["u2"])
        self.assertEqual(User.objects.get(id="u1").username, "Renamed")

    def test_find_team_of_unaffiliated_user(self):
        User.objects.create(id="loner", username="Loner")

        with self.assertRaises(NotFound):
            ReviewStore.find_team_of_user("loner")

    def test_find_active_candidates_is_stable(self):
        ReviewStore.create_team_atomic(
            "backend", [member("u4"), member("u2", False), member("u1"), member("u3")]
        )

        first = ReviewStore.find_active_candidates("backend", exclude_ids=["u1"])
        second = ReviewStore.find_active_candidates("backend", exclude_ids=["u1"])

        self.assertEqual([u.id for u in first], ["u4", "u3"])
        self.assertEqual([u.id for u in first], [u.id for u in second])

    def test_get_team_not_found(self):
        with self.assertRaises(NotFound):
            ReviewStore.get_team("missing")

    def test_set_user_active_not_found(self):
        with self.assertRaises(NotFound):
            ReviewStore.set_user_active("missing", True)


class PullRequestStorageTest(TestCase):
    def setUp(self):
        ReviewStore.create_team_atomic("backend", [member("u1"), member("u2"), member("u3"), member("u4")])

    def test_create_pr_atomic_keeps_reviewer_order(self):
        pr = ReviewStore.create_pr_atomic("pr-1", "Title", "u1", ["u3", "u2"])

        self.assertEqual(pr.status, PullRequest.Status.OPEN)
        self.assertIsNotNone(pr.created_at)
        self.assertEqual(ReviewStore.reviewer_ids("pr-1"), ["u3", "u2"])

    def test_create_pr_atomic_duplicate(self):
        ReviewStore.create_pr_atomic("pr-1", "Title", "u1", ["u2"])

        with self.assertRaises(PRExists):
            ReviewStore.create_pr_atomic("pr-1", "Other", "u2", ["u3"])

        pr = PullRequest.objects.get(id="pr-1")
        self.assertEqual(pr.title, "Title")
        self.assertEqual(pr.reviewer_ids(), ["u2"])

    def test_set_status_is_idempotent(self):
        ReviewStore.create_pr_atomic("pr-1", "Title", "u1", [])
        first_time = timezone.now()

        pr = ReviewStore.set_status("pr-1", PullRequest.Status.MERGED, first_time)
        again = ReviewStore.set_status("pr-1", PullRequest.Status.MERGED, timezone.now())

        self.assertEqual(pr.merged_at, first_time)
        self.assertEqual(again.merged_at, first_time)

    def test_set_status_not_found(self):
        with self.assertRaises(NotFound):
            ReviewStore.set_status("missing", PullRequest.Status.MERGED, timezone.now())

    def test_replace_reviewer_in_place(self):
        ReviewStore.create_pr_atomic("pr-1", "Title", "u1", ["u2", "u3"])

        ReviewStore.replace_reviewer("pr-1", "u2", "u4")

        self.assertEqual(ReviewStore.reviewer_ids("pr-1"), ["u4", "u3"])

    def test_list_assigned_pull_requests(self):
        ReviewStore.create_pr_atomic("pr-1", "One", "u1", ["u2"])
        ReviewStore.create_pr_atomic("pr-2", "Two", "u3", ["u2", "u4"])
        ReviewStore.create_pr_atomic("pr-3", "Three", "u1", ["u4"])

        prs = ReviewStore.list_assigned_pull_requests("u2")

        self.assertEqual([pr.id for pr in prs], ["pr-1", "pr-2"])


class BulkDeactivateStorageTest(TestCase):
    def setUp(self):
        ReviewStore.create_team_atomic(
            "backend", [member("u1"), member("u2"), member("u3"), member("u4"), member("u5")]
        )

    def test_deactivates_everyone_but_excluded(self):
        result = ReviewStore.bulk_deactivate_and_reassign("backend", ["u1", "u5"])

        active = set(User.objects.filter(is_active=True).values_list("id", flat=True))
        self.assertEqual(active, {"u1", "u5"})
        self.assertEqual(result.deactivated_count, 3)

    def test_reassigns_open_prs_to_remaining_members(self):
        ReviewStore.create_pr_atomic("pr-1", "One", "u1", ["u2", "u3"])

        result = ReviewStore.bulk_deactivate_and_reassign("backend", ["u1", "u4", "u5"])

        self.assertEqual(ReviewStore.reviewer_ids("pr-1"), ["u4", "u5"])
        self.assertEqual(result.reassigned_pr_ids, ["pr-1"])

    def test_pr_without_candidate_keeps_inactive_reviewer(self):
        ReviewStore.create_pr_atomic("pr-1", "One", "u1", ["u2", "u3"])

        result = ReviewStore.bulk_deactivate_and_reassign("backend", ["u1"])

        self.assertEqual(ReviewStore.reviewer_ids("pr-1"), ["u2", "u3"])
        self.assertEqual(result.reassigned_pr_ids, [])

    def test_merged_prs_untouched(self):
        ReviewStore.create_pr_atomic("pr-1", "One", "u1", ["u2"])
        ReviewStore.set_status("pr-1", PullRequest.Status.MERGED, timezone.now())

        result = ReviewStore.bulk_deactivate_and_reassign("backend", ["u1", "u4"])

        self.assertEqual(ReviewStore.reviewer_ids("pr-1"), ["u2"])
        self.assertEqual(result.reassigned_count, 0)

    def test_reviewers_from_other_teams_untouched(self):
        ReviewStore.create_team_atomic("frontend", [member("f1"), member("f2", False), member("f3")])
        ReviewStore.create_pr_atomic("pr-f", "Front", "f1", ["f2"])

        result = ReviewStore.bulk_deactivate_and_reassign("backend", [])

        self.assertEqual(ReviewStore.reviewer_ids("pr-f"), ["f2"])
        self.assertNotIn("pr-f", result.reassigned_pr_ids)

    def test_unknown_team(self):
        with self.assertRaises(NotFound):
            ReviewStore.bulk_deactivate_and_reassign("missing", [])

        self.assertFalse(Team.objects.filter(name="missing").exists())
        self.assertEqual(TeamMembership.objects.count(), 5)
