from django.db import models
from django.utils import timezone


class Team(models.Model):
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def roster(self):
        """Участники команды в порядке вступления"""
        return User.objects.filter(membership__team=self).order_by('membership__id')

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'teams'


class User(models.Model):
    id = models.CharField(max_length=50, primary_key=True)
    username = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def team_name(self):
        try:
            return self.membership.team.name
        except TeamMembership.DoesNotExist:
            return None

    def __str__(self):
        return f"{self.username} ({self.id})"

    class Meta:
        db_table = 'users'


class TeamMembership(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='memberships')
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='membership')
    joined_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user_id} in {self.team}"

    class Meta:
        db_table = 'team_members'
        ordering = ['id']


class PullRequest(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        MERGED = 'MERGED', 'Merged'

    id = models.CharField(max_length=100, primary_key=True)
    title = models.CharField(max_length=200)
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name='authored_prs')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    reviewers = models.ManyToManyField(
        User,
        through='ReviewerAssignment',
        related_name='assigned_prs',
        blank=True,
    )
    created_at = models.DateTimeField(default=timezone.now)
    merged_at = models.DateTimeField(null=True, blank=True)

    def clean(self):
        if self.status == self.Status.MERGED and not self.merged_at:
            self.merged_at = timezone.now()

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def reviewer_ids(self):
        return list(self.assignments.order_by('position').values_list('user_id', flat=True))

    def __str__(self):
        return f"{self.title} ({self.id})"

    class Meta:
        db_table = 'pull_requests'


class ReviewerAssignment(models.Model):
    pull_request = models.ForeignKey(PullRequest, on_delete=models.CASCADE, related_name='assignments')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='review_assignments')
    position = models.PositiveSmallIntegerField()

    def __str__(self):
        return f"{self.user_id} reviews {self.pull_request_id}"

    class Meta:
        db_table = 'pr_reviewers'
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(fields=['pull_request', 'user'], name='unique_reviewer_per_pr'),
            models.UniqueConstraint(fields=['pull_request', 'position'], name='unique_reviewer_position'),
        ]
