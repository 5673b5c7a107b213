from rest_framework import serializers

from .models import PullRequest, Team, User


class TeamMemberSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(source='id')
    username = serializers.CharField()
    is_active = serializers.BooleanField()

    class Meta:
        model = User
        fields = ['user_id', 'username', 'is_active']


class TeamSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source='name')
    members = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = ['team_name', 'members']

    @staticmethod
    def get_members(obj):
        return TeamMemberSerializer(obj.roster(), many=True).data


class UserSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(source='id')
    username = serializers.CharField()
    team_name = serializers.CharField(allow_null=True)
    is_active = serializers.BooleanField()

    class Meta:
        model = User
        fields = ['user_id', 'username', 'team_name', 'is_active']


class PullRequestSerializer(serializers.ModelSerializer):
    pull_request_id = serializers.CharField(source='id')
    pull_request_name = serializers.CharField(source='title')
    author_id = serializers.CharField()
    status = serializers.CharField()
    assigned_reviewers = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', format='%Y-%m-%dT%H:%M:%SZ')
    mergedAt = serializers.DateTimeField(source='merged_at', format='%Y-%m-%dT%H:%M:%SZ', allow_null=True)

    class Meta:
        model = PullRequest
        fields = [
            'pull_request_id', 'pull_request_name', 'author_id',
            'status', 'assigned_reviewers', 'createdAt', 'mergedAt'
        ]

    @staticmethod
    def get_assigned_reviewers(obj):
        return obj.reviewer_ids()


class PullRequestShortSerializer(serializers.ModelSerializer):
    pull_request_id = serializers.CharField(source='id')
    pull_request_name = serializers.CharField(source='title')
    author_id = serializers.CharField()
    status = serializers.CharField()

    class Meta:
        model = PullRequest
        fields = ['pull_request_id', 'pull_request_name', 'author_id', 'status']


class MassDeactivationSerializer(serializers.Serializer):
    team_name = serializers.CharField()
    deactivated_users = serializers.IntegerField(source='deactivated_count')
    reassigned_prs = serializers.ListField(source='reassigned_pr_ids', child=serializers.CharField())
    reassigned_count = serializers.IntegerField()


class UserReviewStatsSerializer(serializers.Serializer):
    id = serializers.CharField()
    username = serializers.CharField()
    prs_reviewed = serializers.IntegerField()
    open_prs_reviewed = serializers.IntegerField()
    merged_prs_reviewed = serializers.IntegerField()


class PRStatisticsSerializer(serializers.Serializer):
    total_prs = serializers.IntegerField()
    open_prs = serializers.IntegerField()
    merged_prs = serializers.IntegerField()
    avg_reviewers = serializers.FloatField()


class TeamStatisticsSerializer(serializers.Serializer):
    team_name = serializers.CharField()
    user_count = serializers.IntegerField()
    pr_count = serializers.IntegerField()


class StatsSerializer(serializers.Serializer):
    user_review_stats = UserReviewStatsSerializer(many=True)
    pr_statistics = PRStatisticsSerializer()
    team_statistics = TeamStatisticsSerializer(many=True)


# Входные данные запросов

class TeamMemberInputSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=50)
    username = serializers.CharField(max_length=100)
    is_active = serializers.BooleanField()


class TeamAddSerializer(serializers.Serializer):
    team_name = serializers.CharField(max_length=100)
    members = TeamMemberInputSerializer(many=True, required=False, default=list)


class TeamQuerySerializer(serializers.Serializer):
    team_name = serializers.CharField()


class TeamBulkDeactivateSerializer(serializers.Serializer):
    team_name = serializers.CharField()
    exclude_user_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class SetIsActiveSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    is_active = serializers.BooleanField()


class UserQuerySerializer(serializers.Serializer):
    user_id = serializers.CharField()


class PullRequestCreateSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField(max_length=100)
    pull_request_name = serializers.CharField(max_length=200)
    author_id = serializers.CharField()


class PullRequestMergeSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField()


class PullRequestReassignSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField()
    old_user_id = serializers.CharField()
