from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..errors import ReviewServiceError
from ..serializers import (
    PullRequestCreateSerializer,
    PullRequestMergeSerializer,
    PullRequestReassignSerializer,
    PullRequestSerializer,
)
from ..services import PullRequestService
from .common import server_error_response, service_error_response, validate


@api_view(['POST'])
def pullrequest_create(request):
    """POST /pullRequest/create - Создать PR и назначить ревьюверов"""
    try:
        data = validate(PullRequestCreateSerializer, request.data)

        pr = PullRequestService.create_pull_request(
            data['pull_request_id'], data['pull_request_name'], data['author_id']
        )
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        }, status=status.HTTP_201_CREATED)

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['POST'])
def pullrequest_merge(request):
    """POST /pullRequest/merge - Пометить PR как MERGED"""
    try:
        data = validate(PullRequestMergeSerializer, request.data)

        pr = PullRequestService.merge_pull_request(data['pull_request_id'])
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        })

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['POST'])
def pullrequest_reassign(request):
    """POST /pullRequest/reassign - Переназначить ревьювера"""
    try:
        data = validate(PullRequestReassignSerializer, request.data)

        pr, new_reviewer = PullRequestService.reassign_reviewer(data['pull_request_id'], data['old_user_id'])
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data,
            'replaced_by': new_reviewer.id
        })

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()
