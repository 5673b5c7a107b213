from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..errors import ReviewServiceError
from ..serializers import PullRequestShortSerializer, SetIsActiveSerializer, UserQuerySerializer, UserSerializer
from ..services import UserService
from .common import server_error_response, service_error_response, validate


@api_view(['POST'])
def user_set_active(request):
    """POST /users/setIsActive - Установить флаг активности пользователя"""
    try:
        data = validate(SetIsActiveSerializer, request.data)

        user = UserService.set_user_active_status(data['user_id'], data['is_active'])
        serializer = UserSerializer(user)

        return Response({
            'user': serializer.data
        })

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['GET'])
def users_get_review(request):
    """GET /users/getReview - Получить PR'ы, где пользователь назначен ревьювером"""
    try:
        data = validate(UserQuerySerializer, request.query_params)

        assigned_prs = UserService.get_user_review_assignments(data['user_id'])
        serializer = PullRequestShortSerializer(assigned_prs, many=True)

        return Response({
            'user_id': data['user_id'],
            'pull_requests': serializer.data
        })

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()
