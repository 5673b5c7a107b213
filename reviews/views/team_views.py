from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..errors import ReviewServiceError
from ..serializers import (
    MassDeactivationSerializer,
    TeamAddSerializer,
    TeamBulkDeactivateSerializer,
    TeamQuerySerializer,
    TeamSerializer,
)
from ..services import TeamService
from .common import server_error_response, service_error_response, validate


@api_view(['POST'])
def team_add(request):
    """POST /team/add - Создать команду с участниками"""
    try:
        data = validate(TeamAddSerializer, request.data)

        team = TeamService.create_team_with_members(data['team_name'], data['members'])
        serializer = TeamSerializer(team)

        return Response({
            'team': serializer.data
        }, status=status.HTTP_201_CREATED)

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['GET'])
def team_get(request):
    """GET /team/get - Получить команду с участниками"""
    try:
        data = validate(TeamQuerySerializer, request.query_params)

        team = TeamService.get_team_with_members(data['team_name'])
        serializer = TeamSerializer(team)

        return Response(serializer.data)

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['POST'])
def team_bulk_deactivate(request):
    """POST /team/bulkDeactivate - Деактивировать участников команды и переназначить их PR"""
    try:
        data = validate(TeamBulkDeactivateSerializer, request.data)

        result = TeamService.bulk_deactivate_team_members(data['team_name'], data['exclude_user_ids'])
        serializer = MassDeactivationSerializer(result)

        return Response(serializer.data)

    except ReviewServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response()
