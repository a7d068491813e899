from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.gateway.exceptions import PersistenceError
from apps.orders.exceptions import InvalidQuantityError
from .analytics import AnalyticsQueries
from .serializers import (
    # Input serializers
    BucketQuerySerializer,
    TodayQuerySerializer,
    AuditQuerySerializer,
    # Response serializers
    ChartResponseSerializer,
    TodaySummarySerializer,
    AuditResponseSerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError


PERSISTENCE_ERROR_MESSAGE = 'The store is temporarily unavailable, please retry.'


@extend_schema(
    parameters=[
        OpenApiParameter('period', OpenApiTypes.STR, description="'day', 'week', 'month', 'trimester' or 'year'", default='week'),
        OpenApiParameter('date', OpenApiTypes.DATE, description='Reference date (YYYY-MM-DD), defaults to today'),
        OpenApiParameter('include_active', OpenApiTypes.BOOL, description='Count undelivered orders as revenue'),
    ],
    responses={
        200: ChartResponseSerializer,
        400: ErrorSerializer,
    },
    description="Revenue, expense, profit and cancelled series bucketed over a period, with category shares.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def chart(request):
    """Bucketed chart series - thin HTTP handler."""
    query_serializer = BucketQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.chart(
            period=params['period'],
            reference_date=params.get('date'),
            include_active=params['include_active'],
        )
    except (AnalyticsServiceError, InvalidQuantityError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except PersistenceError:
        return Response(
            {'error': PERSISTENCE_ERROR_MESSAGE},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return Response(ChartResponseSerializer(data).data)


@extend_schema(
    parameters=[
        OpenApiParameter('date', OpenApiTypes.DATE, description='Day to summarize, defaults to today'),
    ],
    responses={200: TodaySummarySerializer},
    description="Delivered and cancelled orders, expenses and net profit for one day.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def today(request):
    """Daily summary - thin HTTP handler."""
    query_serializer = TodayQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    try:
        data = AnalyticsQueries.today(query_serializer.validated_data.get('date'))
    except PersistenceError:
        return Response(
            {'error': PERSISTENCE_ERROR_MESSAGE},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return Response(TodaySummarySerializer(data).data)


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)', required=True),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)', required=True),
    ],
    responses={
        200: AuditResponseSerializer,
        400: ErrorSerializer,
    },
    description="Delivered and cancelled orders and costs in a date range with their totals.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit(request):
    """Audit listing - thin HTTP handler."""
    query_serializer = AuditQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.audit(params['start_date'], params['end_date'])
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except PersistenceError:
        return Response(
            {'error': PERSISTENCE_ERROR_MESSAGE},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return Response(AuditResponseSerializer(data).data)
