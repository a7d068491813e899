from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    CostSerializer,
    DeviceIdentitySerializer,
    ExpenseCreateSerializer,
    ExpenseFilterSerializer,
    ExpenseUpdateSerializer,
)

from apps.expenses.services import (
    extract_device_key,
    resolve_identity,
    record_expense,
    get_expense,
    update_expense,
    delete_expense,
    list_expenses,
    # Exceptions
    ExpenseNotFoundError,
    ExpenseValidationError,
    ReporterNameRequiredError,
)
from apps.gateway.exceptions import PersistenceError


PERSISTENCE_ERROR_MESSAGE = 'The store is temporarily unavailable, please retry.'
DEVICE_TOKEN_HEADER = 'X-Device-Token'


def _device_token(request, data=None):
    token = request.headers.get(DEVICE_TOKEN_HEADER)
    if not token and data is not None:
        token = data.get('device_token')
    return token


class ExpenseViewSet(viewsets.ViewSet):
    """
    Expense ledger.

    list: Costs in a date range (?start_date=&end_date=)
    create: Record a cost for the calling device
    retrieve: Get a cost
    partial_update: Change name, price, category or date
    destroy: Delete a cost
    identity: Registered name of the calling device
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[ExpenseFilterSerializer],
        responses={200: CostSerializer(many=True)},
        tags=['expenses'],
    )
    def list(self, request):
        filters = ExpenseFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        costs = list_expenses(
            start_date=filters.validated_data.get('start_date'),
            end_date=filters.validated_data.get('end_date'),
        )
        return Response(CostSerializer(costs, many=True).data)

    @extend_schema(
        request=ExpenseCreateSerializer,
        parameters=[OpenApiParameter(DEVICE_TOKEN_HEADER, str, OpenApiParameter.HEADER)],
        responses={201: CostSerializer},
        tags=['expenses'],
    )
    def create(self, request):
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            cost = record_expense(
                name=data['name'],
                price=data['price'],
                device_token=_device_token(request, data),
                reporter_name=data.get('reporter_name'),
                category=data.get('category'),
                date=data.get('date'),
            )
        except ReporterNameRequiredError as e:
            return Response(
                {'error': str(e), 'reporter_name_required': True},
                status=status.HTTP_400_BAD_REQUEST
            )
        except ExpenseValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        return Response(CostSerializer(cost).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: CostSerializer}, tags=['expenses'])
    def retrieve(self, request, pk=None):
        try:
            cost = get_expense(expense_id=pk)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(CostSerializer(cost).data)

    @extend_schema(request=ExpenseUpdateSerializer, responses={200: CostSerializer}, tags=['expenses'])
    def partial_update(self, request, pk=None):
        serializer = ExpenseUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            cost = update_expense(
                expense_id=pk,
                name=data.get('name'),
                price=data.get('price'),
                category=data.get('category'),
                date=data.get('date'),
            )
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ExpenseValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(CostSerializer(cost).data)

    @extend_schema(responses={204: None}, tags=['expenses'])
    def destroy(self, request, pk=None):
        try:
            delete_expense(expense_id=pk)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[OpenApiParameter(DEVICE_TOKEN_HEADER, str, OpenApiParameter.HEADER)],
        responses={200: DeviceIdentitySerializer},
        tags=['expenses'],
    )
    @action(detail=False, methods=['get'])
    def identity(self, request):
        """
        Look up the calling device.

        Fresh devices get ``registered: false`` so the client can ask for a
        name before the first expense.
        """
        token = _device_token(request, request.query_params)

        try:
            identity = resolve_identity(token)
        except ExpenseValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        if identity is None:
            return Response({
                'key': extract_device_key(token),
                'name': None,
                'registered': False,
            })
        return Response(DeviceIdentitySerializer(identity).data)
