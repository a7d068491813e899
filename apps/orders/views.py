from django.conf import settings
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .pricing import format_amount
from .serializers import (
    OrderSerializer,
    OrderCreateSerializer,
    OrderFilterSerializer,
    ArchiveFilterSerializer,
    CancelInputSerializer,
    QuoteInputSerializer,
    QuoteSerializer,
)

from apps.orders.services import (
    create_order,
    price_line_items,
    get_order,
    advance_order,
    cancel_order,
    list_active_orders,
    list_archived_orders,
    purge_order,
    # Exceptions
    OrderNotFoundError,
    OrderValidationError,
    UnknownServiceError,
    InvalidQuantityError,
    OrderClosedError,
    OrderNotClosedError,
    StaleOrderError,
)
from apps.gateway.exceptions import PersistenceError


PERSISTENCE_ERROR_MESSAGE = 'The store is temporarily unavailable, please retry.'


def _invalid_quantity_response(error: InvalidQuantityError) -> Response:
    return Response(
        {
            'error': str(error),
            'line_item': error.index,
            'field': error.field,
        },
        status=status.HTTP_400_BAD_REQUEST
    )


def _line_items(validated_data):
    return [dict(item) for item in validated_data['line_items']]


class OrderViewSet(viewsets.ViewSet):
    """
    Order entry and status workflow.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Active orders, oldest first (?status=New|Waiting|Ready)
    create: Enter a new order
    retrieve: Get an order from any partition
    destroy: Permanently delete an archived order
    advance: Move an active order to its next status
    cancel: Move an active order to Deleted (requires confirm=true)
    archive: Delivered and deleted orders
    quote: Price line items without saving
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter('status', str, description='New, Waiting or Ready')],
        responses={200: OrderSerializer(many=True)},
        tags=['orders'],
    )
    def list(self, request):
        filters = OrderFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        orders = list_active_orders(status=filters.validated_data.get('status'))
        return Response(OrderSerializer(orders, many=True).data)

    @extend_schema(
        request=OrderCreateSerializer,
        responses={201: OrderSerializer},
        tags=['orders'],
    )
    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = create_order(
                customer_name=data['customer_name'],
                customer_phone=data['customer_phone'],
                location_ref=data.get('location_ref'),
                latitude=data.get('latitude'),
                longitude=data.get('longitude'),
                line_items=_line_items(data),
            )
        except InvalidQuantityError as e:
            return _invalid_quantity_response(e)
        except OrderValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        order = get_order(order_id=order.id)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: OrderSerializer}, tags=['orders'])
    def retrieve(self, request, pk=None):
        try:
            order = get_order(order_id=pk)
        except OrderNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    @extend_schema(responses={204: None}, tags=['orders'])
    def destroy(self, request, pk=None):
        try:
            purge_order(order_id=pk)
        except OrderNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except OrderNotClosedError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: OrderSerializer}, tags=['orders'])
    @action(detail=True, methods=['post'])
    def advance(self, request, pk=None):
        """Move the order to its next status."""
        try:
            order = advance_order(order_id=pk)
        except OrderNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (OrderClosedError, StaleOrderError) as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except InvalidQuantityError as e:
            return _invalid_quantity_response(e)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(OrderSerializer(order).data)

    @extend_schema(request=CancelInputSerializer, responses={200: OrderSerializer}, tags=['orders'])
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel the order after staff confirmation."""
        serializer = CancelInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if not serializer.validated_data['confirm']:
            return Response(
                {'error': 'Cancellation must be confirmed with confirm=true'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            order = cancel_order(order_id=pk)
        except OrderNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (OrderClosedError, StaleOrderError) as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except InvalidQuantityError as e:
            return _invalid_quantity_response(e)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(OrderSerializer(order).data)

    @extend_schema(
        parameters=[OpenApiParameter('partition', str, description='delivered or deleted')],
        responses={200: OrderSerializer(many=True)},
        tags=['orders'],
    )
    @action(detail=False, methods=['get'])
    def archive(self, request):
        """Delivered and deleted orders, most recently closed first."""
        filters = ArchiveFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        orders = list_archived_orders(partition=filters.validated_data.get('partition'))
        return Response(OrderSerializer(orders, many=True).data)

    @extend_schema(request=QuoteInputSerializer, responses={200: QuoteSerializer}, tags=['orders'])
    @action(detail=False, methods=['post'])
    def quote(self, request):
        """Price line items against the current catalog without saving."""
        serializer = QuoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            priced, grand_total = price_line_items(_line_items(serializer.validated_data))
        except InvalidQuantityError as e:
            return _invalid_quantity_response(e)
        except (OrderValidationError, UnknownServiceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        output = QuoteSerializer({
            'line_items': [
                {
                    'service_id': service.id,
                    'service_name': service.name,
                    'pricing_mode': service.pricing_mode,
                    'total': total,
                }
                for _item, service, total in priced
            ],
            'total': grand_total,
            'display_total': format_amount(grand_total),
            'currency': settings.STORE_CURRENCY,
        })
        return Response(output.data)
