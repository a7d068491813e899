from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import Service
from .serializers import ServiceSerializer, ServiceWriteSerializer

from apps.catalog.services import (
    create_service,
    update_service,
    delete_service,
    get_service,
    list_services,
    # Exceptions
    ServiceNotFoundError,
    CatalogValidationError,
)
from apps.gateway.exceptions import PersistenceError


PERSISTENCE_ERROR_MESSAGE = 'The store is temporarily unavailable, please retry.'


class ServiceViewSet(viewsets.ViewSet):
    """
    Catalog of priced services.

    list: All services ordered by name
    create: Add a service (multipart when an image is attached)
    retrieve: Get a single service
    partial_update: Change name, price, mode or image
    destroy: Remove a service; existing orders keep their snapshot
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: ServiceSerializer(many=True)}, tags=['catalog'])
    def list(self, request):
        serializer = ServiceSerializer(list_services(), many=True)
        return Response(serializer.data)

    @extend_schema(
        request=ServiceWriteSerializer,
        responses={201: ServiceSerializer},
        tags=['catalog'],
    )
    def create(self, request):
        serializer = ServiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            service = create_service(
                name=serializer.validated_data['name'],
                price=serializer.validated_data['price'],
                pricing_mode=serializer.validated_data['pricing_mode'],
                image=serializer.validated_data.get('image'),
            )
        except CatalogValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        return Response(ServiceSerializer(service).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ServiceSerializer}, tags=['catalog'])
    def retrieve(self, request, pk=None):
        try:
            service = get_service(service_id=pk)
        except ServiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ServiceSerializer(service).data)

    @extend_schema(
        request=ServiceWriteSerializer(partial=True),
        responses={200: ServiceSerializer},
        tags=['catalog'],
    )
    def partial_update(self, request, pk=None):
        serializer = ServiceWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            service = update_service(
                service_id=pk,
                name=data.get('name'),
                price=data.get('price'),
                pricing_mode=data.get('pricing_mode'),
                image=data.get('image'),
            )
        except ServiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except CatalogValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        return Response(ServiceSerializer(service).data)

    @extend_schema(responses={204: None}, tags=['catalog'])
    def destroy(self, request, pk=None):
        try:
            delete_service(service_id=pk)
        except ServiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PersistenceError:
            return Response(
                {'error': PERSISTENCE_ERROR_MESSAGE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
