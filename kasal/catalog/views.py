import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django.db.models import F
from django.shortcuts import get_object_or_404

from kasal.core.exceptions import DuplicateName
from kasal.core.permissions import public_read
from kasal.core.utils import create_audit_log
from .filters import ItemFilter
from .models import Item, Package, MeasurementRef
from .serializers import ItemSerializer, PackageSerializer, MeasurementRefSerializer

logger = logging.getLogger(__name__)


def _package_queryset():
    return Package.objects.prefetch_related('inclusions', 'color_motifs__assignments__inclusion')


# Item views
@api_view(['GET', 'POST'])
@permission_classes([public_read('manage_inventory')])
def item_list_create(request):
    """List items (name-sorted, filterable) or create an item with its variations"""
    if request.method == 'GET':
        queryset = Item.objects.prefetch_related('variations').order_by('name')
        filterset = ItemFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response({'error': 'Invalid filters.', 'details': filterset.errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ItemSerializer(filterset.qs, many=True).data)

    serializer = ItemSerializer(data=request.data)
    if serializer.is_valid():
        item = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Item',
            object_id=item.id,
            object_name=item.name,
            changes={'variations': item.variations.count(), 'price': str(item.price)}
        )
        logger.info(f"Item created: {item.name} ({item.variations.count()} variation(s))")
        return Response(ItemSerializer(item).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([public_read('manage_inventory')])
def item_detail(request, pk):
    """Retrieve, update or delete an item"""
    item = get_object_or_404(Item.objects.prefetch_related('variations'), pk=pk)

    if request.method == 'GET':
        return Response(ItemSerializer(item).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ItemSerializer(item, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            item = serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Item',
                object_id=item.id,
                object_name=item.name,
                changes={key: str(value) for key, value in request.data.items() if key != 'variations'}
            )
            return Response(ItemSerializer(Item.objects.prefetch_related('variations').get(pk=item.pk)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='delete',
        model_name='Item',
        object_id=item.id,
        object_name=item.name,
    )
    item.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def item_by_name(request):
    """Look up an item by its full name; text after the first comma is ignored"""
    name = request.query_params.get('name', '').split(',')[0].strip()
    if not name:
        return Response({'error': 'name parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
    item = Item.objects.prefetch_related('variations').filter(name__iexact=name).first()
    if not item:
        return Response({'error': f'Item "{name}" not found.'}, status=status.HTTP_404_NOT_FOUND)
    return Response(ItemSerializer(item).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def item_heart(request, pk):
    """Increment an item's heart count"""
    updated = Item.objects.filter(pk=pk).update(heart_count=F('heart_count') + 1)
    if not updated:
        return Response({'error': 'Item not found.'}, status=status.HTTP_404_NOT_FOUND)
    return Response({'id': pk, 'heart_count': Item.objects.values_list('heart_count', flat=True).get(pk=pk)})


# Package views
@api_view(['GET', 'POST'])
@permission_classes([public_read('manage_inventory')])
def package_list_create(request):
    """List packages (price-sorted) or create a package"""
    if request.method == 'GET':
        packages = _package_queryset().order_by('price', 'name')
        return Response(PackageSerializer(packages, many=True).data)

    name = (request.data.get('name') or '').strip()
    if name and Package.objects.filter(name__iexact=name).exists():
        raise DuplicateName(f'A package named "{name}" already exists.')

    serializer = PackageSerializer(data=request.data)
    if serializer.is_valid():
        package = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Package',
            object_id=package.id,
            object_name=package.name,
            changes={'price': str(package.price), 'inclusions': package.inclusions.count()}
        )
        return Response(PackageSerializer(_package_queryset().get(pk=package.pk)).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([public_read('manage_inventory')])
def package_detail(request, pk):
    package = get_object_or_404(_package_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(PackageSerializer(package).data)
    elif request.method in ('PUT', 'PATCH'):
        name = (request.data.get('name') or '').strip()
        if name and Package.objects.filter(name__iexact=name).exclude(pk=pk).exists():
            raise DuplicateName(f'A package named "{name}" already exists.')

        serializer = PackageSerializer(package, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            package = serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Package',
                object_id=package.id,
                object_name=package.name,
                changes={'price': str(package.price)}
            )
            return Response(PackageSerializer(_package_queryset().get(pk=package.pk)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='delete',
        model_name='Package',
        object_id=package.id,
        object_name=package.name,
    )
    package.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def package_check_name(request):
    """Case-insensitive package name availability check"""
    name = request.query_params.get('name', '').strip()
    if not name:
        return Response({'error': 'name parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
    queryset = Package.objects.filter(name__iexact=name)
    exclude_id = request.query_params.get('exclude_id')
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    return Response({'name': name, 'is_taken': queryset.exists()})


# Measurement reference views
@api_view(['GET', 'POST'])
@permission_classes([public_read('manage_inventory')])
def measurement_ref_list_create(request):
    if request.method == 'GET':
        refs = MeasurementRef.objects.all()
        category = request.query_params.get('category')
        if category:
            refs = refs.filter(category__iexact=category)
        return Response(MeasurementRefSerializer(refs, many=True).data)

    serializer = MeasurementRefSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([public_read('manage_inventory')])
def measurement_ref_detail(request, pk):
    ref = get_object_or_404(MeasurementRef, pk=pk)

    if request.method == 'GET':
        return Response(MeasurementRefSerializer(ref).data)
    elif request.method == 'PUT':
        serializer = MeasurementRefSerializer(ref, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    ref.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
