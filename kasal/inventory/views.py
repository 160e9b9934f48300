import logging
from collections import Counter

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404

from kasal.core.exceptions import BusinessRuleViolation
from kasal.core.permissions import role_permission
from kasal.core.utils import create_audit_log
from .models import DamagedItem
from .serializers import DamagedItemSerializer, DamagedItemStatusSerializer
from .stock import release_stock

logger = logging.getLogger(__name__)

ManageDamagedItems = role_permission('manage_damaged_items')


@api_view(['GET'])
@permission_classes([ManageDamagedItems])
def damaged_item_list(request):
    """List damaged items, newest first; ?search= matches item name, rental id or variation"""
    queryset = DamagedItem.objects.select_related('custom_item').order_by('-created_at')

    search = request.query_params.get('search', '').strip()
    if search:
        queryset = queryset.filter(
            Q(item_name__icontains=search) |
            Q(rental_reference__icontains=search) |
            Q(variation_label__icontains=search)
        )

    damage_status = request.query_params.get('status')
    if damage_status:
        queryset = queryset.filter(status=damage_status)

    return Response(DamagedItemSerializer(queryset, many=True).data)


@api_view(['GET', 'PUT'])
@permission_classes([ManageDamagedItems])
def damaged_item_detail(request, pk):
    """
    Retrieve a damage report or move it along the repair workflow.

    Marking an inventory item Repaired puts its units back on the shelf.
    Repaired and Disposed reports can no longer change.
    """
    if request.method == 'GET':
        damaged = get_object_or_404(DamagedItem.objects.select_related('custom_item'), pk=pk)
        return Response(DamagedItemSerializer(damaged).data)

    serializer = DamagedItemStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    new_status = serializer.validated_data['status']

    with transaction.atomic():
        damaged = get_object_or_404(DamagedItem.objects.select_for_update(), pk=pk)
        old_status = damaged.status

        if old_status in DamagedItem.TERMINAL_STATUSES and new_status != old_status:
            raise BusinessRuleViolation(f'Cannot change the status of an item that is already "{old_status}".')

        changes = {'status': {'old': old_status, 'new': new_status}}
        if new_status == 'Repaired' and old_status != 'Repaired' and damaged.is_inventory_item:
            if damaged.variation_id is None:
                return Response(
                    {'error': 'The original item variation no longer exists; stock cannot be restored.'},
                    status=status.HTTP_404_NOT_FOUND
                )
            release_stock(Counter({damaged.variation_id: damaged.quantity}))
            changes['stock_restored'] = damaged.quantity
            logger.info(f"Damaged item {damaged.id} repaired: {damaged.quantity} unit(s) of variation {damaged.variation_id} restored")

        damaged.status = new_status
        if 'damage_notes' in serializer.validated_data:
            damaged.damage_notes = serializer.validated_data['damage_notes']
        damaged.save()

        create_audit_log(
            request=request,
            action='repair',
            model_name='DamagedItem',
            object_id=damaged.id,
            object_name=damaged.item_name,
            object_reference=damaged.rental_reference,
            changes=changes
        )

    return Response(DamagedItemSerializer(damaged).data)
