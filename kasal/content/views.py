import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404

from kasal.core.permissions import public_read
from kasal.core.utils import create_audit_log
from .models import HomePageContent, Page
from .serializers import HomePageContentSerializer, PageSerializer

logger = logging.getLogger(__name__)

ContentPermission = public_read('manage_content')


@api_view(['GET', 'PUT'])
@permission_classes([ContentPermission])
def home_content(request):
    """Home page sections; created with defaults on first read"""
    content = HomePageContent.load()
    if request.method == 'GET':
        return Response(HomePageContentSerializer(content).data)

    serializer = HomePageContentSerializer(content, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    create_audit_log(
        request=request,
        action='update',
        model_name='HomePageContent',
        object_id=content.pk,
        changes={'sections': sorted(serializer.validated_data)}
    )
    return Response(serializer.data)


@api_view(['GET', 'POST'])
@permission_classes([ContentPermission])
def page_list_create(request):
    if request.method == 'GET':
        return Response(PageSerializer(Page.objects.all(), many=True).data)

    serializer = PageSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    page = serializer.save()
    create_audit_log(
        request=request,
        action='create',
        model_name='Page',
        object_id=page.id,
        object_name=page.title,
        object_reference=page.slug,
    )
    return Response(PageSerializer(page).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([ContentPermission])
def page_detail(request, slug):
    page = get_object_or_404(Page, slug=slug)

    if request.method == 'GET':
        return Response(PageSerializer(page).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PageSerializer(page, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='Page',
            object_id=page.id,
            object_name=page.title,
            object_reference=page.slug,
        )
        return Response(serializer.data)

    create_audit_log(
        request=request,
        action='delete',
        model_name='Page',
        object_id=page.id,
        object_name=page.title,
        object_reference=page.slug,
    )
    page.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
