"""WSGI entry point for the kasal project"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'kasal.config.settings')

application = get_wsgi_application()
