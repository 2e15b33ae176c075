"""
WSGI config for parkngo_backend project.

Run with: gunicorn --bind 0.0.0.0:8000 parkngo_backend.wsgi:application
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'parkngo_backend.settings')

application = get_wsgi_application()
