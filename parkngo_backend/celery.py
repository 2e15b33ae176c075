# ==================== PARKNGO_BACKEND/CELERY.PY ====================
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'parkngo_backend.settings')

app = Celery('parkngo_backend')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
