"""
Background workers (Celery).

Start a worker with:
    celery -A app.workers.celery_app worker --loglevel=info
"""
