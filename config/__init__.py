"""Redis and Celery configuration."""
