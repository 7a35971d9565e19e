"""
Gunicorn configuration for Certify production deployment.

Usage:
    gunicorn certify.main:app -c gunicorn.conf.py
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")

# CPU cores * 2 + 1
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))

# ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds). Must exceed RECONCILE_TIMEOUT_SECONDS so a slow
# reconcile rolls back and answers 408 before the worker is killed.
timeout = 60

keepalive = 5

accesslog = "-"  # stdout
errorlog = "-"  # stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()
