"""
Production Server Configuration

Run the catalog API with Uvicorn workers under Gunicorn.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 10000
max_requests_jitter = 1000
timeout = 120
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "pricewatch-api"

# Server mechanics
daemon = False
pidfile = "/tmp/pricewatch.pid"

# Logging (structlog renders application records; gunicorn handles its own)
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")
accesslog = None
