"""Gunicorn configuration file for the restaurant rating application."""

import os

# Server socket
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:5000")
wsgi_app = "wsgi:app"

# Worker processes
workers = int(os.environ.get("GUNICORN_WORKERS", 2))
worker_class = "sync"
max_requests = 1000  # Restart workers after this many requests
max_requests_jitter = 100
timeout = 60  # Uploads are small; keep requests short

# Security
limit_request_line = 4094
limit_request_fields = 100

# Logging
accesslog = "logs/access.log"
errorlog = "logs/error.log"
loglevel = "info"

# Process naming
proc_name = "rate_restaurant"

# Server mechanics
preload_app = True  # Load the app (and create tables) once before forking
pidfile = "/tmp/rate_restaurant.pid"
