"""Gunicorn config for the analytics API."""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Uvicorn async worker. Exactly one: the loaded export lives in this
# process's memory, so a second worker would hold a different dataset.
worker_class = "uvicorn.workers.UvicornWorker"
workers = 1

# Large exports are parsed synchronously inside the upload request
timeout = 120

graceful_timeout = 30
keepalive = 65

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
