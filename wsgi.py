"""WSGI entrypoint for Gunicorn.

Usage:
  gunicorn -w 1 -b 0.0.0.0:3000 wsgi:app

Each worker process runs its own draw poller; keep one worker or set
POLLER_ENABLED=false on all but one deployment.
"""

from bolao import create_app, start_poller

app = create_app()
start_poller(app)
