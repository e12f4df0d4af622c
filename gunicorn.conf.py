import os

bind = f"0.0.0.0:{os.getenv('PORT', '5000')}"

# Socket.IO pushes the view_stale notifications, which needs an async worker.
worker_class = "eventlet"

# A single worker keeps every browser on the same Socket.IO server; the
# timeout is disabled because those connections stay open.
workers = 1
timeout = 0
