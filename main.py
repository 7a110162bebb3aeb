"""Local development entrypoint.

The draw poller starts with the app; `flask --app main draws poll` runs a
single tick instead.
"""

import os

from bolao import create_app, start_poller

app = create_app()


if __name__ == "__main__":
    start_poller(app)
    app.run(host="127.0.0.1", port=int(os.getenv("PORT", "3000")), debug=False)
