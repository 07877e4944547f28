"""WSGI entry point (``gunicorn anvilon.wsgi:app``)."""
from __future__ import annotations

import os

from anvilon import config as app_config
from anvilon.startup import create_app

app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual dev server
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")), debug=not app_config.is_production())
