#!/usr/bin/env python3
"""Start Root Explorer under Gunicorn on the configured host and port."""

import os
import sys

if __name__ == "__main__":
    _src = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
    if os.path.isdir(_src) and _src not in sys.path:
        sys.path.insert(0, _src)

from root_explorer.config import load_config


def main() -> None:
    config = load_config()
    bind = f"{config.get('FLASK_HOST', '0.0.0.0')}:{config.get('FLASK_PORT', 3000)}"

    # wsgi.create_application checks this.
    os.environ["ROOT_EXPLORER_SINGLE_WORKER"] = "1"

    argv = [
        sys.executable, "-m", "gunicorn",
        "--bind", bind,
        "-w", "1",
        "--threads", "4",
        "--capture-output",
        "--enable-stdio-inheritance",
        "root_explorer.wsgi:application",
    ]
    # execvp so Gunicorn takes over this PID and receives signals directly.
    os.execvp(sys.executable, argv)


if __name__ == "__main__":
    main()
