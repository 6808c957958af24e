#!/usr/bin/env python3
"""Launch the ExcelMind Streamlit app."""

import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from streamlit.web import cli as stcli

from backend import config

if __name__ == "__main__":
    app_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "frontend", "app.py")

    print("=" * 60)
    print("Starting ExcelMind")
    print("=" * 60)
    print(f"App: {app_path}")
    print(f"Log level: {config.LOG_LEVEL}")
    print(f"Accepted file types: {', '.join(sorted(config.ALLOWED_FILE_TYPES))}")
    print("=" * 60)
    print("Press Ctrl+C to stop")
    print()

    sys.argv = ["streamlit", "run", app_path]
    sys.exit(stcli.main())
