#!/usr/bin/env python3
"""
Fungible Token Ledger Entry Point

Starts the FastAPI server with the host, port and storage taken from FT_* settings.
"""

import sys

from fungible_token.api import run_server
from fungible_token.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Fungible Token Ledger...")
    print(f"Storage: {config.storage_backend} ({config.database_path})")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(
            host=config.api_host,
            port=config.api_port,
            debug=False  # Set to True for development
        )
    except KeyboardInterrupt:
        print("\nShutting down Fungible Token Ledger...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
