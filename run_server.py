#!/usr/bin/env python
"""
Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py

    Or with Gunicorn:
    gunicorn pricewatch.main:app -c gunicorn.conf.py
"""

import argparse
import os
import subprocess
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

APP_PATH = "pricewatch.main:app"


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    import uvicorn

    uvicorn.run(
        APP_PATH,
        host="0.0.0.0",
        port=port,
        reload=True,
        reload_dirs=["pricewatch"],
        log_level="debug",
    )


def run_prod_server(port: int):
    import uvicorn

    uvicorn.run(
        APP_PATH,
        host="0.0.0.0",
        port=port,
        workers=int(os.getenv("WORKERS", 4)),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        access_log=False,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


def run_gunicorn(port: int):
    """Run with Gunicorn (recommended for production)."""
    env = dict(os.environ, BIND=f"0.0.0.0:{port}")
    subprocess.run(["gunicorn", APP_PATH, "-c", "gunicorn.conf.py"], env=env)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Laptop Price Catalog API Server")
    parser.add_argument("--dev", action="store_true", help="Run in development mode with auto-reload")
    parser.add_argument("--gunicorn", action="store_true", help="Run with Gunicorn (production)")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", 8000)))
    args = parser.parse_args()

    if args.dev:
        print("🚀 Starting development server...")
        run_dev_server(args.port)
    elif args.gunicorn:
        print("🚀 Starting production server with Gunicorn...")
        run_gunicorn(args.port)
    else:
        print("🚀 Starting production server with Uvicorn...")
        run_prod_server(args.port)
