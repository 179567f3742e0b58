#!/usr/bin/env python3
"""
Web Server Launcher for the RoboStorm comparison service.

Starts the FastAPI web server with uvicorn.
"""
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))


def main():
    """Launch the web server."""
    try:
        import uvicorn
        from config import settings

        logging.basicConfig(
            level=settings.LOG_LEVEL,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        # Handlers created by basicConfig need the redaction filter too
        from security.sanitization import install_log_sanitization
        install_log_sanitization()

        from ui.web.server import app

        print("=" * 80)
        print("ROBOSTORM COMPARISON SERVICE")
        print("=" * 80)
        print(f"\nStore backend: {settings.STORE_BACKEND}")
        print(f"Server will be available at: http://{settings.DEFAULT_HOST}:{settings.DEFAULT_PORT}")
        print("\nPress Ctrl+C to stop the server")
        print("=" * 80 + "\n")

        try:
            uvicorn.run(app, host=settings.DEFAULT_HOST, port=settings.DEFAULT_PORT, log_level="info")
        finally:
            app.state.store.close()

    except KeyboardInterrupt:
        print("\n\nServer stopped")
    except ImportError as e:
        print(f"\nError: Missing dependency - {e}")
        print("\nPlease install required packages:")
        print("  pip install -e .")
        sys.exit(1)


if __name__ == "__main__":
    main()
