"""
main.py: Server launcher and entry point.

Run this file to start the reservation API:

    python main.py

Then, in a second terminal, the operator/customer dashboard:

    streamlit run dashboard/app.py

This file does NOT contain application logic. See app.py for the FastAPI
application, engine wiring, and startup/shutdown sequence.

Direct uvicorn usage:
    uvicorn app:app --workers 1
"""

from __future__ import annotations

import uvicorn


HOST = "127.0.0.1"
PORT = 8000


def main() -> None:
    """Start the reservation API server."""
    print("=" * 60)
    print("  Travel Reservation System")
    print("=" * 60)
    print(f"  Server  : http://{HOST}:{PORT}")
    print(f"  API docs: http://{HOST}:{PORT}/docs")
    print("  Dashboard: streamlit run dashboard/app.py")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    # Single process: the engine lock does not span processes.
    uvicorn.run(
        "app:app",
        host=HOST,
        port=PORT,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
