"""
Border Crop — Entry Point
Starts the FastAPI server and opens the browser on the API docs.
"""

import threading
import time
import webbrowser

import uvicorn

HOST = "127.0.0.1"
PORT = 8000


def open_browser():
    """Open browser after a short delay to let the server start."""
    time.sleep(1.5)
    webbrowser.open(f"http://{HOST}:{PORT}/docs")


def main():
    print(f"[Border Crop] Starting server at http://{HOST}:{PORT}")
    print(f"[Border Crop] Opening browser...")

    # Open browser in background thread
    threading.Thread(target=open_browser, daemon=True).start()

    uvicorn.run("bordercrop.server:app", host=HOST, port=PORT, reload=False)


if __name__ == "__main__":
    main()
