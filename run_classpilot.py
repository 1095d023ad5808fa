#!/usr/bin/env python3
"""
ClassPilot Startup Script
Starts the FastAPI server and the authoring WebSocket server in one process,
sharing a single in-memory module store.
"""

import asyncio
import logging
import socket
import sys
import threading
import time

import config
from services.module_store import InMemoryModuleStore

def check_port(port: int, name: str) -> bool:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    result = sock.connect_ex(('localhost', port))
    sock.close()
    if result == 0:
        print(f"⚠️ Warning: Port {port} ({name}) appears to be in use")
        return False
    return True

def start_fastapi_server(store: InMemoryModuleStore):
    """Run FastAPI in this thread with its own event loop."""
    try:
        import uvicorn
        import app as api

        api.configure_services(store=store)
        print(f"🚀 Starting FastAPI server on http://localhost:{config.API_PORT}")
        uvicorn.run(api.app, host=config.API_HOST, port=config.API_PORT, log_level="warning")
    except Exception as e:
        logging.error(f"FastAPI startup error: {e}")
        raise

def main():
    """Main startup function."""
    logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')

    print("=" * 60)
    print("🎓 ClassPilot - AI-powered course authoring")
    print("=" * 60)

    if not check_port(config.API_PORT, "FastAPI") or not check_port(config.WEBSOCKET_PORT, "WebSocket"):
        print("💡 Stop the running servers, or start one of them on its own:")
        print("   - python websocket_server.py (WebSocket only)")
        print("   - python app.py (FastAPI only)")
        sys.exit(1)

    # Both servers append to the same process-lifetime store
    store = InMemoryModuleStore()

    try:
        fastapi_thread = threading.Thread(target=start_fastapi_server, args=(store,), daemon=True)
        fastapi_thread.start()
        time.sleep(2)

        from websocket_server import start_websocket_server

        print(f"🌐 Starting WebSocket server on ws://localhost:{config.WEBSOCKET_PORT}")
        asyncio.run(start_websocket_server(config.WEBSOCKET_HOST, config.WEBSOCKET_PORT, store=store))
    except KeyboardInterrupt:
        print("\n🛑 Shutting down servers...")

if __name__ == "__main__":
    main()
