# websocket_server.py
# Per-connection authoring sessions for ClassPilot.
# Each client gets its own GenerationSession; saved modules go to one shared store.

import asyncio
import functools
import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Set

import websockets
from websockets.exceptions import ConnectionClosed

import config
from core.lesson_pipeline import GenerationSession
from services.lesson_service import LessonService
from services.module_store import InMemoryModuleStore, ModuleStore

def ts():
    """Timestamp helper for logging"""
    return datetime.now(timezone.utc).isoformat(sep=' ', timespec='milliseconds')

def log(*args):
    """Timestamped console line for connection lifecycle events"""
    print(f"[{ts()}][WebSocket]", *args, flush=True)

class AuthoringWebSocketWrapper:
    """
    WebSocket wrapper that stamps outgoing messages and tracks activity.
    """
    def __init__(self, websocket, client_id: str):
        self.websocket = websocket
        self.client_id = client_id
        self.message_count = 0
        self.last_activity = time.time()

    async def send(self, message: dict):
        message = dict(message, client_id=self.client_id, timestamp=time.time())
        self.message_count += 1
        self.last_activity = time.time()
        await self.websocket.send(json.dumps(message))

    async def recv(self):
        message = await self.websocket.recv()
        self.last_activity = time.time()
        return message

class AuthoringAgent:
    """
    Routes client messages to a GenerationSession and pushes its state back.
    """
    def __init__(self, websocket_wrapper: AuthoringWebSocketWrapper, lesson_service: LessonService,
                 store: ModuleStore, debounce_seconds: float = None):
        self.websocket = websocket_wrapper
        self.client_id = websocket_wrapper.client_id
        self.store = store
        self.session = GenerationSession(
            lesson_service,
            store,
            debounce_seconds=debounce_seconds,
            on_change=self._on_session_change,
        )
        self._push_tasks: Set[asyncio.Task] = set()
        self.handlers = {
            "ping": self.handle_ping,
            "get_state": self.handle_get_state,
            "submit_topic": self.handle_submit_topic,
            "edit_module_name": self.handle_edit_module_name,
            "set_difficulty": self.handle_set_field,
            "set_prerequisites": self.handle_set_field,
            "set_estimated_time": self.handle_set_field,
            "set_description": self.handle_set_field,
            "save_module": self.handle_save_module,
            "list_modules": self.handle_list_modules,
        }
        log(f"Authoring agent initialized for client {self.client_id}")

    async def process_messages(self):
        """
        Main message loop: one JSON message per frame, each with a "type".
        """
        try:
            await self.websocket.send({
                "type": "connection_ready",
                "message": "ClassPilot WebSocket connected successfully",
            })

            while True:
                try:
                    message = await self.websocket.recv()
                    data = json.loads(message)
                except ConnectionClosed:
                    log(f"Client {self.client_id} disconnected")
                    break
                except json.JSONDecodeError:
                    await self.send_error("Invalid JSON message")
                    continue

                message_type = data.get("type") if isinstance(data, dict) else None
                if not message_type:
                    await self.send_error("Message type is required")
                    continue

                handler = self.handlers.get(message_type)
                if handler is None:
                    await self.send_error(f"Unknown message type: {message_type}")
                    continue

                logging.info(f"Processing message type: {message_type} for client {self.client_id}")
                try:
                    await handler(data)
                except ConnectionClosed:
                    log(f"Client {self.client_id} disconnected while handling {message_type}")
                    break
        finally:
            await self.cleanup()

    async def send_error(self, error: str):
        await self.websocket.send({"type": "error", "error": error})

    async def send_state(self):
        await self.websocket.send({"type": "session_state", "session": self.session.snapshot()})

    def _on_session_change(self, session: GenerationSession):
        # snapshot now; the push itself happens on the next loop iteration
        message = {"type": "session_state", "session": session.snapshot()}
        task = asyncio.get_running_loop().create_task(self._push_state(message))
        self._push_tasks.add(task)
        task.add_done_callback(self._push_tasks.discard)

    async def _push_state(self, message: dict):
        try:
            await self.websocket.send(message)
        except ConnectionClosed:
            logging.debug(f"Dropped state push for disconnected client {self.client_id}")

    async def handle_ping(self, data: dict):
        await self.websocket.send({
            "type": "pong",
            "message": "Connection alive",
            "server_time": time.time(),
            "last_activity": self.websocket.last_activity,
        })

    async def handle_get_state(self, data: dict):
        await self.send_state()

    async def handle_submit_topic(self, data: dict):
        topic = str(data.get("topic") or "").strip()
        if not topic:
            await self.send_error("Topic is required")
            return
        lesson = await self.session.submit_topic(topic)
        if lesson is None and self.session.last_error:
            await self.send_error(self.session.last_error)

    async def handle_edit_module_name(self, data: dict):
        self.session.edit_module_name(str(data.get("value") or ""))

    async def handle_set_field(self, data: dict):
        setter = getattr(self.session, data["type"])
        setter(str(data.get("value") or ""))

    async def handle_save_module(self, data: dict):
        if self.session.lesson is None or not self.session.module_name.strip():
            await self.send_error("A lesson and a module name are required to save")
            return
        module = await self.session.save()
        if module is None:
            await self.send_error(self.session.last_error or "Failed to save module")
            return
        await self.websocket.send({"type": "module_saved", "module": module.model_dump(by_alias=True)})

    async def handle_list_modules(self, data: dict):
        modules = await self.store.list_all()
        await self.websocket.send({
            "type": "modules",
            "modules": [module.model_dump(by_alias=True) for module in modules],
        })

    async def cleanup(self):
        """Cancel pending regenerations and unsent state pushes."""
        self.session.close()
        for task in list(self._push_tasks):
            task.cancel()
        idle = time.time() - self.websocket.last_activity
        log(f"Cleaned up client {self.client_id} after {self.websocket.message_count} messages "
            f"({idle:.1f}s since last activity)")

async def websocket_handler(websocket, lesson_service: LessonService, store: ModuleStore):
    """
    Main WebSocket handler: one authoring session per connection.
    """
    client_id = f"classpilot_client_{int(time.time() * 1000)}"
    log(f"New client connected: {client_id} from {getattr(websocket, 'remote_address', 'unknown')}")

    agent = AuthoringAgent(AuthoringWebSocketWrapper(websocket, client_id), lesson_service, store)
    await agent.process_messages()

async def start_websocket_server(host: str = None, port: int = None,
                                 lesson_service: Optional[LessonService] = None,
                                 store: Optional[ModuleStore] = None):
    """
    Start the ClassPilot WebSocket server and run until cancelled.
    """
    host = host or config.WEBSOCKET_HOST
    port = port or config.WEBSOCKET_PORT
    handler = functools.partial(
        websocket_handler,
        lesson_service=lesson_service or LessonService(),
        store=store or InMemoryModuleStore(),
    )

    log(f"Starting ClassPilot WebSocket server on {host}:{port}")
    try:
        async with websockets.serve(handler, host, port, ping_interval=20, ping_timeout=10, max_size=2**20):
            log(f"✅ ClassPilot WebSocket server started: ws://{host}:{port}")
            await asyncio.Future()  # Run forever
    except OSError as e:
        log(f"❌ Failed to start WebSocket server on port {port}: {e}")
        raise

def main():
    """
    Main entry point for the ClassPilot WebSocket server.
    """
    import argparse

    parser = argparse.ArgumentParser(description='ClassPilot WebSocket Server')
    parser.add_argument('--host', default=config.WEBSOCKET_HOST, help='Host to bind to')
    parser.add_argument('--port', type=int, default=config.WEBSOCKET_PORT, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else config.LOG_LEVEL,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        asyncio.run(start_websocket_server(args.host, args.port))
    except KeyboardInterrupt:
        log("Server stopped by user")

if __name__ == "__main__":
    main()
