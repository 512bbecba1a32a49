import sys
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, BinaryIO, Dict, Optional, TextIO

from omdb_mcp.mcp.errors import InternalError
from omdb_mcp.mcp.handlers import ProtocolEngine
from omdb_mcp.mcp.models import JsonRpcResponse

logger = logging.getLogger("OmdbMcp.mcp.server")

DEFAULT_MAX_WORKERS = 8


class StdioServer:
    """
    Serves the protocol engine over newline-delimited JSON on stdio.

    Each input line is handed to a bounded thread pool; responses are written
    one per line in completion order. When the queue limit is reached the
    reader blocks until a worker frees a slot.
    """
    def __init__(
        self,
        engine: ProtocolEngine,
        max_workers: Optional[int] = None,
        queue_limit: Optional[int] = None,
        output: Optional[TextIO] = None,
    ):
        self.engine = engine
        self.max_workers = max(1, max_workers or DEFAULT_MAX_WORKERS)
        self.queue_limit = max(self.max_workers, queue_limit or self.max_workers * 8)
        self.output = output if output is not None else sys.stdout

        self.transport_closed = threading.Event()
        self.write_lock = threading.Lock()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()
        self._queue_semaphore = threading.BoundedSemaphore(self.queue_limit)

    def get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="omdb-mcp-dispatch",
                )
            return self._executor

    def stop(self, wait: bool = True) -> None:
        """Shut down the dispatcher; with ``wait`` pending requests finish first."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=wait, cancel_futures=not wait)
                self._executor = None
        self.transport_closed.set()

    def send_rpc(self, message: Dict[str, Any]) -> None:
        """Serialize and write one JSON-RPC message as a single line."""
        if self.transport_closed.is_set():
            return

        try:
            serialized = json.dumps(message)
            with self.write_lock:
                if self.transport_closed.is_set():
                    return
                self.output.write(serialized + "\n")
                self.output.flush()
        except (BrokenPipeError, OSError) as exc:
            self.transport_closed.set()
            logger.warning("MCP stdio transport closed while sending: %s", exc)

    def read_message(self, stream: BinaryIO) -> Optional[bytes]:
        """Return the next non-blank line, or None at end of stream."""
        while True:
            line = stream.readline()
            if not line:
                return None
            if line.strip():
                return line

    def submit_dispatch(self, line: bytes) -> None:
        """Queue one raw line for dispatch, blocking while the queue is full."""
        self._queue_semaphore.acquire()
        try:
            future = self.get_executor().submit(self._dispatch_guarded, line)
        except Exception:
            self._queue_semaphore.release()
            raise

        future.add_done_callback(lambda f: self._queue_semaphore.release())

    def _dispatch_guarded(self, line: bytes) -> None:
        try:
            response = self.engine.handle_message(line)
        except Exception as exc:
            logger.exception("Unexpected error during RPC dispatch")
            msg_id = self._peek_id(line)
            if msg_id is None:
                return
            response = JsonRpcResponse.failure(msg_id, InternalError(f"Internal error: {exc}").to_error())
        if response is not None:
            self.send_rpc(response.to_wire())

    @staticmethod
    def _peek_id(line: bytes) -> Any:
        try:
            payload = json.loads(line)
        except (ValueError, RecursionError):
            return None
        msg_id = payload.get("id") if isinstance(payload, dict) else None
        if isinstance(msg_id, bool) or not isinstance(msg_id, (str, int)):
            return None
        return msg_id

    def serve(self, stream: Optional[BinaryIO] = None) -> None:
        """Read until end of stream, then wait for in-flight requests to finish."""
        stream = stream if stream is not None else sys.stdin.buffer
        logger.info(
            "Serving MCP over stdio (workers=%d, queue_limit=%d)",
            self.max_workers,
            self.queue_limit,
        )
        try:
            while not self.transport_closed.is_set():
                line = self.read_message(stream)
                if line is None:
                    break
                self.submit_dispatch(line)
        except KeyboardInterrupt:
            logger.info("Stdio transport interrupted")
        finally:
            self.stop(wait=True)
            logger.info("Stdio transport stopped")
