"""Non-blocking external process execution."""

from __future__ import annotations

import codecs
import os
import platform
import queue
import selectors
import shlex
import shutil
import subprocess
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import ToolNotFound
from ..utils.logging import get_logger

logger = get_logger(__name__)

_READ_CHUNK = 65536


@dataclass(frozen=True)
class CommandSpec:
    """An external command to launch. Never mutated once built."""

    executable: str
    args: Tuple[str, ...] = ()
    cwd: Optional[str] = None
    unbounded: bool = False  # long-running: no natural end expected

    @property
    def argv(self) -> List[str]:
        return [self.executable, *self.args]

    def display(self) -> str:
        return " ".join(shlex.quote(part) for part in self.argv)


@dataclass(frozen=True)
class RunState:
    """Result of a single poll: still running, or exited with a code."""

    exit_code: Optional[int] = None

    @classmethod
    def running(cls) -> "RunState":
        return cls(None)

    @classmethod
    def exited(cls, code: int) -> "RunState":
        return cls(code)

    @property
    def is_running(self) -> bool:
        return self.exit_code is None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class ProcessHandle:
    """A running or finished external process and the output seen so far."""

    spec: CommandSpec
    process: Optional[subprocess.Popen] = field(default=None, repr=False)
    running: bool = True
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None

    _selector: Optional[selectors.BaseSelector] = field(default=None, repr=False)
    _queue: Optional["queue.Queue[Tuple[str, Optional[bytes]]]"] = field(
        default=None, repr=False
    )
    _threads: List[threading.Thread] = field(default_factory=list, repr=False)
    _open_streams: int = field(default=0, repr=False)
    _decoders: Dict[str, Any] = field(default_factory=dict, repr=False)

    def append(self, stream: str, data: bytes) -> None:
        decoder = self._decoders.get(stream)
        if decoder is None:
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            self._decoders[stream] = decoder
        text = decoder.decode(data)
        if not text:
            return
        if stream == "stdout":
            self.stdout += text
        else:
            self.stderr += text

    def discard_output(self) -> None:
        """Drop the output captured so far; later output is still collected."""
        self.stdout = ""
        self.stderr = ""

    def finish(self, code: int) -> None:
        """Record the exit code. Only the first call has any effect."""
        if self.exit_code is not None:
            return
        self.running = False
        self.exit_code = code


class ProcessRunner:
    """
    Launches external commands and lets the caller poll them.

    Nothing here blocks waiting for the child: ``poll`` drains whatever
    output is available and checks the exit status. POSIX pipes are drained
    with a selector; Windows pipes cannot be selected, so there a pair of
    daemon reader threads feed a queue that ``poll`` empties.
    """

    def __init__(
        self,
        *,
        which: Callable[[str], Optional[str]] = shutil.which,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        terminate_grace: float = 3.0,
    ) -> None:
        self._which = which
        self._popen = popen
        self.terminate_grace = terminate_grace
        self.is_windows = platform.system() == "Windows"

    def is_available(self, tool: str) -> bool:
        return self._which(tool) is not None

    def start(self, spec: CommandSpec) -> ProcessHandle:
        resolved = self._which(spec.executable)
        if resolved is None:
            raise ToolNotFound(spec.executable)

        logger.debug("Starting: %s", spec.display())
        try:
            process = self._popen(
                [resolved, *spec.args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=spec.cwd,
            )
        except FileNotFoundError as exc:
            raise ToolNotFound(spec.executable) from exc

        handle = ProcessHandle(spec=spec, process=process)
        if self.is_windows:
            self._start_readers(handle, process)
        else:
            selector = selectors.DefaultSelector()
            selector.register(process.stdout, selectors.EVENT_READ, "stdout")
            selector.register(process.stderr, selectors.EVENT_READ, "stderr")
            handle._selector = selector
        handle._open_streams = 2
        return handle

    def poll(self, handle: ProcessHandle) -> RunState:
        if not handle.running:
            return RunState.exited(handle.exit_code if handle.exit_code is not None else -1)
        process = handle.process
        if process is None:
            raise RuntimeError(f"No process attached to {handle.spec.display()}")

        self._drain(handle, timeout=0)
        code = process.poll()
        if code is None:
            return RunState.running()

        # The child is gone; collect whatever is still sitting in the pipes.
        self._drain(handle, timeout=0.05, until_eof=True)
        handle.finish(code)
        logger.debug("Exited with %d: %s", code, handle.spec.display())
        return RunState.exited(code)

    def captured_output(self, handle: ProcessHandle) -> Tuple[str, str]:
        return handle.stdout, handle.stderr

    def terminate(self, handle: ProcessHandle) -> None:
        """Best-effort kill of a running process."""
        process = handle.process
        if process is None or not handle.running:
            return
        logger.debug("Terminating: %s", handle.spec.display())
        try:
            process.terminate()
            try:
                process.wait(timeout=self.terminate_grace)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait(timeout=self.terminate_grace)
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("Terminate failed for pid %s: %s", process.pid, exc)
        self._drain(handle, timeout=0.05, until_eof=True)
        code = process.returncode
        handle.finish(code if code is not None else -1)

    def release(self, handle: ProcessHandle) -> None:
        """Close the pipes of a finished process."""
        if handle._selector is not None:
            handle._selector.close()
            handle._selector = None
        process = handle.process
        if process is None:
            return
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass

    def _start_readers(self, handle: ProcessHandle, process: subprocess.Popen) -> None:
        pending: "queue.Queue[Tuple[str, Optional[bytes]]]" = queue.Queue()
        handle._queue = pending

        def pump(stream: Any, name: str) -> None:
            try:
                while True:
                    chunk = stream.read1(_READ_CHUNK)
                    if not chunk:
                        break
                    pending.put((name, chunk))
            except (OSError, ValueError):
                pass
            finally:
                pending.put((name, None))

        for name, stream in (("stdout", process.stdout), ("stderr", process.stderr)):
            thread = threading.Thread(target=pump, args=(stream, name), daemon=True)
            thread.start()
            handle._threads.append(thread)

    def _drain(self, handle: ProcessHandle, *, timeout: float, until_eof: bool = False) -> None:
        if handle._selector is not None:
            self._drain_selector(handle, handle._selector, timeout, until_eof)
        elif handle._queue is not None:
            self._drain_queue(handle, handle._queue, timeout, until_eof)

    def _drain_selector(
        self,
        handle: ProcessHandle,
        selector: selectors.BaseSelector,
        timeout: float,
        until_eof: bool,
    ) -> None:
        while selector.get_map():
            events = selector.select(timeout=timeout)
            if not events:
                return
            for key, _ in events:
                chunk = os.read(key.fd, _READ_CHUNK)
                if chunk:
                    handle.append(key.data, chunk)
                else:
                    selector.unregister(key.fileobj)
                    handle._open_streams -= 1
            if not until_eof:
                return

    def _drain_queue(
        self,
        handle: ProcessHandle,
        pending: "queue.Queue[Tuple[str, Optional[bytes]]]",
        timeout: float,
        until_eof: bool,
    ) -> None:
        while handle._open_streams > 0:
            try:
                if until_eof:
                    name, chunk = pending.get(timeout=max(timeout, 0.05))
                else:
                    name, chunk = pending.get_nowait()
            except queue.Empty:
                return
            if chunk is None:
                handle._open_streams -= 1
            else:
                handle.append(name, chunk)
