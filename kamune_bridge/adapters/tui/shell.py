"""Interactive shell driving the daemon bridge.

A line-oriented prompt_toolkit session: each input line is either a
built-in (":start", ":stop", ":status", ":help", ":quit") or a daemon
command written as "name key=value ...". Events forwarded from the daemon
are printed above the prompt as they arrive.
"""

from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Callable
from typing import Any

from prompt_toolkit import PromptSession, print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style

from kamune_bridge.adapters.events.broadcast import CATCH_ALL_CHANNEL
from kamune_bridge.core.context import BridgeContext
from kamune_bridge.core.params import parse_params
from kamune_bridge.domain.exceptions import BridgeError

logger = logging.getLogger(__name__)

SHELL_STYLE = Style.from_dict(
    {
        "prompt": "ansicyan bold",
        "event": "ansimagenta",
        "reply": "ansigreen",
        "error": "ansired",
        "info": "",
    }
)

HELP_TEXT = """\
Commands:
  <name> [key=value ...]   send a daemon command and wait for its reply
  :start                   start the daemon
  :stop                    stop the daemon
  :status                  show daemon status
  :help                    show this help
  :quit                    stop the daemon and exit"""

Printer = Callable[[str, str], None]


def _print_styled(style_class: str, text: str) -> None:
    print_formatted_text(FormattedText([(f"class:{style_class}", text)]), style=SHELL_STYLE)


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


class BridgeShell:
    """Interactive front end for a BridgeContext."""

    def __init__(
        self,
        context: BridgeContext,
        timeout: float | None = None,
        show_events: bool = True,
        printer: Printer | None = None,
    ) -> None:
        """Initialize the shell.

        Args:
            context: Application context whose bridge is driven
            timeout: Reply timeout for commands (default: config value)
            show_events: Print forwarded daemon events
            printer: Output function taking (style class, text)
        """
        self.context = context
        self.timeout = timeout
        self.show_events = show_events
        self.printer = printer or _print_styled
        self._unsubscribe: Callable[[], None] | None = None

    def _on_event(self, payload: dict[str, Any]) -> None:
        self.printer("event", f"<- {payload.get('evt')} {_dumps(payload.get('data'))}")

    def handle_line(self, line: str) -> bool:
        """Execute one line of input.

        Returns:
            False when the shell should exit
        """
        line = line.strip()
        if not line:
            return True

        try:
            words = shlex.split(line)
        except ValueError as e:
            self.printer("error", f"Parse error: {e}")
            return True

        name, args = words[0], words[1:]
        if name.startswith(":"):
            return self._builtin(name[1:])

        try:
            params = parse_params(args)
        except ValueError as e:
            self.printer("error", f"Invalid parameter '{e}' (expected key=value)")
            return True

        try:
            event = self.context.bridge.request(name, params, timeout=self.timeout)
        except BridgeError as e:
            self.printer("error", f"Error: {e.message}")
            return True

        self.printer("reply", f"{event.name} {_dumps(event.data)}")
        return True

    def _builtin(self, name: str) -> bool:
        bridge = self.context.bridge
        if name in ("quit", "exit", "q"):
            return False
        if name == "help":
            self.printer("info", HELP_TEXT)
        elif name == "status":
            self.printer("info", _dumps(bridge.status()))
        elif name == "start":
            try:
                path = bridge.start()
            except BridgeError as e:
                self.printer("error", f"Error: {e.message}")
            else:
                self.printer("info", f"Daemon started from {path}")
        elif name == "stop":
            bridge.stop()
            self.printer("info", "Daemon stopped")
        else:
            self.printer("error", f"Unknown command ':{name}' (try :help)")
        return True

    def run(self) -> None:
        """Run the prompt loop until :quit, Ctrl-D or Ctrl-C."""
        if self.show_events:
            self._unsubscribe = self.context.emitter.subscribe(CATCH_ALL_CHANNEL, self._on_event)

        session: PromptSession = PromptSession(history=InMemoryHistory())
        self.printer("info", "kamune-bridge shell. Type :help for commands.")
        try:
            with patch_stdout():
                while True:
                    try:
                        line = session.prompt(
                            FormattedText([("class:prompt", "kamune> ")]), style=SHELL_STYLE
                        )
                    except (EOFError, KeyboardInterrupt):
                        break
                    if not self.handle_line(line):
                        break
        finally:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None
