"""Rich console renderer for notification messages.

The renderer is responsible for ALL presentation decisions - the messages contain
only structured data with no formatting hints.
"""

from typing import Dict, Optional, Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape as escape_rich_markup

from .messages import MessageLevel, TextMessage

# =============================================================================
# Renderer Protocol
# =============================================================================


@runtime_checkable
class RendererProtocol(Protocol):
    """Protocol defining the interface for message renderers."""

    def render(self, message: TextMessage) -> None:
        """Render a single message."""
        ...


# =============================================================================
# Default Styles
# =============================================================================

DEFAULT_STYLES: Dict[MessageLevel, str] = {
    MessageLevel.ERROR: "bold red",
    MessageLevel.WARNING: "yellow",
    MessageLevel.SUCCESS: "green",
    MessageLevel.INFO: "magenta",
    MessageLevel.DEBUG: "dim",
}


# =============================================================================
# Rich Console Renderer
# =============================================================================


class RichConsoleRenderer:
    """Rich console implementation of the renderer protocol."""

    def __init__(
        self,
        console: Optional[Console] = None,
        styles: Optional[Dict[MessageLevel, str]] = None,
        suppress_informational: bool = False,
    ) -> None:
        """Initialize the renderer.

        Args:
            console: Rich Console instance (creates a stderr console if None).
            styles: Custom style mappings (uses DEFAULT_STYLES if None).
            suppress_informational: Skip INFO/SUCCESS/DEBUG messages.
        """
        self._console = console or Console(stderr=True)
        self._styles = DEFAULT_STYLES.copy()
        if styles:
            self._styles.update(styles)
        self._suppress_informational = suppress_informational

    @property
    def console(self) -> Console:
        """Get the Rich console."""
        return self._console

    def render(self, message: TextMessage) -> None:
        if self._suppress_informational and message.level in (
            MessageLevel.INFO,
            MessageLevel.SUCCESS,
            MessageLevel.DEBUG,
        ):
            return
        self._render_text(message)

    def _render_text(self, msg: TextMessage) -> None:
        """Render a text message with its level style.

        Text is escaped so task names containing brackets can't inject markup.
        """
        style = self._styles.get(msg.level, "white")
        prefix = self._get_level_prefix(msg.level)
        safe_text = escape_rich_markup(msg.text)
        if msg.log_time:
            safe_text = f"{escape_rich_markup(msg.log_time)} | {safe_text}"
        self._console.print(f"{prefix}{safe_text}", style=style, highlight=False)

    def _get_level_prefix(self, level: MessageLevel) -> str:
        """Get a prefix icon for the message level."""
        prefixes = {
            MessageLevel.ERROR: "✗ ",
            MessageLevel.WARNING: "⚠ ",
            MessageLevel.SUCCESS: "✓ ",
            MessageLevel.INFO: "ℹ ",
            MessageLevel.DEBUG: "• ",
        }
        return prefixes.get(level, "")
