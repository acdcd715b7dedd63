import logging
from typing import Any, Dict, Iterable

from prompt_toolkit.completion import Completion
from prompt_toolkit.document import Document

from scriptshell.core.context.shell_context import ShellContext

logger = logging.getLogger(__name__)

# Subcommands whose next word is a buffer name / environment handle.
_BUFFER_ARGS = {("buffer", "show"), ("buffer", "clear"), ("buffer", "delete"), ("buffer", "feed")}
_ENV_ARGS = {("env", "show"), ("env", "drop")}


class CompletionManager:
    """
    Generates command completion suggestions for the prompt.
    """

    def __init__(self, shell_context: ShellContext):
        self.ctx = shell_context

    @property
    def command_hierarchy(self) -> Dict[str, Any]:
        # Read live from the registry: plugins may be loaded at runtime.
        return self.ctx.engine.registry.command_hierarchy()

    def generate_completions(self, document: Document) -> Iterable[Completion]:
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.lstrip().split()
        word_before_cursor = document.get_word_before_cursor(WORD=True)

        if word_before_cursor.startswith("@{") or document.char_before_cursor == '{':
            yield from self._get_variable_completions(word_before_cursor)
            return

        # Number of fully typed words before the one being completed
        completed = len(words) if text_before_cursor.endswith(" ") else max(len(words) - 1, 0)
        current = "" if text_before_cursor.endswith(" ") else (words[-1] if words else "")

        if completed == 0:
            yield from self._get_main_command_completions(current)
            return

        if completed == 1:
            hierarchy_entry = self.command_hierarchy.get(words[0])
            if isinstance(hierarchy_entry, dict):
                yield from self._get_sub_command_completions(hierarchy_entry.keys(), current)
            return

        key = (words[0], words[1])
        if key in _BUFFER_ARGS:
            yield from self._get_name_completions(self.ctx.buffers.names(), current, "Buffer")
        elif key in _ENV_ARGS:
            yield from self._get_name_completions(self.ctx.environments.handles(), current, "Environment")

    # --- Helper methods for different completion types ---

    def _get_main_command_completions(self, word_before_cursor: str) -> Iterable[Completion]:
        for command_name in sorted(self.command_hierarchy.keys()):
            if command_name.startswith(word_before_cursor):
                yield Completion(
                    command_name,
                    start_position=-len(word_before_cursor),
                    display_meta="Command"
                )

    def _get_variable_completions(self, word_before_cursor: str) -> Iterable[Completion]:
        prefix = word_before_cursor if word_before_cursor.startswith("@{") else ""
        start_pos = -len(prefix)
        for var_name in sorted(self.ctx.vars()):
            suggestion = f"@{{{var_name}}}"
            if suggestion.startswith(prefix):
                yield Completion(suggestion, start_position=start_pos, display_meta="Context Variable")

    def _get_sub_command_completions(self, subcommands: Iterable[str], word_before_cursor: str) -> Iterable[Completion]:
        start_pos = -len(word_before_cursor)
        for sub in sorted(subcommands):
            if sub.startswith(word_before_cursor):
                yield Completion(sub, start_position=start_pos)

    def _get_name_completions(self, names: Iterable[str], word_before_cursor: str, meta: str) -> Iterable[Completion]:
        start_pos = -len(word_before_cursor)
        for name in names:
            if name.startswith(word_before_cursor):
                yield Completion(name, start_position=start_pos, display_meta=meta)
