"""Exception types raised inside the attachment pipeline."""


class BarometerError(Exception):
    """Base class for all ai-barometer failures."""


class GitGatewayError(BarometerError):
    """A git operation failed or the working directory is not a repository."""


class NoteFormatError(BarometerError):
    """A session transcript could not be serialized into a note."""


class PendingStoreError(BarometerError):
    """The pending record directory could not be written."""


class ConfigError(BarometerError):
    """A git config value could not be read or written."""


def git_error_message(error) -> str:
    """Reduce a GitCommandError to git's own one-line complaint."""
    text = (getattr(error, "stderr", "") or "").strip()
    if text.startswith("stderr:"):
        text = text[len("stderr:"):].strip().strip("'").strip()
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if lines:
        return lines[-1]
    return f"git exited with status {getattr(error, 'status', '?')}"
