"""Install the post-commit hook into a repository."""

from pathlib import Path

from loguru import logger

from ai_barometer.git_gateway import GitGateway

HOOK_MARKER = "# ai-barometer post-commit hook"
HOOK_COMMAND = "ai-barometer hook post-commit || true"


def install_hook(gateway: GitGateway) -> Path:
    """Write or extend ``post-commit`` so it runs the hook. Idempotent."""
    hooks_dir = gateway.hooks_dir()
    hooks_dir.mkdir(parents=True, exist_ok=True)
    hook_path = hooks_dir / "post-commit"
    snippet = f"{HOOK_MARKER}\n{HOOK_COMMAND}\n"

    if hook_path.exists():
        existing = hook_path.read_text(encoding="utf-8")
        if HOOK_MARKER in existing:
            logger.info(f"Hook already installed at {hook_path}")
            return hook_path
        content = existing.rstrip("\n") + "\n\n" + snippet
    else:
        content = "#!/bin/sh\n" + snippet

    hook_path.write_text(content, encoding="utf-8")
    hook_path.chmod(hook_path.stat().st_mode | 0o111)
    logger.info(f"Installed post-commit hook at {hook_path}")
    return hook_path
