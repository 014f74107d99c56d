"""Interactive prompts using InquirerPy."""

from __future__ import annotations

import sys
from typing import Optional

try:
    from InquirerPy import inquirer
    HAVE_INQUIRER = True
except Exception:  # pragma: no cover - optional dependency
    HAVE_INQUIRER = False


def _require_inquirer() -> None:
    if not HAVE_INQUIRER:
        print(
            "Interactive mode requires InquirerPy. Install:\n  pip install InquirerPy",
            file=sys.stderr,
        )
        sys.exit(2)


def _execute(prompt):
    """Execute a prompt and handle ``Ctrl-C`` gracefully."""
    try:
        return prompt.execute()
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        sys.exit(1)


def ask_text(message: str, default: Optional[str] = None) -> str:
    _require_inquirer()
    prompt = inquirer.text(
        message=message,
        default=default or "",
        validate=lambda ans: bool(ans.strip()) or "A value is required",
    )
    return (_execute(prompt) or "").strip()


def ask_secret(message: str) -> str:
    _require_inquirer()
    prompt = inquirer.secret(
        message=message,
        validate=lambda ans: bool(ans) or "A value is required",
    )
    return _execute(prompt) or ""


def confirm(message: str, default: bool = False) -> bool:
    _require_inquirer()
    return bool(_execute(inquirer.confirm(message=message, default=default)))
