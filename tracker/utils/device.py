# tracker/utils/device.py

"""
Anonymous device identity: profiles belong to whoever holds this id.
"""

import secrets
from pathlib import Path
from typing import Optional

DEFAULT_DEVICE_FILE = Path.home() / ".tracker" / "device_id"


def generate_device_id() -> str:
    """16 random bytes, hex encoded."""
    return secrets.token_hex(16)


def get_device_id(path: Optional[Path] = None) -> str:
    """
    Read the local device id, creating and storing one on first use.
    """
    path = path or DEFAULT_DEVICE_FILE
    if path.exists():
        device_id = path.read_text(encoding="utf-8").strip()
        if device_id:
            return device_id
    device_id = generate_device_id()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(device_id, encoding="utf-8")
    return device_id


def clear_device_id(path: Optional[Path] = None) -> None:
    (path or DEFAULT_DEVICE_FILE).unlink(missing_ok=True)
