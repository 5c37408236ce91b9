# filesystem_manager.py — writes generated images into the public static folder
from __future__ import annotations
import os
from typing import Tuple

from werkzeug.utils import secure_filename


class StaticAssetStore:
    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def _abs(self, name: str) -> str:
        safe = secure_filename(name)
        if not safe:
            raise ValueError(f"Invalid asset name: {name!r}")
        return os.path.join(self.base_dir, safe)

    def public_path(self, name: str) -> str:
        return "/" + os.path.basename(self._abs(name))

    def write_bytes(self, name: str, content: bytes) -> Tuple[bool, str | None]:
        """Returns (ok, public path or error message)."""
        try:
            abs_path = self._abs(name)
            with open(abs_path, "wb") as f:
                f.write(content or b"")
            return True, self.public_path(name)
        except (OSError, ValueError) as e:
            return False, str(e)
