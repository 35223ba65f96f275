import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = Path.home() / "Radar3D_error.log"


def _resolve(log_path: Optional[Path]) -> Path:
    # Looked up at call time so the module-level path can be redirected.
    return Path(log_path) if log_path is not None else DEFAULT_LOG_PATH


def _append(text: str, log_path: Optional[Path]) -> None:
    try:
        with open(_resolve(log_path), "a", encoding="utf-8") as f:
            f.write(text)
    except OSError:
        # A chart load never fails on its diagnostics.
        pass


def log_event(context: str, message: str, log_path: Optional[Path] = None) -> None:
    """Append one `timestamp | context | message` line; newlines in message are folded."""
    folded = str(message).replace("\r", "\\r").replace("\n", "\\n")
    _append(f"{datetime.now().isoformat()}  |  {context}  |  {folded}\n", log_path)


def log_exception(context: str, log_path: Optional[Path] = None) -> None:
    """Append the exception currently being handled, with its traceback."""
    _append(
        "\n" + "=" * 80 + "\n"
        + f"{datetime.now().isoformat()}  |  {context}\n"
        + traceback.format_exc(),
        log_path,
    )
