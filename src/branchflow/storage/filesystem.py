"""Filesystem operations for branchflow."""

import json
import tempfile
from pathlib import Path
from typing import Any, Union

from ..utils.logger import Logger
from ..utils.errors import ConfigurationError


class JsonFileStore:
    """Reads and writes one JSON document on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Any:
        """Load the document. Raises ConfigurationError when it cannot be read
        or is not valid UTF-8 JSON."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"{self.path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Could not read {self.path}: {e}") from e

    def save(self, data: Any) -> Path:
        """Write with 2-space indentation and a trailing newline."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        Logger.debug(f"Wrote {self.path}")
        return self.path


def write_temp_text(text: str, suffix: str = ".txt") -> Path:
    """Write text to a named temporary file the caller must remove."""
    with tempfile.NamedTemporaryFile(
        'w', suffix=suffix, prefix="branchflow-", delete=False, encoding='utf-8'
    ) as f:
        f.write(text)
        return Path(f.name)
