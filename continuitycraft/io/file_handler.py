"""File handling utilities."""

import json
import yaml
from pathlib import Path
from typing import Any, Dict, Union


class FileHandler:
    """Handles reading and writing JSON and YAML files."""

    def read_json(self, file_path: Union[str, Path]) -> Any:
        """Read JSON file."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return json.load(f)

    def write_json(self, file_path: Union[str, Path], data: Any) -> None:
        """Write JSON file."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + '.tmp')
        with tmp_path.open('w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)

    def read_yaml(self, file_path: Union[str, Path]) -> Any:
        """Read YAML file."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    def write_yaml(self, file_path: Union[str, Path], data: Any) -> None:
        """Write YAML file."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def read_structured(self, file_path: Union[str, Path]) -> Any:
        """Read a JSON or YAML file depending on its extension."""
        path = Path(file_path)
        if path.suffix.lower() in ('.yaml', '.yml'):
            return self.read_yaml(path)
        return self.read_json(path)

    def write_structured(self, file_path: Union[str, Path], data: Dict[str, Any]) -> None:
        """Write a JSON or YAML file depending on its extension."""
        path = Path(file_path)
        if path.suffix.lower() in ('.yaml', '.yml'):
            self.write_yaml(path, data)
        else:
            self.write_json(path, data)
