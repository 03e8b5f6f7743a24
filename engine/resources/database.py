"""
Battle Database.

Handles loading and validation of static battle data (actions, fighters).
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
from pydantic import ValidationError

from duel.battle.actions import ActionCatalog, default_catalog


class Database:
    """
    Central storage for static battle data.

    Layout under data_path:
        schemas/action.schema.json
        schemas/fighter.schema.json
        database/actions/*.json
        database/fighters/*.json

    A data file holds either one object or a list of objects, each keyed
    by its "id". Entries failing schema validation are logged and skipped.
    """

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = {}

        # Data stores
        self.actions: dict[str, Any] = {}
        self.fighters: dict[str, Any] = {}

        self.logger = logging.getLogger(__name__)

    def load_all(self) -> None:
        """Load all data from disk."""
        self._load_schemas()

        self.actions = self._load_category("actions", "action.schema.json")
        self.fighters = self._load_category("fighters", "fighter.schema.json")

        self.logger.info(
            f"Loaded {len(self.actions)} actions, "
            f"{len(self.fighters)} fighters."
        )

    def _load_schemas(self) -> None:
        """Load JSON schemas."""
        schema_dir = self._data_path / "schemas"
        if not schema_dir.exists():
            self.logger.warning(f"Schema directory not found: {schema_dir}")
            return

        for schema_file in schema_dir.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, Any]:
        """Load all JSON files in a category folder."""
        category_dir = self._data_path / "database" / folder
        data_store: dict[str, Any] = {}

        if not category_dir.exists():
            self.logger.warning(f"Data directory not found: {category_dir}")
            return data_store

        schema = self._schemas.get(schema_name)
        if not schema:
            self.logger.warning(f"No schema found for {folder} ({schema_name}), skipping")
            return data_store

        for file_path in sorted(category_dir.glob("*.json")):
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load {file_path}: {e}")
                continue

            entries = data if isinstance(data, list) else [data]
            for entry in entries:
                try:
                    jsonschema.validate(instance=entry, schema=schema)
                except jsonschema.ValidationError as e:
                    self.logger.error(f"Validation error in {file_path}: {e.message}")
                    continue

                if not isinstance(entry, dict) or 'id' not in entry:
                    self.logger.warning(f"Skipping entry without id in {file_path}")
                    continue
                data_store[entry['id']] = entry

        return data_store

    def get_action(self, action_id: str) -> dict[str, Any] | None:
        return self.actions.get(action_id)

    def get_fighter(self, template_id: str) -> dict[str, Any] | None:
        """Raw fighter template, usable with BattleSystem.start_battle()."""
        template = self.fighters.get(template_id)
        return dict(template) if template is not None else None

    def build_catalog(self) -> ActionCatalog:
        """
        Action catalog of the stock actions overridden by loaded ones.

        Entries the action model rejects (for example an unknown effect tag
        the schema let through) are logged and left out.
        """
        catalog = default_catalog()
        for action_id, definition in self.actions.items():
            try:
                catalog.register(action_id, definition)
            except ValidationError as e:
                self.logger.error(f"Invalid action {action_id}: {e.error_count()} error(s)")
        return catalog
