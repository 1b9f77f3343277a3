"""Settings resource for managing configuration from environment variables."""

import json
import os
from typing import Any, get_type_hints

from dagster import ConfigurableResource, EnvVar

from imagery_tasks.models.types import PathString, UrlString, path_or_url_from_string


class SettingsResource(ConfigurableResource[Any]):
    """Settings resource using EnvVar for runtime resolution in Dagster."""

    aws_region: str | None = EnvVar("AWS_REGION")
    aws_s3_endpoint: str | None = EnvVar("AWS_S3_ENDPOINT")
    aws_s3_use_ssl: bool = True
    action_path: str | None = EnvVar("ACTION_PATH")
    argo_template: str | None = EnvVar("ARGO_TEMPLATE")
    argo_node_id: str | None = EnvVar("ARGO_NODE_ID")

    @staticmethod
    def create(swallow_errors: bool = False) -> "SettingsResource":
        """Create SettingsResource from environment variables.

        :param swallow_errors: If True, ignore validation errors
        :returns: SettingsResource instance
        """
        env_values: dict[str, Any] = {}
        for attr_name, attr_type in get_type_hints(SettingsResource).items():
            raw = os.environ.get(attr_name.upper())
            if raw is None:
                if attr_type is not bool:
                    env_values[attr_name] = None
            elif attr_type is bool:
                env_values[attr_name] = raw.strip().lower() in ("true", "1", "yes", "y", "on")
            else:
                env_values[attr_name] = raw

        settings = SettingsResource(**env_values)
        try:
            settings.validate_settings()
        except (TypeError, ValueError):
            if not swallow_errors:
                raise
        return settings

    def resolve_value(self, attr_name: str) -> str | None:
        """Get a setting, resolving EnvVar if needed.

        :param attr_name: Setting name
        :returns: Setting value or None when unset
        """
        value = getattr(self, attr_name)
        if isinstance(value, EnvVar):
            return value.get_value()
        return value or None

    def get_action_location(self) -> PathString | UrlString | None:
        """Resolve where copy actions are stored.

        Uses ``ACTION_PATH`` when set, otherwise the ``archiveLocation`` of the
        Argo workflow template with the node id removed from its key.

        :returns: Action location or None when nothing is configured
        """
        action_path = self.resolve_value("action_path")
        if action_path:
            return path_or_url_from_string(action_path)

        template = json.loads(self.resolve_value("argo_template") or "{}")
        location = (template.get("archiveLocation") or {}).get("s3")
        if location is None or not isinstance(location.get("key"), str):
            return None

        key = location["key"]
        node_id = self.resolve_value("argo_node_id")
        if node_id:
            key = key.replace(f"/{node_id}", "", 1)
        return UrlString(f"s3://{location['bucket']}/{key}")

    def validate_settings(self) -> None:
        """Validate the Argo template when one is present."""
        raw_template = self.resolve_value("argo_template")
        if not raw_template:
            return
        try:
            template = json.loads(raw_template)
        except json.JSONDecodeError as e:
            raise ValueError(f"ARGO_TEMPLATE is not valid JSON: {e}") from e
        if not isinstance(template, dict):
            raise ValueError("ARGO_TEMPLATE must be a JSON object")
