"""
Resolvers for the two initialization tasks.

Both resolvers only read files. File existence checks and reads run in a
worker thread so the event loop is never blocked while the other resolver
makes progress.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from .context import Credentials, ProjectConfig
from .errors import ConfigurationError, FormatError, ValidationError

logger = logging.getLogger(__name__)

AEROBATIC_SECTION = "_aerobatic"


async def load_credentials(credentials_file: Path) -> Credentials:
    """Load cached credentials written by ``yoke login``.

    Args:
        credentials_file: Path to the per-user credentials file

    Returns:
        Credentials with non-empty userId and secretKey

    Raises:
        ConfigurationError: The file is missing or lacks a field
        FormatError: The file cannot be read as JSON
    """
    logger.debug(f"Loading credentials from {credentials_file}")

    exists = await asyncio.to_thread(credentials_file.exists)
    if not exists:
        raise ConfigurationError(
            "No .aerobatic file exists. First run 'yoke login'",
            path=str(credentials_file)
        )

    try:
        contents = await asyncio.to_thread(credentials_file.read_bytes)
        data = json.loads(contents)
    except (OSError, ValueError) as e:
        raise FormatError(
            "Could not parse .aerobatic file JSON. Try re-running 'yoke login'",
            path=str(credentials_file),
            original_error=e
        ) from e

    user_id = data.get("userId") if isinstance(data, dict) else None
    secret_key = data.get("secretKey") if isinstance(data, dict) else None
    if not _is_present(user_id) or not _is_present(secret_key):
        raise ConfigurationError(
            "Missing information in .aerobatic file. Try re-running 'yoke login'",
            path=str(credentials_file)
        )

    credentials = Credentials(user_id=user_id, secret_key=secret_key)
    logger.debug(f"Credentials loaded, userId={credentials.user_id}")
    return credentials


async def load_project_config(
    manifest_path: Path,
    app_id_override: Optional[str] = None
) -> ProjectConfig:
    """Load the deployment configuration from the project manifest.

    An explicit appId always replaces the one stored in the manifest. The
    manifest's ``version`` and ``scripts`` are always copied into the
    result, replacing whatever the section held under those names.

    Args:
        manifest_path: Path to package.json
        app_id_override: appId given on the command line

    Returns:
        ProjectConfig with a resolved appId

    Raises:
        ConfigurationError: The manifest or its _aerobatic section is missing
        FormatError: The manifest is not valid JSON or has mistyped values
        ValidationError: No appId can be resolved
    """
    logger.debug(f"Loading project configuration from {manifest_path}")

    exists = await asyncio.to_thread(manifest_path.exists)
    if not exists:
        raise ConfigurationError(
            f"File {manifest_path} does not exist. Run 'npm init' to create it.",
            path=str(manifest_path)
        )

    contents = await asyncio.to_thread(manifest_path.read_bytes)
    try:
        manifest = json.loads(contents)
    except ValueError as e:
        raise FormatError(
            f"File {manifest_path} is not valid JSON",
            path=str(manifest_path),
            original_error=e
        ) from e

    section = manifest.get(AEROBATIC_SECTION) if isinstance(manifest, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(
            "Missing _aerobatic section in package.json file. "
            "Try re-running the command 'yoke bind-app'.",
            path=str(manifest_path)
        )

    config: Dict[str, Any] = dict(section)
    if app_id_override:
        config["appId"] = app_id_override

    if not config.get("appId"):
        raise ValidationError(
            "Missing appId in _aerobatic section of package.json. "
            "Try re-running the command 'yoke bind-app'.",
            field="appId"
        )

    config["appVersion"] = manifest.get("version")
    config["npmScripts"] = manifest.get("scripts") or {}

    try:
        project_config = ProjectConfig.model_validate(config)
    except PydanticValidationError as e:
        raise FormatError(
            f"Invalid _aerobatic section in {manifest_path}: "
            f"{e.error_count()} invalid value(s)",
            path=str(manifest_path),
            original_error=e
        ) from e

    logger.debug(f"Project configuration loaded, appId={project_config.app_id}")
    return project_config


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and value != ""
