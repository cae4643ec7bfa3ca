"""
Harness configuration.

Centralises every environment variable the harness reads, with its
default value.  The monitoring core and the pipeline never read the
environment themselves; they receive these values as plain strings.

Uses ``pydantic_settings.BaseSettings`` for automatic environment
variable binding, type coercion, and validation.
"""

from __future__ import annotations

import functools
import pathlib

import pydantic
import pydantic_settings

from bridge_e2e.utils import logger

log = logger.create_logger("Config")

DEFAULT_TEST_URL = "https://initia-widget-playground.vercel.app/"


class HarnessSettings(pydantic_settings.BaseSettings):
    """Configuration for one harness run.

    Attributes:
        task_id: Identifier embedded in log lines, screenshot
            and result file names.
        test_url: Base URL of the bridge application.
        extension_path: Unpacked wallet extension directory.
        user_data_dir: Pre-provisioned browser profile holding
            the onboarded wallet.
        screenshots_dir: Directory for checkpoint screenshots.
        results_dir: Directory for persisted result files.
        logs_dir: Directory for log files when ``WRITE_TO_FILE``
            is enabled.
        headless: Launch the browser without a window.
        show_verbose: Log every observed request and response.
    """

    task_id: str = pydantic.Field(default="0", validation_alias="TASKID")
    test_url: str = pydantic.Field(default=DEFAULT_TEST_URL, validation_alias="TEST_URL")
    extension_path: str = pydantic.Field(
        default="./extensions/keplr", validation_alias="KEPLR_EXTENSION_PATH"
    )
    user_data_dir: str = pydantic.Field(
        default="./.wallet-profile", validation_alias="WALLET_PROFILE_DIR"
    )
    screenshots_dir: str = pydantic.Field(default="screenshots", validation_alias="SCREENSHOTS_DIR")
    results_dir: str = pydantic.Field(default="results", validation_alias="RESULTS_DIR")
    logs_dir: str = pydantic.Field(default=".logs", validation_alias="LOGS_DIR")
    headless: bool = pydantic.Field(default=False, validation_alias="HEADLESS")
    show_verbose: bool = pydantic.Field(default=False, validation_alias="SHOW_VERBOSE")

    def validate_config(self) -> bool:
        """Check that the wallet extension can be loaded.

        Returns:
            True when ``extension_path`` is an existing directory.
        """
        valid = pathlib.Path(self.extension_path).is_dir()
        if not valid:
            log.warn("Wallet extension directory not found", {"extensionPath": self.extension_path})
        return valid


@functools.lru_cache(maxsize=1)
def get_settings() -> HarnessSettings:
    """Return the process-wide settings, read once from the environment."""
    return HarnessSettings()
