"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from typing import Mapping, Optional
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# environment variable -> (config key, converter)
ENV_OVERRIDES = {
    'TARGET_LANG': ('target_language', str),
    'OPENAI_MODEL': ('openai_model', str),
    'MAX_CHUNK_SIZE': ('max_chunk_chars', int),
    'MAX_TOKENS': ('max_output_tokens', int),
    'SKIP_SAME_LANGUAGE': ('skip_same_language', lambda value: value.strip().lower() != 'false'),
    'LOG_LEVEL': ('log_level', lambda value: value.strip().upper()),
}

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str, environ: Optional[Mapping[str, str]] = None) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Values from the environment variables in ENV_OVERRIDES take
        precedence over the file.

        Args:
            config_path: The path to the YAML configuration file.
            environ: Environment to read overrides from. Defaults to os.environ.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML, if there
                              are other reading errors, or an override is invalid.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
             logger.error(f"Configuration path is not a file: {config_path}")
             raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if config is None:
            config = {} # empty file
        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        self._apply_env_overrides(config, os.environ if environ is None else environ)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    @staticmethod
    def _apply_env_overrides(config: dict, environ: Mapping[str, str]) -> None:
        for env_name, (key, convert) in ENV_OVERRIDES.items():
            raw_value = environ.get(env_name)
            if raw_value is None or raw_value == '':
                continue
            try:
                config[key] = convert(raw_value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for environment variable {env_name}: {raw_value!r}") from e
            logger.info(f"Overriding '{key}' from environment variable {env_name}")
