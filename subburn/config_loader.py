"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from typing import Optional
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'uploads_dir': 'public/uploads',
    'outputs_dir': 'public/outputs',
    'log_dir': 'logs',
    'log_file': 'subburn.log',
    'whisper_model': 'medium',
    'whisper_language': None,
    'device': 'cuda',
    'whisper_fp16': True,
    'ffmpeg_path': None,
    'dimension': '720p',
    'subtitle_position': 2,
    'subtitle_outline': 3,
    'subtitle_size': 24,
}

class ConfigLoader:
    """Loads configuration settings from a YAML file on top of DEFAULT_CONFIG."""

    def load_config(self, config_path: Optional[str]) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Keys present in the file override the defaults; keys it leaves out
        keep their default value. ``None`` returns the defaults alone.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the merged configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        config = dict(DEFAULT_CONFIG)
        if config_path is None:
            logger.info("No configuration file given, using defaults.")
            return config

        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None:
            logger.warning(f"Configuration file {config_path} is empty, using defaults.")
            return config
        if not isinstance(loaded, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        config.update(loaded)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config
