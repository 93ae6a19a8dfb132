import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Optional

from .errors import ConfigError, ValidationError
from .models import CONFIG_DIR, CONFIG_FILE, Config
from .validation import parse_config, validate_config

logger = logging.getLogger(__name__)


class ConfigManager:
    """Reads and writes the single per-user configuration file.

    Every write is validated first and lands through a temp file that is
    renamed over the target, so readers never see a partial file. The file
    holds secrets and is kept at mode 0600.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir is not None else self._get_config_dir()
        self.config_path = self.config_dir / CONFIG_FILE

    def _get_config_dir(self) -> Path:
        return Path.home() / CONFIG_DIR

    def exists(self) -> bool:
        return self.config_path.is_file()

    def read(self) -> Config:
        """Load and validate the configuration, or return the default one if no file exists."""
        if not self.exists():
            logger.debug("Config file does not exist, returning default config")
            return Config()

        started = time.perf_counter()
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Config file is not valid JSON: {e}", str(self.config_path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read config file: {e}", str(self.config_path)) from e

        try:
            config = parse_config(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file: {e}", str(self.config_path)) from e

        logger.debug("Read config %s in %.2fms", self.config_path, (time.perf_counter() - started) * 1000)
        return config

    def write(self, config: Config) -> None:
        """Validate and atomically persist the configuration."""
        validate_config(config)
        logger.debug("Config validation passed before write")

        started = time.perf_counter()
        content = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)

        try:
            if not self.config_dir.exists():
                logger.debug("Creating config directory: %s", self.config_dir)
                self.config_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

            fd, tmp_path = tempfile.mkstemp(prefix=".config.", suffix=".tmp", dir=self.config_dir)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(content)
                    f.write("\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.chmod(tmp_path, 0o600)
                os.replace(tmp_path, self.config_path)
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)

            self.config_path.chmod(0o600)
        except OSError as e:
            raise ConfigError(f"Failed to write config file: {e}", str(self.config_path)) from e

        logger.debug("Config written to %s in %.2fms", self.config_path, (time.perf_counter() - started) * 1000)

    def load_or_initialize(self) -> Config:
        """Read the configuration, creating a default file on first run."""
        if not self.exists():
            logger.debug("No config file found, initializing with default config")
            config = Config()
            self.write(config)
            return config
        return self.read()
