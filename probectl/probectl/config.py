"""
Configuration management for probectl
"""

import os
import yaml
from pathlib import Path
from typing import Optional


class Config:
    """Configuration manager for probectl"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".probectl"
        self.config_file = self.config_dir / "config.yaml"
        self._config = None

    def ensure_config_dir(self):
        """Ensure config directory exists"""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> dict:
        """Load configuration from file or environment"""
        if self._config is not None:
            return self._config

        self._config = {}

        # Load from file if exists
        if self.config_file.exists():
            with open(self.config_file, 'r') as f:
                self._config = yaml.safe_load(f) or {}

        # Override with environment variables
        if os.environ.get('PROBECTL_URL'):
            self._config['url'] = os.environ['PROBECTL_URL']
        if os.environ.get('PROBECTL_TOKEN'):
            self._config['token'] = os.environ['PROBECTL_TOKEN']

        return self._config

    def save(self, config: dict):
        """Save configuration to file"""
        self.ensure_config_dir()
        with open(self.config_file, 'w') as f:
            yaml.dump(config, f, default_flow_style=False)
        self._config = config

    def get(self, key: str, default=None):
        """Get configuration value"""
        config = self.load()
        return config.get(key, default)

    def set(self, key: str, value):
        """Set configuration value"""
        config = self.load()
        config[key] = value
        self.save(config)

    @property
    def url(self) -> Optional[str]:
        """Base URL of the siteprobe service"""
        return self.get('url')

    @property
    def token(self) -> Optional[str]:
        """Probe token (HEALTHZ_TOKEN on the server), optional"""
        return self.get('token')


# Global config instance
config = Config()
