import os
import tomllib
from pathlib import Path

CONFIG_ENV = 'ECODUP_CONFIG'

SETTING_SIZE_THRESHOLD = 'scan.size_threshold'
SETTING_EXTENSIONS = 'scan.extensions'
SETTING_N_CORES = 'scan.n_cores'
SETTING_HASH_ALGORITHM = 'scan.hash_algorithm'
SETTING_ON_UNREADABLE = 'scan.on_unreadable'
SETTING_LOG_PATH = 'logging.path'
SETTING_LOG_LEVEL = 'logging.level'


class Settings:
    """Read-only access to defaults for the command line tool, loaded from a TOML file.

    The file is located through ``--config`` or the ECODUP_CONFIG environment variable. Without
    either, the settings are empty and every get() returns its default. ``find_duplicates`` itself
    never consults settings; only the CLI does.

    Example settings.toml:
        [scan]
        n_cores = 4
        hash_algorithm = "sha256"
        extensions = ["tif", "nc"]

        [logging]
        path = "/var/log/ecodup.log"
        level = "DEBUG"
    """

    def __init__(self, settings_file: Path | None = None):
        """Load settings from settings_file, if given.

        Raises:
            FileNotFoundError: settings_file was given but does not exist
            tomllib.TOMLDecodeError: settings_file is not valid TOML
        """
        self._settings_file = settings_file
        self._settings: dict = {}

        if settings_file is not None:
            with open(settings_file, 'rb') as f:
                self._settings = tomllib.load(f)

    @classmethod
    def locate(cls, explicit: str | os.PathLike | None = None) -> 'Settings':
        """Load from the explicit path, else from $ECODUP_CONFIG, else return empty settings."""
        if explicit is None:
            explicit = os.environ.get(CONFIG_ENV) or None
        return cls(Path(explicit) if explicit is not None else None)

    @property
    def settings_file(self) -> Path | None:
        return self._settings_file

    def get(self, key: str, default=None):
        """Get a setting by dotted key path.

        Returns the default when any part of the path is missing or an intermediate value is not a table.

        Examples:
            >>> settings.get(SETTING_N_CORES, 1)
            4
            >>> settings.get('nonexistent.key', 'fallback')
            'fallback'
        """
        value = self._settings

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
