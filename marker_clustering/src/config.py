#!/usr/bin/env python3
"""
Configuration file for the marker clustering map

This file contains the clustering parameters, display settings and data
paths that need to be configured for different users or environments.

The configuration is read from config.ini (or config_local.ini if it exists).
"""

import os
import subprocess
import configparser

_BOOLEAN_STATES = configparser.ConfigParser.BOOLEAN_STATES


def get_git_repo_root():
    """Get the root directory of the current git repository"""
    try:
        # Try to get the git repository root
        result = subprocess.run(
            ['git', 'rev-parse', '--show-toplevel'],
            capture_output=True,
            text=True,
            cwd=os.path.dirname(os.path.abspath(__file__))
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (subprocess.SubprocessError, FileNotFoundError):
        pass

    # Fallback: the project root holding the marker_clustering package
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Config:
    """Configuration class for clustering parameters, display settings and paths"""

    DEFAULTS = {
        'clustering': {
            'enabled': 'true',
            'distance_threshold': '80.0',
            'max_cluster_scale_factor': '2.0',
            'debug': 'false',
        },
        'display': {
            'marker_size': '14',
            'initial_zoom': '2',
            'plot_width_px': '1200',
        },
        'paths': {
            'data_dir': '',
        },
        'files': {
            'markers_csv': '',
            'latitude_column': 'latitude',
            'longitude_column': 'longitude',
        },
    }

    def __init__(self, config_file=None):
        # Auto-detect project root from git repository
        self._detected_project_root = get_git_repo_root()

        # Load configuration from INI file
        self._load_config(config_file)

        # Validate and set up settings
        self._setup_settings()

    def _load_config(self, config_file=None):
        """Load configuration from INI file"""
        self.config_parser = configparser.ConfigParser(
            interpolation=configparser.ExtendedInterpolation()
        )
        self.config_parser.read_dict(self.DEFAULTS)

        if config_file is None:
            # Try config_local.ini first (gitignored), then config.ini
            config_files = [
                os.path.join(self._detected_project_root, 'config_local.ini'),
                os.path.join(self._detected_project_root, 'config.ini')
            ]

            for config_file in config_files:
                if os.path.exists(config_file):
                    print(f"📋 Loading configuration from: {config_file}")
                    self.config_parser.read(config_file)
                    self._config_file_used = config_file
                    break
            else:
                raise FileNotFoundError(
                    f"No configuration file found. Expected one of: {config_files}\n"
                    f"Please create config_local.ini or ensure config.ini exists."
                )
        else:
            if not os.path.exists(config_file):
                raise FileNotFoundError(f"Configuration file not found: {config_file}")
            print(f"📋 Loading configuration from: {config_file}")
            self.config_parser.read(config_file)
            self._config_file_used = config_file

    def _expand_path(self, path_str):
        """Expand environment variables and resolve paths"""
        if path_str:
            return os.path.expandvars(os.path.expanduser(path_str))
        return path_str

    def _get_bool(self, section, option):
        value = self.config_parser.get(section, option).strip().lower()
        if value not in _BOOLEAN_STATES:
            raise ValueError(f"[{section}] {option} must be a boolean, got '{value}'")
        return _BOOLEAN_STATES[value]

    def _get_float(self, section, option):
        value = self.config_parser.get(section, option)
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"[{section}] {option} must be a number, got '{value}'")

    def _get_int(self, section, option):
        value = self.config_parser.get(section, option)
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"[{section}] {option} must be an integer, got '{value}'")

    def _setup_settings(self):
        """Set up all settings from configuration"""

        # Clustering parameters
        self.clustering_enabled = self._get_bool('clustering', 'enabled')
        self.distance_threshold = self._get_float('clustering', 'distance_threshold')
        self.max_cluster_scale_factor = self._get_float('clustering', 'max_cluster_scale_factor')
        self.debug = self._get_bool('clustering', 'debug')

        if self.distance_threshold <= 0:
            raise ValueError(
                f"[clustering] distance_threshold must be positive, got {self.distance_threshold}"
            )
        if self.max_cluster_scale_factor < 1.0:
            raise ValueError(
                f"[clustering] max_cluster_scale_factor must be >= 1.0, got {self.max_cluster_scale_factor}"
            )

        # Display settings
        self.marker_size = self._get_float('display', 'marker_size')
        self.initial_zoom = self._get_int('display', 'initial_zoom')
        self.plot_width_px = self._get_int('display', 'plot_width_px')

        # Data paths
        self.data_dir = self._expand_path(self.config_parser.get('paths', 'data_dir')) or None
        self.latitude_column = self.config_parser.get('files', 'latitude_column')
        self.longitude_column = self.config_parser.get('files', 'longitude_column')

        # Project paths - use auto-detected git repository root
        self.project_root = self._detected_project_root

    def get_markers_csv(self):
        """Get path to the marker CSV file, or None if not configured"""
        filename = self.config_parser.get('files', 'markers_csv')
        if not filename:
            return None
        expanded_path = self._expand_path(filename)
        if os.path.isabs(expanded_path):
            return expanded_path
        if self.data_dir:
            return os.path.join(self.data_dir, expanded_path)
        return os.path.join(self.project_root, expanded_path)

    def has_markers_csv(self):
        """Check if the marker CSV file is available"""
        markers_csv = self.get_markers_csv()
        return markers_csv is not None and os.path.exists(markers_csv)

    def get_clustering_settings(self):
        """Keyword arguments for MarkerClusterEngine"""
        return {
            'clustering': self.clustering_enabled,
            'distance_threshold': self.distance_threshold,
            'max_cluster_scale_factor': self.max_cluster_scale_factor,
            'debug': self.debug,
        }

    def create_engine(self):
        """Create a clustering engine configured from the [clustering] section"""
        from marker_clustering.src.clustering import MarkerClusterEngine

        return MarkerClusterEngine(**self.get_clustering_settings())

    def validate_paths(self):
        """Validate that configured paths exist and return status"""
        issues = []

        if self.data_dir and not os.path.exists(self.data_dir):
            issues.append(f"❌ Data directory: {self.data_dir} does not exist")
        elif self.data_dir:
            print(f"✅ Data directory: {self.data_dir}")

        markers_csv = self.get_markers_csv()
        if markers_csv is None:
            print("⚠️  Marker CSV: not configured (optional)")
        elif not os.path.exists(markers_csv):
            print(f"⚠️  Marker CSV: {markers_csv} does not exist (optional)")
        else:
            print(f"✅ Marker CSV: {markers_csv}")

        return len(issues) == 0, issues

    def print_config_summary(self):
        """Print a summary of current configuration"""
        print("=== Marker Clustering Configuration ===")
        print(f"Configuration file: {self._config_file_used}")
        print(f"Project root (auto-detected): {self.project_root}")
        print("")
        print("Clustering:")
        print(f"  Enabled: {self.clustering_enabled}")
        print(f"  Distance threshold: {self.distance_threshold} px")
        print(f"  Max cluster scale factor: {self.max_cluster_scale_factor}")
        print("")
        print("Display:")
        print(f"  Marker size: {self.marker_size} px")
        print(f"  Initial zoom: {self.initial_zoom}")
        print(f"  Plot width: {self.plot_width_px} px")
        print("")
        print("Data:")
        print(f"  Data directory: {self.data_dir}")
        print(f"  Marker CSV: {self.get_markers_csv()}")
        print("=======================================")


# Global configuration instance (lazy initialization)
_config = None


def get_config(config_file=None):
    """Get the global configuration instance or create a new one with custom config file"""
    global _config

    if config_file:
        # Return a new instance with custom config file (don't update global)
        return Config(config_file)

    # Return or create the global instance
    if _config is None:
        _config = Config()
    return _config


class _ConfigProxy:
    """Proxy object for lazy config initialization"""
    def __getattr__(self, name):
        return getattr(get_config(), name)

    def __dir__(self):
        return dir(get_config())


config = _ConfigProxy()


def validate_environment():
    """Validate the current environment and return status"""
    return get_config().validate_paths()


# Environment variables fallback
def from_env(var_name, default_value):
    """Get value from environment variable with fallback to default"""
    return os.environ.get(var_name, default_value)


class ConfigFromEnv(Config):
    """Configuration class that reads from environment variables with INI fallback"""

    def __init__(self, config_file=None):
        super().__init__(config_file)

        # Override with environment variables if they exist
        env_enabled = from_env('MARKER_CLUSTERING_ENABLED', None)
        if env_enabled:
            self.config_parser.set('clustering', 'enabled', env_enabled)
            print(f"🌍 Using MARKER_CLUSTERING_ENABLED from environment: {env_enabled}")

        env_distance = from_env('MARKER_CLUSTER_DISTANCE', None)
        if env_distance:
            self.config_parser.set('clustering', 'distance_threshold', env_distance)
            print(f"🌍 Using MARKER_CLUSTER_DISTANCE from environment: {env_distance}")

        env_data_dir = from_env('MARKER_DATA_DIR', None)
        if env_data_dir:
            self.config_parser.set('paths', 'data_dir', env_data_dir)
            print(f"🌍 Using MARKER_DATA_DIR from environment: {env_data_dir}")

        # Re-setup settings with environment overrides
        self._setup_settings()


if __name__ == "__main__":
    # Test configuration when run directly
    config.print_config_summary()
    is_valid, issues = validate_environment()

    if not is_valid:
        print("\n❌ Configuration issues found:")
        for issue in issues:
            print(f"  {issue}")
        print("\nPlease update the paths in config.ini to match your environment.")
    else:
        print("\n✅ Configuration is valid!")
