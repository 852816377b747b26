import copy
import os
import yaml


DEFAULT_CONFIG = {
    "salesforce": {
        "login_url": "https://login.salesforce.com",
        "api_version": "v59.0",
    },
    "postman": {
        "api_url": "https://api.getpostman.com",
        "api_key_header": "X-API-Key",
    },
    "http": {
        "timeout": 30.0,
    },
    "api_paths": {
        "oauth_token": "/services/oauth2/token",
        "query": "/services/data/{api_version}/query",
        "sobject": "/services/data/{api_version}/sobjects/{sobject}",
        "sobject_record": "/services/data/{api_version}/sobjects/{sobject}/{id}",
        "sobject_describe": "/services/data/{api_version}/sobjects/{sobject}/describe",
        "collection": "/collections/{collection_id}",
    },
    "logging": {
        "level": "INFO",
        "logs_dir": "logs",
        "file_name": "server.log",
    },
}


def _merge(base, override):
    """Recursively merge `override` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    _instance = None
    _config = None
    config_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "config.yaml"))

    def __new__(cls):
        """
        Create a singleton instance of ConfigLoader.
        Loads configuration from YAML file on first instantiation.
        """
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._load_config()
        return cls._instance

    @classmethod
    def _load_config(cls):
        """
        Load config.yaml over the built-in defaults into the class variable _config.
        A missing file leaves the defaults in place.
        """
        file_config = {}
        if os.path.isfile(cls.config_path):
            with open(cls.config_path, "r") as f:
                file_config = yaml.safe_load(f) or {}
        cls._config = _merge(DEFAULT_CONFIG, file_config)

    @classmethod
    def reset(cls):
        """Forget the loaded configuration so the next access reloads it."""
        cls._instance = None
        cls._config = None

    def get_config(self):
        """
        Return the loaded configuration dictionary.
        """
        return self._config


def get_config():
    """
    Helper function to get the singleton configuration instance's config dictionary.
    """
    return ConfigLoader().get_config()
