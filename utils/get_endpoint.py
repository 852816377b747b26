from urllib.parse import quote

from core.config import get_config  # type: ignore


def get_endpoint(base_url: str, key: str, **params: str) -> str:
    """Join `base_url` with the `api_paths` template configured for `key`.

    Path parameters are percent-encoded; `api_version` is filled from the
    salesforce section unless given explicitly.
    """
    _cfg = get_config() or {}
    path = _cfg.get("api_paths", {}).get(key)
    if not path:
        raise ValueError(f"Missing API path for key '{key}' in config.yaml under 'api_paths'")

    values = {"api_version": _cfg.get("salesforce", {}).get("api_version", "v59.0")}
    values.update({name: quote(str(value), safe="") for name, value in params.items()})
    return f"{base_url.rstrip('/')}{path.format(**values)}"
