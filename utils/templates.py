"""`{{placeholder}}` substitution for Postman request templates.

Matching is literal: a key is never interpreted as a pattern. Variables are
applied one after another in the mapping's iteration order, so when one
placeholder name is contained in another (or a value itself contains a
placeholder) the result depends on that order.
"""
from typing import Mapping

INSTANCE_URL = "instance_url"
ACCESS_TOKEN = "access_token"


def placeholder(name: str) -> str:
    return "{{" + name + "}}"


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """Replace every `{{key}}` in `template` with its value."""
    result = template
    for key, value in variables.items():
        result = result.replace(placeholder(key), str(value))
    return result


def apply_instance_url(url: str, instance_url: str) -> str:
    # first occurrence only, applied before caller variables
    return url.replace(placeholder(INSTANCE_URL), instance_url, 1)


def apply_access_token(value: str, access_token: str) -> str:
    return value.replace(placeholder(ACCESS_TOKEN), access_token)
