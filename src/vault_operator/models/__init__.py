"""Desired-state models and loader."""

from .loader import (
    DEFAULT_CONFIG_FILE,
    expand_env,
    expand_env_values,
    load_external_config,
    parse_external_config,
)
from .spec import (
    AUTH_METHOD_TYPES,
    AuthMethod,
    AuthMethodSpec,
    AwsAuth,
    ExternalConfig,
    GenericAuth,
    GithubAuth,
    KubernetesAuth,
    LdapAuth,
    PolicySpec,
    SecretEngineSpec,
    auth_method_tag,
    parse_auth_method,
)

__all__ = [
    "ExternalConfig",
    "PolicySpec",
    "AuthMethodSpec",
    "KubernetesAuth",
    "GithubAuth",
    "AwsAuth",
    "LdapAuth",
    "GenericAuth",
    "SecretEngineSpec",
    "AUTH_METHOD_TYPES",
    "AuthMethod",
    "auth_method_tag",
    "parse_auth_method",
    "DEFAULT_CONFIG_FILE",
    "expand_env",
    "expand_env_values",
    "load_external_config",
    "parse_external_config",
]
