"""Desired-state models for Vault reconciliation.

Auth methods are tagged by ``type``: kubernetes, github, aws and ldap get
their own model, anything else is enabled as a GenericAuth. Every model
accepts unknown fields so server-side schema additions pass straight
through to Vault.
"""

from typing import Annotated, Any, Dict, List, Optional, Type, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)


class SpecModel(BaseModel):
    """Base for all desired-state models."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def extra_fields(self) -> Dict[str, Any]:
        """Fields not declared on the model, passed through untouched."""
        return dict(self.model_extra or {})


def _mount_path(path: Optional[str], default: str) -> str:
    return (path or default).strip("/")


def _require_names(value: Any) -> Any:
    """Every role is written to .../role/{name}, so a name is mandatory."""
    if value is None:
        return []
    for role in value:
        if not isinstance(role, dict) or "name" not in role:
            raise ValueError("every role needs a 'name'")
    return value


class PolicySpec(SpecModel):
    """A named ACL policy, written with overwrite semantics."""

    name: str
    rules: str


class AuthMethodSpec(SpecModel):
    """Common fields of every auth method."""

    type: str
    path: Optional[str] = None
    description: Optional[str] = None

    @property
    def mount_path(self) -> str:
        """Mount path: the explicit ``path`` or the type name."""
        return _mount_path(self.path, self.type)


class KubernetesAuth(AuthMethodSpec):
    roles: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    @classmethod
    def roles_named(cls, value: Any) -> Any:
        return _require_names(value)


class GithubAuth(AuthMethodSpec):
    config: Dict[str, Any] = Field(default_factory=dict)
    # {"teams": {"dev": "dev-policy"}, "users": {"alice": "admin"}}
    mappings: Dict[str, Dict[str, str]] = Field(default_factory=dict, alias="map")


class AwsAuth(AuthMethodSpec):
    config: Dict[str, Any] = Field(default_factory=dict)
    roles: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    @classmethod
    def roles_named(cls, value: Any) -> Any:
        return _require_names(value)


class LdapAuth(AuthMethodSpec):
    config: Dict[str, Any] = Field(default_factory=dict)
    groups: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    users: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class GenericAuth(AuthMethodSpec):
    """Any other auth type: enabled, and ``config`` written if present."""

    config: Optional[Dict[str, Any]] = None


AUTH_METHOD_TYPES: Dict[str, Type[AuthMethodSpec]] = {
    "kubernetes": KubernetesAuth,
    "github": GithubAuth,
    "aws": AwsAuth,
    "ldap": LdapAuth,
}


def auth_method_tag(data: Any) -> str:
    """Discriminator: the model tag for raw data or an already-built model."""
    method_type = data.get("type") if isinstance(data, dict) else getattr(data, "type", None)
    return method_type if method_type in AUTH_METHOD_TYPES else "generic"


AuthMethod = Annotated[
    Union[
        Annotated[KubernetesAuth, Tag("kubernetes")],
        Annotated[GithubAuth, Tag("github")],
        Annotated[AwsAuth, Tag("aws")],
        Annotated[LdapAuth, Tag("ldap")],
        Annotated[GenericAuth, Tag("generic")],
    ],
    Discriminator(auth_method_tag),
]


def parse_auth_method(data: Any) -> AuthMethodSpec:
    """Build the typed auth model matching ``data["type"]``."""
    return TypeAdapter(AuthMethod).validate_python(data)


class SecretEngineSpec(SpecModel):
    """A secret engine mount and its nested configuration.

    ``configuration`` maps a category (``config``, ``roles``, ...) to a list
    of named entries; each entry is written to ``{path}/{category}/{name}``.
    """

    type: str
    path: Optional[str] = None
    description: str = ""
    plugin_name: str = ""
    options: Dict[str, str] = Field(default_factory=dict)
    configuration: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)

    @field_validator("options", mode="before")
    @classmethod
    def stringify_options(cls, value: Any) -> Any:
        # Mount options are string-typed on the server (version: 2 -> "2")
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value if value is not None else {}

    @field_validator("configuration", mode="before")
    @classmethod
    def check_entries_named(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            for category, entries in value.items():
                for entry in entries or []:
                    if not isinstance(entry, dict) or "name" not in entry:
                        raise ValueError(
                            f"every '{category}' configuration entry needs a 'name'"
                        )
        return value

    @property
    def mount_path(self) -> str:
        return _mount_path(self.path, self.type)


class ExternalConfig(SpecModel):
    """The full desired state: policies, auth methods and secret engines."""

    policies: List[PolicySpec] = Field(default_factory=list)
    auth: List[AuthMethod] = Field(default_factory=list)
    secrets: List[SecretEngineSpec] = Field(default_factory=list)

    @field_validator("policies", "auth", "secrets", mode="before")
    @classmethod
    def none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

