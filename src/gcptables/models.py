"""Decoded Cloud Functions API payloads.

Attributes are snake_case; the API's camelCase names are accepted as aliases
and kept when dumping with ``by_alias=True``. Models are frozen once decoded.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from gcptables.utils.time import parse_rfc3339


class ApiModel(BaseModel):
    """Base for API payloads: camelCase aliases, frozen, unknown fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )


class SourceRepository(ApiModel):
    url: Optional[str] = None
    deployed_url: Optional[str] = None


class CloudFunction(ApiModel):
    """One deployed function as returned by the list and get endpoints."""

    name: str
    description: Optional[str] = None
    status: Optional[str] = None
    entry_point: Optional[str] = None
    runtime: Optional[str] = None
    timeout: Optional[str] = None
    available_memory_mb: Optional[int] = None
    service_account_email: Optional[str] = None
    update_time: Optional[datetime] = None
    version_id: Optional[int] = None  # int64, sent as a JSON string
    labels: Dict[str, str] = Field(default_factory=dict)
    environment_variables: Dict[str, str] = Field(default_factory=dict)
    build_environment_variables: Dict[str, str] = Field(default_factory=dict)
    network: Optional[str] = None
    max_instances: Optional[int] = None
    vpc_connector: Optional[str] = None
    vpc_connector_egress_settings: Optional[str] = None
    ingress_settings: Optional[str] = None
    build_id: Optional[str] = None
    source_archive_url: Optional[str] = None
    source_repository: Optional[SourceRepository] = None
    source_upload_url: Optional[str] = None
    https_trigger: Optional[Dict[str, Any]] = None
    event_trigger: Optional[Dict[str, Any]] = None

    @field_validator("update_time", mode="before")
    @classmethod
    def _parse_update_time(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_rfc3339(value)
        return value


class ListFunctionsPage(ApiModel):
    """One page of the functions list endpoint."""

    functions: List[CloudFunction] = Field(default_factory=list)
    next_page_token: Optional[str] = None
    unreachable: List[str] = Field(default_factory=list)


class Binding(ApiModel):
    role: str
    members: List[str] = Field(default_factory=list)
    condition: Optional[Dict[str, Any]] = None


class AuditConfig(ApiModel):
    service: str
    audit_log_configs: List[Dict[str, Any]] = Field(default_factory=list)


class Policy(ApiModel):
    """
    IAM policy attached to a function.

    ``Policy()`` is the empty policy: no bindings, no audit configs. It stands
    for "no policy configured", which is a normal state for most functions.
    """

    version: Optional[int] = None
    etag: Optional[str] = None
    bindings: List[Binding] = Field(default_factory=list)
    audit_configs: List[AuditConfig] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.bindings and not self.audit_configs
