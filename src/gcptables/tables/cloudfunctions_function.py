"""
Table 'gcp_cloudfunctions_function': one row per Cloud Function (v1) in the
active project, across all locations.

Key column: name (fully-qualified, projects/{p}/locations/{l}/functions/{f}).
The iam_policy column is hydrated with a separate getIamPolicy call, only
when it is requested.
"""

from typing import Iterator

from ..models import CloudFunction, Policy
from ..table import (
    Column,
    ColumnType,
    GetConfig,
    ListConfig,
    QueryContext,
    TableDescriptor,
    as_list,
    from_field,
    hydrator,
    split_segment,
    with_prefix,
)
from ..utils.logging import get_logger
from .common import (
    AKA_SCHEME,
    COLUMN_DESCRIPTION_AKAS,
    COLUMN_DESCRIPTION_LOCATION,
    COLUMN_DESCRIPTION_TAGS,
    COLUMN_DESCRIPTION_TITLE,
    project_column,
)

logger = get_logger(__name__)

TABLE_NAME = "gcp_cloudfunctions_function"
AKA_PREFIX = AKA_SCHEME + "cloudfunctions.googleapis.com/"

# projects/{project}/locations/{location}/functions/{function}
FUNCTION_NAME_SEGMENTS = 6
LOCATION_SEGMENT_INDEX = 3


# Hydrate functions


def list_cloud_functions(context: QueryContext, client) -> Iterator[CloudFunction]:
    logger.debug(f"list_cloud_functions project={context.project}")
    yield from client.list_functions(context.parent, context)


def get_cloud_function(context: QueryContext, client, name: str) -> CloudFunction:
    logger.debug(f"get_cloud_function name={name}")
    return client.get_function(name, context)


@hydrator
def get_cloud_function_iam_policy(context: QueryContext, client, function: CloudFunction) -> Policy:
    """IAM policy of the function; the empty policy when none is configured."""
    policy = client.get_iam_policy(function.name, context)
    if policy is None:
        return Policy()
    return policy


# Transform functions

function_akas = from_field(lambda f: f.name).then(with_prefix(AKA_PREFIX)).then(as_list())

location_from_function_name = split_segment("/", FUNCTION_NAME_SEGMENTS, LOCATION_SEGMENT_INDEX)


CLOUDFUNCTIONS_FUNCTION_DESC = TableDescriptor(
    name=TABLE_NAME,
    description="GCP Cloud Function",
    list_config=ListConfig(fn=list_cloud_functions),
    get_config=GetConfig(key_column="name", fn=get_cloud_function),
    columns=(
        # commonly used columns
        Column(
            "name",
            ColumnType.STRING,
            "The name of the function.",
            transform=from_field(lambda f: f.name),
            nullable=False,
        ),
        Column(
            "status",
            ColumnType.STRING,
            "Status of the function deployment (ACTIVE, OFFLINE, CLOUD_FUNCTION_STATUS_UNSPECIFIED, "
            "DEPLOY_IN_PROGRESS, DELETE_IN_PROGRESS, UNKNOWN).",
            transform=from_field(lambda f: f.status),
        ),
        Column(
            "description",
            ColumnType.STRING,
            "User-provided description of a function.",
            transform=from_field(lambda f: f.description),
        ),
        Column(
            "runtime",
            ColumnType.STRING,
            "The runtime in which to run the function.",
            transform=from_field(lambda f: f.runtime),
        ),
        # other columns
        Column(
            "available_memory_mb",
            ColumnType.INT,
            "The amount of memory in MB available for the function.",
            transform=from_field(lambda f: f.available_memory_mb),
        ),
        Column(
            "build_environment_variables",
            ColumnType.JSON,
            "Environment variables that shall be available during build time.",
            transform=from_field(lambda f: f.build_environment_variables),
        ),
        Column(
            "build_id",
            ColumnType.STRING,
            "The Cloud Build ID of the latest successful deployment of the function.",
            transform=from_field(lambda f: f.build_id),
        ),
        Column(
            "entry_point",
            ColumnType.STRING,
            "The name of the function (as defined in source code) that will be executed.",
            transform=from_field(lambda f: f.entry_point),
        ),
        Column(
            "environment_variables",
            ColumnType.JSON,
            "Environment variables that shall be available during function execution.",
            transform=from_field(lambda f: f.environment_variables),
        ),
        Column(
            "event_trigger",
            ColumnType.JSON,
            "A source that fires events in response to a condition in another service.",
            transform=from_field(lambda f: f.event_trigger),
        ),
        Column(
            "https_trigger",
            ColumnType.JSON,
            "An HTTPS endpoint type of source that can be triggered via URL.",
            transform=from_field(lambda f: f.https_trigger),
        ),
        Column(
            "iam_policy",
            ColumnType.JSON,
            "The IAM policy for the function.",
            hydrate=get_cloud_function_iam_policy,
        ),
        Column(
            "ingress_settings",
            ColumnType.STRING,
            "The ingress settings for the function, controlling what traffic can reach it "
            "(INGRESS_SETTINGS_UNSPECIFIED, ALLOW_ALL, ALLOW_INTERNAL_ONLY, ALLOW_INTERNAL_AND_GCLB).",
            transform=from_field(lambda f: f.ingress_settings),
        ),
        Column(
            "labels",
            ColumnType.JSON,
            "Labels that apply to this function.",
            transform=from_field(lambda f: f.labels),
        ),
        Column(
            "max_instances",
            ColumnType.INT,
            "The limit on the maximum number of function instances that may coexist at a given time.",
            transform=from_field(lambda f: f.max_instances),
        ),
        Column(
            "network",
            ColumnType.STRING,
            "The VPC Network that this cloud function can connect to.",
            transform=from_field(lambda f: f.network),
        ),
        Column(
            "service_account_email",
            ColumnType.STRING,
            "The email of the function's service account.",
            transform=from_field(lambda f: f.service_account_email),
        ),
        Column(
            "source_archive_url",
            ColumnType.STRING,
            "The Google Cloud Storage URL, starting with gs://, pointing to the zip archive which "
            "contains the function.",
            transform=from_field(lambda f: f.source_archive_url),
        ),
        Column(
            "source_repository",
            ColumnType.JSON,
            "The source repository where a function is hosted.",
            transform=from_field(lambda f: f.source_repository),
        ),
        Column(
            "source_upload_url",
            ColumnType.STRING,
            "The Google Cloud Storage signed URL used for source uploading.",
            transform=from_field(lambda f: f.source_upload_url),
        ),
        Column(
            "timeout",
            ColumnType.STRING,
            "The function execution timeout. Defaults to 60 seconds.",
            transform=from_field(lambda f: f.timeout),
        ),
        Column(
            "update_time",
            ColumnType.TIMESTAMP,
            "The last update timestamp of the Cloud Function.",
            transform=from_field(lambda f: f.update_time),
        ),
        Column(
            "version_id",
            ColumnType.INT,
            "The version identifier of the Cloud Function. Each deployment attempt results in a new "
            "version of a function being created.",
            transform=from_field(lambda f: f.version_id),
        ),
        Column(
            "vpc_connector",
            ColumnType.STRING,
            "The VPC Network Connector that this cloud function can connect to.",
            transform=from_field(lambda f: f.vpc_connector),
        ),
        Column(
            "vpc_connector_egress_settings",
            ColumnType.STRING,
            "The egress settings for the connector, controlling what traffic is diverted through it "
            "(VPC_CONNECTOR_EGRESS_SETTINGS_UNSPECIFIED, PRIVATE_RANGES_ONLY, ALL_TRAFFIC).",
            transform=from_field(lambda f: f.vpc_connector_egress_settings),
        ),
        # standard columns
        Column(
            "title",
            ColumnType.STRING,
            COLUMN_DESCRIPTION_TITLE,
            transform=from_field(lambda f: f.name),
        ),
        Column(
            "tags",
            ColumnType.JSON,
            COLUMN_DESCRIPTION_TAGS,
            transform=from_field(lambda f: f.labels),
        ),
        Column(
            "akas",
            ColumnType.JSON,
            COLUMN_DESCRIPTION_AKAS,
            transform=function_akas,
        ),
        # standard gcp columns
        project_column(),
        Column(
            "location",
            ColumnType.STRING,
            COLUMN_DESCRIPTION_LOCATION,
            transform=from_field(lambda f: f.name).then(location_from_function_name),
        ),
    ),
)
