"""Columns shared by every GCP table."""

from ..table import Column, ColumnType, from_context

COLUMN_DESCRIPTION_TITLE = "Title of the resource."
COLUMN_DESCRIPTION_TAGS = "A map of tags for the resource."
COLUMN_DESCRIPTION_AKAS = "Array of globally unique identifier strings (also known as) for the resource."
COLUMN_DESCRIPTION_PROJECT = "The GCP Project in which the resource is located."
COLUMN_DESCRIPTION_LOCATION = "The GCP multi-region, region, or zone in which the resource is located."

AKA_SCHEME = "gcp://"


def project_column() -> Column:
    return Column(
        name="project",
        type=ColumnType.STRING,
        description=COLUMN_DESCRIPTION_PROJECT,
        transform=from_context(lambda context: context.project),
    )
