"""
The four resources served by the workbench.

Each entry is mounted at `/<name>` and stored in the collection
`<COLLECTION_PREFIX><name>`.
"""

from typing import List, Tuple

from workbench.config import settings
from workbench.schemas.document import (
    DatasetDocument,
    ExperimentDocument,
    ModelDocument,
    NotebookDocument,
)
from workbench.services.resource_handler import ResourceConfig


def qualified_collection_name(local_name: str) -> str:
    return f"{settings.collection_prefix}{local_name}"


DATASETS = ResourceConfig(
    name="datasets",
    label="dataset",
    collection=qualified_collection_name("datasets"),
    document_model=DatasetDocument,
)
MODELS = ResourceConfig(
    name="models",
    label="model",
    collection=qualified_collection_name("models"),
    document_model=ModelDocument,
)
EXPERIMENTS = ResourceConfig(
    name="experiments",
    label="experiment",
    collection=qualified_collection_name("experiments"),
    document_model=ExperimentDocument,
)
NOTEBOOKS = ResourceConfig(
    name="notebooks",
    label="notebook",
    collection=qualified_collection_name("notebooks"),
    document_model=NotebookDocument,
)

RESOURCES: Tuple[ResourceConfig, ...] = (DATASETS, MODELS, EXPERIMENTS, NOTEBOOKS)


def collection_names() -> List[str]:
    return [resource.collection for resource in RESOURCES]
