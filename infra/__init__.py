from infra.config import PagetextConfig, get_config
from infra.storage import (
    Repository,
    ObjectStorage,
    Datastream,
    RelationshipStore,
)
from infra.process import (
    ProcessResult,
    ProcessRunner,
    SubprocessRunner,
)
from infra.pipeline import (
    PipelineLogger,
    create_logger,
)

__all__ = [
    "PagetextConfig",
    "get_config",

    "Repository",
    "ObjectStorage",
    "Datastream",
    "RelationshipStore",

    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",

    "PipelineLogger",
    "create_logger",
]
