from infra.pipeline.logger import PipelineLogger, create_logger
from infra.pipeline.registry import (
    DERIVATIVE_DEFINITIONS,
    DERIVATIVE_DSIDS,
    get_derivative_definition,
    get_invoker_class,
    get_invoker_instance,
)

__all__ = [
    # Logger
    "PipelineLogger",
    "create_logger",

    # Registry
    "DERIVATIVE_DEFINITIONS",
    "DERIVATIVE_DSIDS",
    "get_derivative_definition",
    "get_invoker_class",
    "get_invoker_instance",
]
