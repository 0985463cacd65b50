"""Order preparation."""

from perp_connector.execution.context import PipelineContext
from perp_connector.execution.pipeline import OrderPreparationPipeline

__all__ = [
    "OrderPreparationPipeline",
    "PipelineContext",
]
