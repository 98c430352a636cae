"""
alienshot - stylized derivatives for freshly captured photographs.

Every new capture is run through three filter looks (Ollie, Eiffel, Reel),
each written next to the others in the edited folder, after which the
original is archived.
"""

__version__ = "0.1.0"

from .colorspaces import COLORSPACES as COLORSPACES
from .colorspaces import ColorspaceManager as ColorspaceManager
from .colorspaces import convert as convert
from .colorspaces import merge_channels as merge_channels
from .colorspaces import split_channels as split_channels
from .config import PipelineConfig as PipelineConfig
from .errors import (
    AlienshotError as AlienshotError,
)
from .errors import (
    FilterError as FilterError,
)
from .errors import (
    InputError as InputError,
)
from .errors import (
    OutputError as OutputError,
)
from .errors import (
    RelocationWarning as RelocationWarning,
)
from .filters import FilterPipeline as FilterPipeline
from .filters import apply_eiffel as apply_eiffel
from .filters import apply_ollie as apply_ollie
from .filters import apply_reel as apply_reel
from .image_buffer import ColorSpace as ColorSpace
from .image_buffer import ImageBuffer as ImageBuffer
from .io_utils import ImageCodec as ImageCodec
from .pipeline import (
    FilterOutcome as FilterOutcome,
)
from .pipeline import (
    PhotoPipeline as PhotoPipeline,
)
from .pipeline import (
    ProcessingReport as ProcessingReport,
)
from .pipeline import (
    SourceAsset as SourceAsset,
)
from .processors import ProcessorFactory as ProcessorFactory
from .processors import ProcessorType as ProcessorType
from .recipes import FILTER_REGISTRY as FILTER_REGISTRY
from .recipes import FilterRecipe as FilterRecipe
from .recipes import FilterStep as FilterStep
from .recipes import get_recipe as get_recipe
from .recipes import list_recipes as list_recipes


def list_available_filters():
    """Returns the filter look names in processing order."""
    return [recipe.name for recipe in list_recipes()]


def process(source_path, config=None):
    """
    Process one capture with the default looks.

    Args:
        source_path: Path of the capture
        config: Optional PipelineConfig (defaults to the environment)

    Returns:
        ProcessingReport
    """
    pipeline = PhotoPipeline(config or PipelineConfig.from_env())
    return pipeline.process(source_path)


__all__ = [
    # Data model
    "ImageBuffer",
    "ColorSpace",
    # Colorspaces
    "COLORSPACES",
    "ColorspaceManager",
    "convert",
    "split_channels",
    "merge_channels",
    # Processors and looks
    "ProcessorFactory",
    "ProcessorType",
    "FilterStep",
    "FilterRecipe",
    "FILTER_REGISTRY",
    "get_recipe",
    "list_recipes",
    "FilterPipeline",
    "apply_ollie",
    "apply_eiffel",
    "apply_reel",
    # Orchestration
    "PipelineConfig",
    "ImageCodec",
    "PhotoPipeline",
    "SourceAsset",
    "FilterOutcome",
    "ProcessingReport",
    "process",
    "list_available_filters",
    # Errors
    "AlienshotError",
    "InputError",
    "FilterError",
    "OutputError",
    "RelocationWarning",
]
