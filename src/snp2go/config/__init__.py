from .loader import apply_overrides, load_config, load_config_with_overrides
from .schema import PipelineConfig, AnnotationConfig, WindowConfig, EnrichmentConfig

__all__ = [
    "apply_overrides",
    "load_config",
    "load_config_with_overrides",
    "PipelineConfig",
    "AnnotationConfig",
    "WindowConfig",
    "EnrichmentConfig",
]
