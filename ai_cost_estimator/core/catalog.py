"""
Model catalog and price lookup.

Holds the built-in price sheets and merges user-defined custom models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .pricing import CostBreakdown, PriceSheet, compute_cost
from .token_counter import UsageProfile


class ModelKind(Enum):
    """Primary modality of a model."""
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    MULTIMODAL = "multimodal"
    EMBEDDING = "embedding"
    AUDIO = "audio"


@dataclass(frozen=True)
class ModelSpec:
    """A priced model as shown in the calculator."""
    id: str
    name: str
    pricing: PriceSheet
    description: str = ""
    context_window: int = 0
    kind: ModelKind = ModelKind.TEXT
    release_date: Optional[str] = None
    is_custom: bool = False

    def __post_init__(self):
        """Validate identity fields."""
        if not self.id or not self.id.strip():
            raise ValueError("model id cannot be empty")
        if self.context_window < 0:
            raise ValueError("context_window cannot be negative")


@dataclass(frozen=True)
class ModelCatalog:
    """Ordered, immutable collection of priced models."""
    models: Tuple[ModelSpec, ...]

    def get_model(self, model_id: str) -> ModelSpec:
        """Get a model by identifier.

        Raises:
            ValueError: If the model is not in the catalog
        """
        for model in self.models:
            if model.id == model_id:
                return model
        raise ValueError(f"Unsupported model: {model_id}")

    def list_models(self) -> List[ModelSpec]:
        """Return all models in declaration order."""
        return list(self.models)

    def with_models(self, extra: Iterable[ModelSpec]) -> "ModelCatalog":
        """Return a new catalog with extra models appended.

        An extra model whose id matches a built-in model replaces it in place.
        """
        merged: Dict[str, ModelSpec] = {model.id: model for model in self.models}
        for model in extra:
            merged[model.id] = model
        return ModelCatalog(tuple(merged.values()))


def compare_models(
    catalog: ModelCatalog,
    usage: UsageProfile
) -> List[Tuple[ModelSpec, CostBreakdown]]:
    """Price one usage profile against every model in the catalog."""
    return [(model, compute_cost(model.pricing, usage)) for model in catalog.models]


# Shared price points (USD per 1M units)
_PRO = PriceSheet(
    input_price_per_million=3.50,
    output_price_per_million=10.50,
    cached_input_price_per_million=0.875,
    cache_storage_price_per_million_per_hour=4.50,
)
_FLASH = PriceSheet(
    input_price_per_million=0.075,
    output_price_per_million=0.30,
    cached_input_price_per_million=0.01875,
    cache_storage_price_per_million_per_hour=1.00,
)
_FLASH_LITE = PriceSheet(
    input_price_per_million=0.0375,
    output_price_per_million=0.15,
    cached_input_price_per_million=0.01,
    cache_storage_price_per_million_per_hour=1.00,
)
_GEMMA = PriceSheet(input_price_per_million=0.06, output_price_per_million=0.06)
_EMBEDDING = PriceSheet(input_price_per_million=0.025, output_price_per_million=0)


MODEL_CATALOG = ModelCatalog((
    ModelSpec(
        id="gemini-3-pro-preview",
        name="Gemini 3 Pro (Preview)",
        description="Latest model with advanced reasoning.",
        context_window=2_097_152,
        kind=ModelKind.MULTIMODAL,
        release_date="2025-02",
        pricing=_PRO,
    ),
    ModelSpec(
        id="gemini-3-pro-image-preview",
        name="Gemini 3 Pro Image",
        description="Image understanding and generation.",
        context_window=1_000_000,
        kind=ModelKind.MULTIMODAL,
        release_date="2025-02",
        pricing=PriceSheet(
            input_price_per_million=3.50,
            output_price_per_million=10.50,
            price_per_image=0.04,
        ),
    ),
    ModelSpec(
        id="gemini-2.5-pro",
        name="Gemini 2.5 Pro",
        description="Balanced performance and cost for complex tasks.",
        context_window=2_000_000,
        kind=ModelKind.MULTIMODAL,
        release_date="2025-01",
        pricing=_PRO,
    ),
    ModelSpec(
        id="gemini-2.5-flash",
        name="Gemini 2.5 Flash",
        description="Fast, efficient model for everyday tasks.",
        context_window=1_000_000,
        kind=ModelKind.MULTIMODAL,
        release_date="2025-01",
        pricing=_FLASH,
    ),
    ModelSpec(
        id="gemini-2.5-flash-lite",
        name="Gemini 2.5 Flash Lite",
        description="Lightweight Flash variant at lower cost.",
        context_window=1_000_000,
        kind=ModelKind.MULTIMODAL,
        release_date="2025-01",
        pricing=_FLASH_LITE,
    ),
    ModelSpec(
        id="gemini-2.5-flash-image",
        name="Gemini 2.5 Flash Image",
        description="Fast image processing.",
        context_window=1_000_000,
        kind=ModelKind.IMAGE,
        release_date="2025-01",
        pricing=PriceSheet(
            input_price_per_million=0.075,
            output_price_per_million=0.30,
            price_per_image=0.035,
        ),
    ),
    ModelSpec(
        id="gemini-2.5-flash-native-audio-preview-09-2025",
        name="Gemini 2.5 Flash Audio",
        description="Native audio processing.",
        context_window=1_000_000,
        kind=ModelKind.AUDIO,
        release_date="2025-09 (Preview)",
        pricing=PriceSheet(
            input_price_per_million=0.075,
            output_price_per_million=0.30,
            price_per_second_of_audio=0.002,
        ),
    ),
    ModelSpec(
        id="gemini-2.0-pro-exp-02-05",
        name="Gemini 2.0 Pro Exp",
        description="Experimental second-generation Pro.",
        context_window=2_000_000,
        kind=ModelKind.MULTIMODAL,
        release_date="2025-02",
        pricing=PriceSheet(
            input_price_per_million=3.50,
            output_price_per_million=10.50,
            cached_input_price_per_million=0.875,
        ),
    ),
    ModelSpec(
        id="gemini-2.0-flash-001",
        name="Gemini 2.0 Flash",
        description="Second-generation Flash.",
        context_window=1_000_000,
        kind=ModelKind.MULTIMODAL,
        release_date="2024-12",
        pricing=PriceSheet(
            input_price_per_million=0.075,
            output_price_per_million=0.30,
            cached_input_price_per_million=0.01875,
        ),
    ),
    ModelSpec(
        id="gemma-3-27b-it",
        name="Gemma 3 27B IT",
        description="High-performance open-weight model.",
        context_window=8192,
        kind=ModelKind.TEXT,
        release_date="2025",
        pricing=_GEMMA,
    ),
    ModelSpec(
        id="gemma-3-12b-it",
        name="Gemma 3 12B IT",
        description="Balance between size and performance.",
        context_window=8192,
        kind=ModelKind.TEXT,
        release_date="2025",
        pricing=_GEMMA,
    ),
    ModelSpec(
        id="gemma-3-4b-it",
        name="Gemma 3 4B IT",
        description="Small, fast model for constrained hardware.",
        context_window=8192,
        kind=ModelKind.TEXT,
        release_date="2025",
        pricing=PriceSheet(input_price_per_million=0.04, output_price_per_million=0.04),
    ),
    ModelSpec(
        id="imagen-4.0-generate-001",
        name="Imagen 4.0",
        description="Latest image generation model.",
        kind=ModelKind.IMAGE,
        release_date="2025",
        pricing=PriceSheet(input_price_per_million=0, output_price_per_million=0, price_per_image=0.045),
    ),
    ModelSpec(
        id="imagen-4.0-fast-generate-001",
        name="Imagen 4.0 Fast",
        description="Faster, cheaper image generation.",
        kind=ModelKind.IMAGE,
        release_date="2025",
        pricing=PriceSheet(input_price_per_million=0, output_price_per_million=0, price_per_image=0.025),
    ),
    ModelSpec(
        id="veo-3.1-generate-preview",
        name="Veo 3.1",
        description="High-fidelity video generation.",
        kind=ModelKind.VIDEO,
        release_date="2025",
        pricing=PriceSheet(
            input_price_per_million=0,
            output_price_per_million=0,
            price_per_second_of_video=0.15,
        ),
    ),
    ModelSpec(
        id="veo-3.1-fast-generate-preview",
        name="Veo 3.1 Fast",
        description="Fast video generation.",
        kind=ModelKind.VIDEO,
        release_date="2025",
        pricing=PriceSheet(
            input_price_per_million=0,
            output_price_per_million=0,
            price_per_second_of_video=0.08,
        ),
    ),
    ModelSpec(
        id="text-embedding-004",
        name="Text Embedding 004",
        description="Text to vector embeddings.",
        context_window=2048,
        kind=ModelKind.EMBEDDING,
        release_date="2024",
        pricing=_EMBEDDING,
    ),
    ModelSpec(
        id="gemini-embedding-exp-03-07",
        name="Gemini Embedding Exp",
        description="Experimental Gemini embeddings.",
        context_window=32768,
        kind=ModelKind.EMBEDDING,
        release_date="2025-03",
        pricing=_EMBEDDING,
    ),
))
