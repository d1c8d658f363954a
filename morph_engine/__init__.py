"""
Morph Engine - 뱀 교배 유전 예측 엔진

종별 유전 레지스트리를 기반으로 두 부모의 자손 모프와 확률을 계산하는 엔진
"""

from .models import (
    LocusType,
    Zygosity,
    ChildZygosity,
    GenotypeToken,
    Locus,
    AlleleGroup,
    SpeciesInfo,
    Registry,
    Individual,
    Violation,
    PredictionResult,
    MorphEngineError,
    RegistryError,
    SpeciesMismatchError,
    AllelicExclusivityError
)

from .registry import (
    LoaderConfig,
    RegistryLoader,
    RegistryResolution,
    resolve_registry,
    fallback_registry,
    normalize_species_name
)

from .genetics import GeneticsEngine

from .validator import (
    ExclusivityValidator,
    ValidationReport,
    check_same_species,
    validate_exclusivity
)

from .phenotype import PhenotypeNamer

from .predictor import (
    BreedingCalculator,
    PairingOutcome,
    predict_offspring
)

from .table import (
    PredictionTableGenerator,
    compute_common_tags,
    without_common
)

from .visualizer import (
    ChartConfig,
    PredictionVisualizer
)


__version__ = "1.0.0"
__all__ = [
    # Models
    "LocusType",
    "Zygosity",
    "ChildZygosity",
    "GenotypeToken",
    "Locus",
    "AlleleGroup",
    "SpeciesInfo",
    "Registry",
    "Individual",
    "Violation",
    "PredictionResult",
    "MorphEngineError",
    "RegistryError",
    "SpeciesMismatchError",
    "AllelicExclusivityError",

    # Registry
    "LoaderConfig",
    "RegistryLoader",
    "RegistryResolution",
    "resolve_registry",
    "fallback_registry",
    "normalize_species_name",

    # Genetics
    "GeneticsEngine",

    # Validator
    "ExclusivityValidator",
    "ValidationReport",
    "check_same_species",
    "validate_exclusivity",

    # Prediction
    "PhenotypeNamer",
    "BreedingCalculator",
    "PairingOutcome",
    "predict_offspring",

    # Display
    "PredictionTableGenerator",
    "compute_common_tags",
    "without_common",
    "ChartConfig",
    "PredictionVisualizer",
]
