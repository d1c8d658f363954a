"""
predictor.py - 자손 표현형 예측 (교배 엔진)
좌위별 퍼넷 분포의 곱 -> 표현형 이름 -> 같은 라벨 합산
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .genetics import GeneticsEngine
from .models import (
    AllelicExclusivityError, ChildZygosity, Individual,
    PredictionResult, Registry
)
from .phenotype import PhenotypeNamer
from .registry import RegistryLoader
from .table import compute_common_tags
from .validator import ExclusivityValidator, check_same_species

logger = logging.getLogger(__name__)


@dataclass
class Combination:
    """자손 조합 하나 (누적 확률, 좌위별 접합 상태)"""
    probability: float
    zygosities: Dict[str, ChildZygosity] = field(default_factory=dict)


def combine_loci(registry: Registry, parent_a: Individual, parent_b: Individual) -> List[Combination]:
    """
    모든 좌위의 결합 분포 (독립 분리 가정)

    확률 1.0의 빈 조합에서 시작해 좌위마다 확률이 0이 아닌
    접합 상태별로 가지를 늘려감
    """
    combos = [Combination(1.0)]

    for locus in registry.loci:
        distribution = GeneticsEngine.punnett_locus(
            locus.type,
            GeneticsEngine.extract_genotype(parent_a, locus),
            GeneticsEngine.extract_genotype(parent_b, locus)
        )

        expanded = []
        for combo in combos:
            for zygosity, p in distribution.items():
                if p > 0:
                    expanded.append(Combination(
                        probability=combo.probability * p,
                        zygosities={**combo.zygosities, locus.name: zygosity}
                    ))
        combos = expanded

    return combos


def apportion_percentages(probabilities: List[float]) -> List[float]:
    """
    확률(0~1) 목록 -> 백분율(소수점 둘째 자리), 합계가 정확히 100.00이 되도록 배분

    0.01% 단위로 내림한 뒤 남은 단위를 나머지가 큰 순서대로 하나씩 더함
    (나머지가 같으면 앞쪽 항목 우선)
    """
    if not probabilities:
        return []

    total = sum(probabilities)
    scaled = [p / total * 10000 for p in probabilities]
    units = [math.floor(s + 1e-9) for s in scaled]
    remaining = 10000 - sum(units)

    order = sorted(range(len(scaled)), key=lambda i: units[i] - scaled[i])
    for i in order[:max(remaining, 0)]:
        units[i] += 1

    return [u / 100 for u in units]


def predict_offspring(
    registry: Registry,
    parent_a: Individual,
    parent_b: Individual
) -> List[PredictionResult]:
    """
    자손 표현형 예측

    호출 전에 validate_exclusivity 결과가 비어 있어야 함

    Args:
        registry: 종 레지스트리
        parent_a: 부모 A
        parent_b: 부모 B

    Returns:
        확률 내림차순 PredictionResult 목록 (백분율, 소수점 둘째 자리)
    """
    namer = PhenotypeNamer(registry)
    combos = combine_loci(registry, parent_a, parent_b)

    # 라벨 -> [확률, 태그, 발현 여부] (삽입 순서 유지)
    by_label: Dict[str, list] = {}
    for combo in combos:
        label, tags, is_visual = namer.name(combo.zygosities)
        entry = by_label.get(label)
        if entry is None:
            by_label[label] = [combo.probability, list(tags), is_visual]
            continue
        entry[0] += combo.probability
        entry[1].extend(t for t in tags if t not in entry[1])
        entry[2] = entry[2] or is_visual

    ranked = sorted(by_label.items(), key=lambda item: item[1][0], reverse=True)

    logger.debug("Cross %s x %s: %d combinations, %d phenotypes",
                 parent_a.id, parent_b.id, len(combos), len(ranked))

    percentages = apportion_percentages([entry[0] for _, entry in ranked])

    return [
        PredictionResult(
            phenotype_label=label,
            probability=percent,
            is_visual=visual,
            contributing_genes=genes
        )
        for (label, (_, genes, visual)), percent in zip(ranked, percentages)
    ]


@dataclass
class PairingOutcome:
    """교배 계산 전체 결과"""
    registry: Registry
    predictions: List[PredictionResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    common_traits: List[str] = field(default_factory=list)
    is_fallback: bool = False

    def to_dict(self) -> Dict:
        return {
            'species': self.registry.species.label,
            'registry_id': self.registry.species.id,
            'is_fallback': self.is_fallback,
            'warnings': list(self.warnings),
            'common_traits': list(self.common_traits),
            'predictions': [p.to_dict() for p in self.predictions]
        }


class BreedingCalculator:
    """
    교배 계산 파이프라인
    1. 종 일치 확인 (불일치 시 SpeciesMismatchError)
    2. 레지스트리 해석 (실패 시 기본 레지스트리 + 경고)
    3. 대립유전자 배타성 검증 (위반 시 AllelicExclusivityError, 교배 계산 안 함)
    4. 자손 예측
    """

    def __init__(self, loader: Optional[RegistryLoader] = None):
        self.loader = loader or RegistryLoader()

    async def calculate(self, parent_a: Individual, parent_b: Individual) -> PairingOutcome:
        check_same_species(parent_a, parent_b)

        resolution = await self.loader.resolve(parent_a.species)
        registry = resolution.registry

        violations = ExclusivityValidator(registry).find_violations(parent_a, parent_b)
        if violations:
            raise AllelicExclusivityError(violations)

        predictions = predict_offspring(registry, parent_a, parent_b)
        return PairingOutcome(
            registry=registry,
            predictions=predictions,
            warnings=list(resolution.warnings),
            common_traits=compute_common_tags(predictions),
            is_fallback=resolution.is_fallback
        )
