"""
validator.py - 교배 전 검증 모듈
부모 종 일치 여부, 대립유전자 배타성 검증
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .models import (
    Individual, Registry, SpeciesMismatchError, Violation, Zygosity
)
from .registry import normalize_species_name

logger = logging.getLogger(__name__)


class ValidationLevel(Enum):
    """검증 레벨"""
    ERROR = "ERROR"      # 치명적 오류 (교배 계산 차단)
    WARNING = "WARNING"  # 경고
    INFO = "INFO"        # 정보


@dataclass
class ValidationResult:
    """검증 결과"""
    is_valid: bool
    level: ValidationLevel
    message: str
    details: Dict = field(default_factory=dict)

    def __str__(self):
        return f"[{self.level.value}] {self.message}"


@dataclass
class ValidationReport:
    """전체 검증 보고서"""
    results: List[ValidationResult] = field(default_factory=list)
    violations: List[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """에러가 없으면 유효"""
        return not any(
            r.level == ValidationLevel.ERROR and not r.is_valid
            for r in self.results
        )

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results
                   if r.level == ValidationLevel.ERROR and not r.is_valid)

    def add_result(self, result: ValidationResult):
        self.results.append(result)

    def get_errors(self) -> List[ValidationResult]:
        return [r for r in self.results
                if r.level == ValidationLevel.ERROR and not r.is_valid]

    def to_dict(self) -> Dict:
        return {
            'is_valid': self.is_valid,
            'error_count': self.error_count,
            'violations': [v.to_dict() for v in self.violations],
            'results': [
                {
                    'valid': r.is_valid,
                    'level': r.level.value,
                    'message': r.message,
                    'details': r.details
                }
                for r in self.results
            ]
        }

    def __str__(self):
        lines = [
            "=== Validation report ===",
            f"Result: {'valid' if self.is_valid else 'invalid'}",
            f"Errors: {self.error_count}",
        ]
        for r in self.results:
            status = "✓" if r.is_valid else "✗"
            lines.append(f"  {status} {r}")
        return "\n".join(lines)


def check_same_species(parent_a: Individual, parent_b: Individual) -> str:
    """
    두 부모의 종이 같은지 확인

    Returns:
        정규화된 종 이름

    Raises:
        SpeciesMismatchError: 종 누락 또는 불일치
    """
    species_a = normalize_species_name(parent_a.species)
    species_b = normalize_species_name(parent_b.species)
    if not species_a or not species_b or species_a != species_b:
        raise SpeciesMismatchError(parent_a.species or None, parent_b.species or None)
    return species_a


class ExclusivityValidator:
    """
    대립유전자 배타성 검증기

    배타(exclusive) 그룹 안에서 normal/unknown이 아닌 좌위가
    한 개체에 둘 이상 기록되어 있으면 위반
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    def scan_parent(self, parent: Individual) -> List[Violation]:
        """부모 한 개체의 위반 목록"""
        by_group: Dict[str, List[str]] = {}
        for locus in self.registry.loci:
            if not locus.group:
                continue
            zygosity = parent.get_zygosity(locus.name)
            if zygosity is None or zygosity in (Zygosity.NORMAL, Zygosity.UNKNOWN):
                continue
            by_group.setdefault(locus.group, []).append(locus.label)

        violations = []
        for group_id, genes in by_group.items():
            group = self.registry.get_group(group_id)
            if group and group.exclusive and len(genes) > 1:
                violations.append(Violation(
                    parent_id=parent.id,
                    parent_name=parent.display_name,
                    group_label=group.label,
                    gene_labels=genes
                ))
        return violations

    def find_violations(self, parent_a: Individual, parent_b: Individual) -> List[Violation]:
        """두 부모의 위반 목록 (부모 A 먼저)"""
        violations = self.scan_parent(parent_a) + self.scan_parent(parent_b)
        for v in violations:
            logger.info("Allelic exclusivity violation: %s", v)
        return violations

    def validate(self, parent_a: Individual, parent_b: Individual) -> ValidationReport:
        """
        검증 보고서 생성

        Args:
            parent_a: 부모 A
            parent_b: 부모 B

        Returns:
            ValidationReport 객체
        """
        report = ValidationReport()

        try:
            check_same_species(parent_a, parent_b)
        except SpeciesMismatchError as e:
            report.add_result(ValidationResult(
                is_valid=False,
                level=ValidationLevel.ERROR,
                message=str(e),
                details={'species_a': e.species_a, 'species_b': e.species_b}
            ))

        violations = self.find_violations(parent_a, parent_b)
        report.violations = violations
        for v in violations:
            report.add_result(ValidationResult(
                is_valid=False,
                level=ValidationLevel.ERROR,
                message=f"{v.parent_name} carries more than one allele of {v.group_label}",
                details=v.to_dict()
            ))

        if report.is_valid:
            report.add_result(ValidationResult(
                is_valid=True,
                level=ValidationLevel.INFO,
                message="Pairing validation passed"
            ))

        return report


def validate_exclusivity(
    parent_a: Individual,
    parent_b: Individual,
    registry: Registry
) -> List[Violation]:
    """
    편의 함수: 대립유전자 배타성 위반 목록

    Args:
        parent_a: 부모 A
        parent_b: 부모 B
        registry: 종 레지스트리

    Returns:
        Violation 목록 (비어 있으면 교배 계산 가능)
    """
    return ExclusivityValidator(registry).find_violations(parent_a, parent_b)
