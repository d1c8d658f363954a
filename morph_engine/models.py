"""
models.py - 핵심 데이터 모델 정의
Locus, AlleleGroup, Registry, Individual, PredictionResult 클래스
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Set


class LocusType(Enum):
    """유전 방식"""
    DOMINANT = "dominant"        # 완전 우성
    RECESSIVE = "recessive"      # 열성
    INCOMPLETE = "incomplete"    # 불완전 우성 (codominant)


class Zygosity(Enum):
    """개체에 기록된 접합 상태"""
    NORMAL = "normal"
    HET = "het"
    SUPER = "super"
    VISUAL = "visual"
    UNKNOWN = "unknown"


class ChildZygosity(Enum):
    """자손의 접합 상태 (unknown 없음)"""
    NORMAL = "normal"
    HET = "het"
    SUPER = "super"
    VISUAL = "visual"


class GenotypeToken(Enum):
    """교배 계산용 2-대립유전자 표기"""
    RR = "RR"
    Rr = "Rr"
    rr = "rr"
    DD = "DD"
    Dd = "Dd"
    dd = "dd"
    UNKNOWN = "??"


class MorphEngineError(Exception):
    """엔진 공통 예외"""


class RegistryError(MorphEngineError):
    """레지스트리 문서 형식 오류"""


class SpeciesMismatchError(MorphEngineError):
    """두 부모의 종이 다르거나 누락됨"""

    def __init__(self, species_a: Optional[str], species_b: Optional[str]):
        self.species_a = species_a
        self.species_b = species_b
        if species_a and species_b:
            message = f"Parents must be the same species: {species_a!r} vs {species_b!r}"
        else:
            message = "Species is missing on one parent"
        super().__init__(message)


class AllelicExclusivityError(MorphEngineError):
    """같은 배타 그룹의 대립유전자를 둘 이상 가진 부모가 있음"""

    def __init__(self, violations: List['Violation']):
        self.violations = violations
        super().__init__(
            "Allelic conflict: "
            + "; ".join(str(v) for v in violations)
        )


def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, dict) or key not in data or data[key] is None:
        raise RegistryError(f"{where}: missing required field '{key}'")
    return data[key]


@dataclass
class Locus:
    """
    유전자 좌위
    - name: 고유 키 (예: 'pastel')
    - label: 표시 이름 (예: 'Pastel')
    - type: 유전 방식
    - aliases: 모프 문자열 매칭용 별칭
    - group: 소속 대립유전자 그룹 id
    """
    name: str
    label: str
    type: LocusType
    aliases: List[str] = field(default_factory=list)
    group: Optional[str] = None

    @property
    def is_recessive(self) -> bool:
        return self.type == LocusType.RECESSIVE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Locus':
        name = _require(data, 'name', 'locus')
        label = _require(data, 'label', f"locus '{name}'")
        type_str = _require(data, 'type', f"locus '{name}'")
        try:
            locus_type = LocusType(type_str)
        except ValueError:
            raise RegistryError(f"locus '{name}': unknown type '{type_str}'") from None
        return cls(
            name=name,
            label=label,
            type=locus_type,
            aliases=list(data.get('aliases') or []),
            group=data.get('group') or None
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {'name': self.name, 'label': self.label, 'type': self.type.value}
        if self.aliases:
            data['aliases'] = list(self.aliases)
        if self.group:
            data['group'] = self.group
        return data


@dataclass
class AlleleGroup:
    """
    대립유전자 그룹 - 같은 위치를 차지하는 대체 대립유전자 묶음
    exclusive가 참이면 한 개체는 그룹 내 비정상 대립유전자를 하나만 가질 수 있음
    """
    id: str
    label: str
    exclusive: bool = False
    allow_interallelic_names: bool = True
    status: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AlleleGroup':
        group_id = _require(data, 'id', 'group')
        return cls(
            id=group_id,
            label=_require(data, 'label', f"group '{group_id}'"),
            exclusive=bool(_require(data, 'exclusive', f"group '{group_id}'")),
            allow_interallelic_names=bool(data.get('allowInterallelicNames', True)),
            status=data.get('status'),
            notes=data.get('notes')
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'label': self.label,
            'exclusive': self.exclusive,
            'allowInterallelicNames': self.allow_interallelic_names
        }
        if self.status:
            data['status'] = self.status
        if self.notes:
            data['notes'] = self.notes
        return data


@dataclass
class SpeciesInfo:
    """종 정보"""
    id: str
    label: str
    aliases: List[str] = field(default_factory=list)


@dataclass
class Registry:
    """
    한 종의 유전 스키마 전체
    좌위 순서는 문서 순서를 유지함 (표현형 태그 순서에 사용)
    """
    species: SpeciesInfo
    loci: List[Locus] = field(default_factory=list)
    groups: List[AlleleGroup] = field(default_factory=list)
    interallelic_phenotypes: Dict[str, Dict[str, str]] = field(default_factory=dict)
    super_names: Dict[str, str] = field(default_factory=dict)
    named_combos: Dict[str, str] = field(default_factory=dict)
    version: int = 1
    meta: Dict[str, Any] = field(default_factory=dict)

    def get_locus(self, name: str) -> Optional[Locus]:
        """이름으로 좌위 조회"""
        for locus in self.loci:
            if locus.name == name:
                return locus
        return None

    def get_group(self, group_id: str) -> Optional[AlleleGroup]:
        """id로 그룹 조회"""
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def loci_in_group(self, group_id: str) -> List[Locus]:
        return [l for l in self.loci if l.group == group_id]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Registry':
        """
        레지스트리 문서(JSON) 파싱 및 검증

        Raises:
            RegistryError: 필수 필드 누락, 좌위 이름 중복, 존재하지 않는 그룹 참조
        """
        if not isinstance(data, dict):
            raise RegistryError("registry document must be an object")

        try:
            return cls._parse(data)
        except (TypeError, AttributeError, ValueError) as e:
            raise RegistryError(f"malformed registry document: {e}") from e

    @classmethod
    def _parse(cls, data: Dict[str, Any]) -> 'Registry':
        species_data = _require(data, 'species', 'registry')
        species = SpeciesInfo(
            id=_require(species_data, 'id', 'species'),
            label=_require(species_data, 'label', 'species'),
            aliases=list(species_data.get('aliases') or [])
        )

        groups = [AlleleGroup.from_dict(g) for g in data.get('groups') or []]
        loci = [Locus.from_dict(l) for l in _require(data, 'loci', 'registry')]

        seen: Set[str] = set()
        for locus in loci:
            if locus.name in seen:
                raise RegistryError(f"duplicate locus name '{locus.name}'")
            seen.add(locus.name)

        group_ids = {g.id for g in groups}
        for locus in loci:
            if locus.group and locus.group not in group_ids:
                raise RegistryError(
                    f"locus '{locus.name}' references unknown group '{locus.group}'"
                )

        return cls(
            species=species,
            loci=loci,
            groups=groups,
            interallelic_phenotypes={
                gid: dict(names)
                for gid, names in (data.get('interallelicPhenotypes') or {}).items()
            },
            super_names=dict(data.get('superNames') or {}),
            named_combos=dict(data.get('namedCombos') or {}),
            version=data.get('version', 1),
            meta=dict(data.get('meta') or {})
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'meta': dict(self.meta),
            'species': {
                'id': self.species.id,
                'label': self.species.label,
                'aliases': list(self.species.aliases)
            },
            'groups': [g.to_dict() for g in self.groups],
            'loci': [l.to_dict() for l in self.loci],
            'interallelicPhenotypes': {
                gid: dict(names) for gid, names in self.interallelic_phenotypes.items()
            },
            'superNames': dict(self.super_names),
            'namedCombos': dict(self.named_combos)
        }

    def __repr__(self):
        return (f"Registry({self.species.id}, loci={len(self.loci)}, "
                f"groups={len(self.groups)})")


@dataclass
class Individual:
    """
    부모 개체 - 호출 측(사육 기록)이 소유하는 유전 상태
    genetics: 좌위 이름 -> 접합 상태
    """
    id: str
    species: str
    name: Optional[str] = None
    morph: Optional[str] = None
    genetics: Dict[str, Zygosity] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def get_zygosity(self, locus_name: str) -> Optional[Zygosity]:
        return self.genetics.get(locus_name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Individual':
        """
        API/CLI 입력 딕셔너리에서 개체 생성

        Raises:
            ValueError: 알 수 없는 접합 상태 문자열
        """
        genetics = {}
        for locus_name, value in (data.get('genetics') or {}).items():
            if not value:
                continue
            try:
                genetics[locus_name] = Zygosity(str(value).lower())
            except ValueError:
                raise ValueError(
                    f"unknown zygosity '{value}' for locus '{locus_name}'"
                ) from None

        return cls(
            id=str(data.get('id') or data.get('name') or ''),
            species=data.get('species') or '',
            name=data.get('name'),
            morph=data.get('morph'),
            genetics=genetics
        )

    def __repr__(self):
        traits_str = ", ".join(f"{k}:{v.value}" for k, v in self.genetics.items())
        return f"Individual({self.id}, {self.species}, [{traits_str}])"


@dataclass
class Violation:
    """대립유전자 배타성 위반"""
    parent_id: str
    parent_name: str
    group_label: str
    gene_labels: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parent_id': self.parent_id,
            'parent_name': self.parent_name,
            'group': self.group_label,
            'genes': list(self.gene_labels)
        }

    def __str__(self):
        return f"{self.parent_name}: {self.group_label} ({', '.join(self.gene_labels)})"


@dataclass
class PredictionResult:
    """자손 표현형 예측 결과 (probability: 백분율, 소수점 둘째 자리)"""
    phenotype_label: str
    probability: float
    is_visual: bool
    contributing_genes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'morph': self.phenotype_label,
            'probability': self.probability,
            'is_visual': self.is_visual,
            'genes': list(self.contributing_genes)
        }
