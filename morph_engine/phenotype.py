"""
phenotype.py - 표현형 이름 생성
좌위별 태그 -> 대립유전자 조합 이름 -> 명명된 조합 -> 최종 라벨
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .models import ChildZygosity, Locus, LocusType, Registry

NORMAL_LABEL = "Normal"
HET_PREFIX = "het "


@dataclass(frozen=True)
class LocusTag:
    """표현형 태그와 그 태그를 만든 좌위들"""
    text: str
    loci: Tuple[str, ...]

    @property
    def is_visual(self) -> bool:
        return not self.text.lower().startswith(HET_PREFIX)


class PhenotypeNamer:
    """레지스트리 규칙에 따라 자손 조합의 표현형 라벨 생성"""

    def __init__(self, registry: Registry):
        self.registry = registry

    def _super_name(self, locus: Locus) -> str:
        for key in (locus.name, f"{locus.name}:2", f"{locus.name}:DD"):
            name = self.registry.super_names.get(key)
            if name:
                return name
        return f"Super {locus.label}"

    def format_locus(self, locus: Locus, zygosity: ChildZygosity) -> Optional[LocusTag]:
        """좌위 하나의 기본 태그 (표시할 것이 없으면 None)"""
        if locus.type == LocusType.RECESSIVE:
            if zygosity == ChildZygosity.VISUAL:
                return LocusTag(locus.label, (locus.name,))
            if zygosity == ChildZygosity.HET:
                return LocusTag(f"{HET_PREFIX}{locus.label}", (locus.name,))
            return None

        # 불완전 우성: 이형접합도 발현됨
        if zygosity == ChildZygosity.SUPER:
            return LocusTag(self._super_name(locus), (locus.name,))
        if zygosity == ChildZygosity.HET:
            return LocusTag(locus.label, (locus.name,))
        return None

    def apply_interallelic_names(
        self,
        tags: List[LocusTag],
        zygosities: Dict[str, ChildZygosity]
    ) -> List[LocusTag]:
        """같은 배타 그룹의 두 대립유전자가 함께 있으면 조합 이름으로 대체"""
        if not self.registry.interallelic_phenotypes:
            return tags

        # 그룹 순서: 비정상 좌위가 좌위 목록에 처음 나타나는 순서
        group_ids: List[str] = []
        for locus in self.registry.loci:
            if (locus.group and locus.group not in group_ids
                    and zygosities.get(locus.name, ChildZygosity.NORMAL) != ChildZygosity.NORMAL):
                group_ids.append(locus.group)

        out = list(tags)
        for group in (self.registry.get_group(gid) for gid in group_ids):
            if not (group.exclusive and group.allow_interallelic_names):
                continue
            names = self.registry.interallelic_phenotypes.get(group.id)
            if not names:
                continue

            alleles = [
                l.name for l in self.registry.loci_in_group(group.id)
                if zygosities.get(l.name, ChildZygosity.NORMAL) != ChildZygosity.NORMAL
            ]
            if len(alleles) != 2:
                continue

            phenotype = names.get("+".join(alleles)) or names.get("+".join(reversed(alleles)))
            if not phenotype:
                continue

            out = [t for t in out if not set(t.loci) & set(alleles)]
            out.append(LocusTag(phenotype, tuple(alleles)))

        return out

    def expressed_loci(self, zygosities: Dict[str, ChildZygosity]) -> List[str]:
        """명명된 조합 판정용: 열성은 visual, 그 외는 het/super일 때 발현"""
        present = []
        for locus in self.registry.loci:
            zygosity = zygosities.get(locus.name, ChildZygosity.NORMAL)
            if locus.type == LocusType.RECESSIVE:
                if zygosity == ChildZygosity.VISUAL:
                    present.append(locus.name)
            elif zygosity in (ChildZygosity.HET, ChildZygosity.SUPER):
                present.append(locus.name)
        return present

    def apply_named_combos(
        self,
        tags: List[LocusTag],
        zygosities: Dict[str, ChildZygosity]
    ) -> List[LocusTag]:
        """명명된 조합의 좌위가 모두 발현되면 개별 태그를 조합 이름으로 대체"""
        if not self.registry.named_combos:
            return tags

        present = set(self.expressed_loci(zygosities))
        out = list(tags)

        for key, name in self.registry.named_combos.items():
            required = [part.strip() for part in key.split("+") if part.strip()]
            if not required or not all(r in present for r in required):
                continue

            # 개별 좌위 태그만 제거 (대립유전자 조합 이름은 유지)
            out = [t for t in out if not (len(t.loci) == 1 and t.loci[0] in required)]
            if not any(t.text.lower() == name.lower() for t in out):
                out.append(LocusTag(name, tuple(required)))

        return out

    def name(self, zygosities: Dict[str, ChildZygosity]) -> Tuple[str, List[str], bool]:
        """
        자손 조합 하나의 최종 표현형

        Args:
            zygosities: 좌위 이름 -> 자손 접합 상태

        Returns:
            (라벨, 태그 목록, 발현 여부)
        """
        tags = []
        for locus in self.registry.loci:
            zygosity = zygosities.get(locus.name)
            if zygosity is None:
                continue
            tag = self.format_locus(locus, zygosity)
            if tag:
                tags.append(tag)

        tags = self.apply_interallelic_names(tags, zygosities)
        tags = self.apply_named_combos(tags, zygosities)

        unique: List[str] = []
        for tag in tags:
            if tag.text not in unique:
                unique.append(tag.text)

        label = " ".join(unique) if unique else NORMAL_LABEL
        is_visual = any(not t.lower().startswith(HET_PREFIX) for t in unique)
        return label, unique, is_visual
