"""
genetics.py - 멘델 유전 법칙 구현
부모 유전자형 추출, 좌위별 퍼넷 사각형 계산
"""

from typing import Dict, List, Optional, Tuple

from .models import (
    ChildZygosity, GenotypeToken, Individual, Locus, LocusType, Zygosity
)


# 부모 중 한쪽이 unknown일 때 사용하는 고정 분포
UNKNOWN_RECESSIVE_DISTRIBUTION = {
    ChildZygosity.NORMAL: 0.0,
    ChildZygosity.HET: 0.5,
    ChildZygosity.SUPER: 0.0,
    ChildZygosity.VISUAL: 0.5,
}
UNKNOWN_DOMINANT_DISTRIBUTION = {
    ChildZygosity.NORMAL: 0.5,
    ChildZygosity.HET: 0.5,
    ChildZygosity.SUPER: 0.0,
    ChildZygosity.VISUAL: 0.0,
}

_GAMETES = {
    GenotypeToken.RR: {'R': 1.0},
    GenotypeToken.Rr: {'R': 0.5, 'r': 0.5},
    GenotypeToken.rr: {'r': 1.0},
    GenotypeToken.DD: {'D': 1.0},
    GenotypeToken.Dd: {'D': 0.5, 'd': 0.5},
    GenotypeToken.dd: {'d': 1.0},
}


class GeneticsEngine:
    """멘델 유전학 엔진 (상태 없음)"""

    @staticmethod
    def zygosity_to_token(locus_type: LocusType, zygosity: Zygosity) -> GenotypeToken:
        """기록된 접합 상태 -> 유전자형 토큰"""
        if zygosity == Zygosity.UNKNOWN:
            return GenotypeToken.UNKNOWN

        if locus_type == LocusType.RECESSIVE:
            if zygosity in (Zygosity.VISUAL, Zygosity.SUPER):
                return GenotypeToken.rr
            if zygosity == Zygosity.HET:
                return GenotypeToken.Rr
            return GenotypeToken.RR

        # 우성/불완전 우성
        if zygosity == Zygosity.SUPER:
            return GenotypeToken.DD
        if zygosity in (Zygosity.VISUAL, Zygosity.HET):
            return GenotypeToken.Dd
        return GenotypeToken.dd

    @staticmethod
    def morph_suggests_locus(morph: Optional[str], locus: Optional[Locus]) -> bool:
        """모프 문자열에 좌위 이름/별칭/라벨이 포함되어 있는지"""
        if not morph or not locus:
            return False
        hay = morph.lower()
        names = [locus.name, *locus.aliases, locus.label]
        return any(n.lower() in hay for n in names if n)

    @staticmethod
    def extract_genotype(individual: Individual, locus: Locus) -> GenotypeToken:
        """
        개체의 좌위별 유전자형 추출
        1. 기록된 접합 상태
        2. 모프 이름 휴리스틱 (보유 추정)
        3. 야생형
        """
        zygosity = individual.get_zygosity(locus.name)
        if zygosity is not None:
            return GeneticsEngine.zygosity_to_token(locus.type, zygosity)

        if GeneticsEngine.morph_suggests_locus(individual.morph, locus):
            return GenotypeToken.rr if locus.is_recessive else GenotypeToken.Dd

        return GenotypeToken.RR if locus.is_recessive else GenotypeToken.dd

    @staticmethod
    def extract_gametes(token: GenotypeToken) -> Dict[str, float]:
        """유전자형에서 가능한 배우자와 전달 확률"""
        return dict(_GAMETES.get(token, {'?': 1.0}))

    @staticmethod
    def _classify(locus_type: LocusType, allele_a: str, allele_b: str) -> ChildZygosity:
        genotype = "".join(sorted([allele_a, allele_b]))
        if locus_type == LocusType.RECESSIVE:
            if genotype == "RR":
                return ChildZygosity.NORMAL
            if genotype == "Rr":
                return ChildZygosity.HET
            return ChildZygosity.VISUAL

        if genotype == "DD":
            return ChildZygosity.SUPER
        if genotype == "Dd":
            return ChildZygosity.HET
        return ChildZygosity.NORMAL

    @staticmethod
    def punnett_locus(
        locus_type: LocusType,
        token_a: GenotypeToken,
        token_b: GenotypeToken
    ) -> Dict[ChildZygosity, float]:
        """
        한 좌위의 자손 접합 상태 분포

        Args:
            locus_type: 좌위 유전 방식
            token_a: 부모 A 유전자형
            token_b: 부모 B 유전자형

        Returns:
            ChildZygosity -> 확률 (합 1.0)
        """
        if GenotypeToken.UNKNOWN in (token_a, token_b):
            # 실제 조합 계산 대신 고정 분포 사용 (근사)
            if locus_type == LocusType.RECESSIVE:
                return dict(UNKNOWN_RECESSIVE_DISTRIBUTION)
            return dict(UNKNOWN_DOMINANT_DISTRIBUTION)

        tally = {z: 0.0 for z in ChildZygosity}
        for allele_a, p_a in GeneticsEngine.extract_gametes(token_a).items():
            for allele_b, p_b in GeneticsEngine.extract_gametes(token_b).items():
                child = GeneticsEngine._classify(locus_type, allele_a, allele_b)
                tally[child] += p_a * p_b
        return tally

    @staticmethod
    def punnett_square(
        locus_type: LocusType,
        token_a: GenotypeToken,
        token_b: GenotypeToken
    ) -> List[List[Tuple[str, ChildZygosity]]]:
        """
        2x2 퍼넷 사각형 (행: 부모 A 배우자, 열: 부모 B 배우자)
        각 칸은 (자손 유전자형, 접합 상태)
        """
        if GenotypeToken.UNKNOWN in (token_a, token_b):
            return []

        gametes_a = GeneticsEngine._square_alleles(token_a)
        gametes_b = GeneticsEngine._square_alleles(token_b)

        grid = []
        for allele_a in gametes_a:
            row = []
            for allele_b in gametes_b:
                # 우성 대립유전자를 앞에 배치
                alleles = sorted([allele_a, allele_b], key=lambda x: (x.islower(), x))
                row.append((
                    "".join(alleles),
                    GeneticsEngine._classify(locus_type, allele_a, allele_b)
                ))
            grid.append(row)
        return grid

    @staticmethod
    def _square_alleles(token: GenotypeToken) -> List[str]:
        # 동형접합도 두 칸으로 표시
        return list(token.value)
