"""
table.py - 예측 결과 표 생성기
모든 결과에 공통인 형질을 분리해 표시 (확률은 변경하지 않음)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .models import PredictionResult
from .phenotype import NORMAL_LABEL


def _norm_tag(tag: str) -> str:
    return tag.strip().lower()


def compute_common_tags(predictions: List[PredictionResult]) -> List[str]:
    """모든 예측 결과에 등장하는 태그 (처음 나온 표기 유지)"""
    if not predictions:
        return []

    counts: Dict[str, List] = {}
    for p in predictions:
        seen = set()
        for gene in p.contributing_genes:
            key = _norm_tag(gene)
            if key in seen:
                continue
            seen.add(key)
            if key in counts:
                counts[key][1] += 1
            else:
                counts[key] = [gene, 1]

    n = len(predictions)
    return [canon for canon, count in counts.values() if count == n]


def without_common(tags: List[str], commons: List[str]) -> List[str]:
    """공통 태그를 제외한 태그"""
    common_keys = {_norm_tag(c) for c in commons}
    return [t for t in tags if _norm_tag(t) not in common_keys]


@dataclass
class PredictionRow:
    """표의 한 행 (하나의 표현형)"""
    morph: str
    probability: float
    is_visual: bool
    genes: List[str] = field(default_factory=list)


@dataclass
class PredictionTable:
    """예측 결과 표 전체"""
    rows: List[PredictionRow] = field(default_factory=list)
    common_traits: List[str] = field(default_factory=list)
    title: str = "Offspring predictions"

    def add_row(self, row: PredictionRow):
        self.rows.append(row)

    @property
    def total_probability(self) -> float:
        return round(sum(r.probability for r in self.rows), 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'common_traits': list(self.common_traits),
            'rows': [
                {
                    'morph': r.morph,
                    'probability': r.probability,
                    'is_visual': r.is_visual,
                    'genes': list(r.genes)
                }
                for r in self.rows
            ]
        }

    def to_markdown(self) -> str:
        """마크다운 표 형식으로 변환"""
        if not self.rows:
            return ""

        headers = ["Morph", "Probability", "Visual"]
        header_line = "| " + " | ".join(headers) + " |"
        separator = "|" + "|".join(["---"] * len(headers)) + "|"

        data_lines = []
        for row in self.rows:
            cells = [row.morph, f"{row.probability:.2f}%", "yes" if row.is_visual else "no"]
            data_lines.append("| " + " | ".join(cells) + " |")

        lines = [header_line, separator] + data_lines
        if self.common_traits:
            lines = [f"Common traits: {', '.join(self.common_traits)}", ""] + lines
        return "\n".join(lines)


class PredictionTableGenerator:
    """예측 결과 표 생성기"""

    def generate_table(
        self,
        predictions: List[PredictionResult],
        hide_common: bool = True,
        title: str = "Offspring predictions"
    ) -> PredictionTable:
        """
        예측 결과 표 생성

        Args:
            predictions: predict_offspring 결과
            hide_common: 공통 형질을 각 행에서 분리할지 여부
            title: 표 제목

        Returns:
            PredictionTable 객체
        """
        commons = compute_common_tags(predictions) if hide_common else []
        table = PredictionTable(common_traits=commons, title=title)

        for p in predictions:
            genes = without_common(p.contributing_genes, commons)
            table.add_row(PredictionRow(
                morph=" ".join(genes) if genes else self._empty_label(p, commons),
                probability=p.probability,
                is_visual=p.is_visual,
                genes=genes
            ))

        return table

    @staticmethod
    def _empty_label(prediction: PredictionResult, commons: List[str]) -> str:
        # 공통 형질만 가진 결과는 공통 형질만 표시된 것으로 간주
        if commons and prediction.contributing_genes:
            return "(common traits only)"
        return NORMAL_LABEL
