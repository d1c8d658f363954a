"""
Morph Engine - 뱀 교배 유전 예측기
메인 실행 파일

사용법:
    python main.py --species "Ball Python" -a "pastel=het,clown=het" -b "clown=het"
    python main.py --pair pair.json --json          # JSON 파일 입력/출력
    python main.py ... --chart out.png              # 차트 저장
    python main.py ... --punnett clown              # 좌위 하나의 퍼넷 사각형
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from morph_engine import (
    AllelicExclusivityError, BreedingCalculator, GeneticsEngine,
    Individual, LoaderConfig, PredictionResult, PredictionTableGenerator,
    PredictionVisualizer, RegistryLoader, SpeciesMismatchError
)
from morph_engine.registry import BUNDLED_DATA_DIR


def parse_genetics(text: Optional[str]) -> Dict[str, str]:
    """'pastel=het,clown=visual' -> {'pastel': 'het', 'clown': 'visual'}"""
    genetics = {}
    for item in (text or "").split(","):
        item = item.strip()
        if not item:
            continue
        if "=" not in item:
            raise ValueError(f"expected locus=zygosity, got '{item}'")
        locus, zygosity = item.split("=", 1)
        genetics[locus.strip().lower()] = zygosity.strip().lower()
    return genetics


class MorphEngine:
    """
    Morph Engine 메인 클래스
    교배 예측 실행 및 출력
    """

    def __init__(self, loader_config: Optional[LoaderConfig] = None):
        """
        Args:
            loader_config: 레지스트리 로더 설정
        """
        self.loader = RegistryLoader(loader_config)
        self.calculator = BreedingCalculator(self.loader)
        self.table_generator = PredictionTableGenerator()
        self.visualizer = PredictionVisualizer()

    def predict_pair(
        self,
        parent_a: Individual,
        parent_b: Individual,
        hide_common: bool = True,
        punnett_locus: Optional[str] = None
    ) -> dict:
        """
        두 부모의 자손 예측

        Returns:
            결과 딕셔너리 (success, predictions, table, warnings, violations ...)
        """
        try:
            outcome = asyncio.run(self.calculator.calculate(parent_a, parent_b))
        except SpeciesMismatchError as e:
            return {'success': False, 'error': str(e)}
        except AllelicExclusivityError as e:
            return {
                'success': False,
                'error': 'Allelic exclusivity violation',
                'violations': [v.to_dict() for v in e.violations]
            }

        table = self.table_generator.generate_table(outcome.predictions, hide_common=hide_common)
        result = {
            'success': True,
            **outcome.to_dict(),
            'table': table.to_dict(),
            'table_markdown': table.to_markdown(),
            'total_probability': table.total_probability,
        }

        if punnett_locus:
            result['punnett'] = self._punnett(outcome.registry, parent_a, parent_b, punnett_locus)

        return result

    def _punnett(self, registry, parent_a: Individual, parent_b: Individual, locus_name: str) -> dict:
        locus = registry.get_locus(locus_name)
        if locus is None:
            return {'locus': locus_name, 'error': 'unknown locus'}

        token_a = GeneticsEngine.extract_genotype(parent_a, locus)
        token_b = GeneticsEngine.extract_genotype(parent_b, locus)
        grid = GeneticsEngine.punnett_square(locus.type, token_a, token_b)
        distribution = GeneticsEngine.punnett_locus(locus.type, token_a, token_b)
        return {
            'locus': locus.label,
            'parent_a': token_a.value,
            'parent_b': token_b.value,
            'square': [[cell[0] for cell in row] for row in grid],
            'distribution': {z.value: p for z, p in distribution.items() if p > 0}
        }

    def display_result(self, result: dict):
        """결과를 콘솔에 표시"""
        for warning in result.get('warnings', []):
            print(f"⚠️ {warning}")

        if not result.get('success'):
            print(f"❌ Error: {result.get('error')}")
            for v in result.get('violations', []):
                print(f"  - {v['parent_name']}: {v['group']} ({', '.join(v['genes'])})")
            return

        print(f"\n{'='*50}")
        print(f"🐍 {result['species']} offspring predictions")
        print(f"{'='*50}")
        print(result['table_markdown'])
        print(f"\nTotal: {result['total_probability']:.2f}%")

        punnett = result.get('punnett')
        if punnett:
            print(f"\n【Punnett: {punnett['locus']}】")
            if punnett.get('error'):
                print(f"  {punnett['error']}")
            elif not punnett['square']:
                print("  unknown parent genotype, default distribution used")
            for row in punnett.get('square', []):
                print("  " + " | ".join(row))
            for zygosity, p in punnett.get('distribution', {}).items():
                print(f"  {zygosity}: {p * 100:.1f}%")

    def save_chart(self, result: dict, path: str, title: str = ""):
        """차트 저장"""
        predictions = [
            PredictionResult(
                phenotype_label=p['morph'],
                probability=p['probability'],
                is_visual=p['is_visual'],
                contributing_genes=p['genes']
            )
            for p in result.get('predictions', [])
        ]
        self.visualizer.save_to_file(predictions, path, title=title)
        print(f"✓ Chart saved: {path}")


def parse_args(argv=None):
    """명령줄 인자 파싱"""
    parser = argparse.ArgumentParser(
        description="Morph Engine - snake breeding genetics calculator"
    )

    parser.add_argument('--species', '-s', type=str, default='Ball Python',
                        help="종 이름 (기본: Ball Python)")
    parser.add_argument('--parent-a', '-a', type=str, default='',
                        help="부모 A 유전 정보 (예: pastel=het,clown=visual)")
    parser.add_argument('--parent-b', '-b', type=str, default='',
                        help="부모 B 유전 정보")
    parser.add_argument('--morph-a', type=str, default=None, help="부모 A 모프 이름")
    parser.add_argument('--morph-b', type=str, default=None, help="부모 B 모프 이름")
    parser.add_argument('--pair', type=str, default=None,
                        help="부모 쌍 JSON 파일 ({\"parent_a\": {...}, \"parent_b\": {...}})")

    parser.add_argument('--registry-url', type=str, default=None,
                        help="원격 레지스트리 베이스 URL")
    parser.add_argument('--registry-dir', type=str, default=None,
                        help="로컬 레지스트리 디렉토리 (기본: 내장 데이터)")
    parser.add_argument('--timeout', type=float, default=5.0,
                        help="원격 요청 제한 시간 (초, 기본: 5)")

    parser.add_argument('--punnett', type=str, default=None, help="퍼넷 사각형을 표시할 좌위")
    parser.add_argument('--show-common', action='store_true',
                        help="공통 형질을 각 결과에 그대로 표시")
    parser.add_argument('--chart', type=str, default=None, help="차트 PNG 저장 경로")
    parser.add_argument('--json', action='store_true', help="JSON으로 출력")
    parser.add_argument('--verbose', '-v', action='store_true', help="상세 로그")

    return parser.parse_args(argv)


def load_parents(args):
    """인자에서 두 부모 생성"""
    if args.pair:
        with open(args.pair, encoding='utf-8') as f:
            data = json.load(f)
        return Individual.from_dict(data['parent_a']), Individual.from_dict(data['parent_b'])

    parent_a = Individual.from_dict({
        'id': 'A', 'name': 'Parent A', 'species': args.species,
        'morph': args.morph_a, 'genetics': parse_genetics(args.parent_a)
    })
    parent_b = Individual.from_dict({
        'id': 'B', 'name': 'Parent B', 'species': args.species,
        'morph': args.morph_b, 'genetics': parse_genetics(args.parent_b)
    })
    return parent_a, parent_b


def main(argv=None) -> int:
    """메인 함수"""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        parent_a, parent_b = load_parents(args)
    except (OSError, KeyError, ValueError) as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return 2

    engine = MorphEngine(LoaderConfig(
        base_url=args.registry_url,
        data_dir=Path(args.registry_dir) if args.registry_dir else BUNDLED_DATA_DIR,
        timeout=args.timeout
    ))

    result = engine.predict_pair(
        parent_a, parent_b,
        hide_common=not args.show_common,
        punnett_locus=args.punnett
    )

    if args.json:
        print(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        engine.display_result(result)

    if args.chart and result.get('success'):
        engine.save_chart(result, args.chart,
                          title=f"{parent_a.display_name} x {parent_b.display_name}")

    return 0 if result.get('success') else 1


if __name__ == "__main__":
    sys.exit(main())
