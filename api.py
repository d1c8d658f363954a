"""
Morph Engine - Flask REST API
웹 서비스용 API 엔드포인트

실행: flask --app api run --debug
또는: python api.py

환경 변수:
    MORPH_ENGINE_REGISTRY_BASE_URL   원격 레지스트리 베이스 URL
    MORPH_ENGINE_REGISTRY_DIR        로컬 레지스트리 디렉토리
    MORPH_ENGINE_REGISTRY_TIMEOUT    원격 요청 제한 시간 (초)
"""

import asyncio
import logging
from pathlib import Path

from flask import Flask, jsonify, request
from flask_cors import CORS

from morph_engine import (
    AllelicExclusivityError, BreedingCalculator, ExclusivityValidator,
    Individual, LoaderConfig, PredictionTableGenerator, PredictionVisualizer,
    RegistryError, RegistryLoader, SpeciesMismatchError, __version__,
    check_same_species
)
from morph_engine.registry import BUNDLED_DATA_DIR

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_prefixed_env("MORPH_ENGINE")
CORS(app)  # CORS 활성화

# 전역 객체 (상태 없음)
table_generator = PredictionTableGenerator()
visualizer = PredictionVisualizer()


def _loader() -> RegistryLoader:
    """앱 설정으로 레지스트리 로더 생성"""
    data_dir = app.config.get('REGISTRY_DIR')
    return RegistryLoader(LoaderConfig(
        base_url=app.config.get('REGISTRY_BASE_URL'),
        data_dir=Path(data_dir) if data_dir else BUNDLED_DATA_DIR,
        timeout=float(app.config.get('REGISTRY_TIMEOUT', 5.0))
    ))


def _parse_parents(data: dict):
    """요청 본문에서 두 부모 추출 (형식 오류는 ValueError)"""
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    parent_a = data.get('parent_a')
    parent_b = data.get('parent_b')
    if not isinstance(parent_a, dict) or not isinstance(parent_b, dict):
        raise ValueError("'parent_a' and 'parent_b' objects are required")
    return Individual.from_dict(parent_a), Individual.from_dict(parent_b)


def _flag(data: dict, key: str, default: bool) -> bool:
    """JSON boolean 옵션 (문자열 "false" 등은 거부)"""
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be a boolean")
    return value


def _mismatch_response(e: SpeciesMismatchError):
    return jsonify({
        'success': False,
        'error': str(e),
        'species': [e.species_a, e.species_b]
    }), 409


@app.route('/')
def index():
    """API 정보"""
    return jsonify({
        'name': 'Morph Engine API',
        'version': __version__,
        'description': 'Snake breeding genetics prediction API',
        'endpoints': {
            '/species': 'GET - 지원 종 목록',
            '/registry': 'GET - 종 이름으로 유전 레지스트리 조회 (?species=)',
            '/validate': 'POST - 부모 대립유전자 배타성 검증',
            '/predict': 'POST - 자손 모프 예측'
        }
    })


@app.route('/species', methods=['GET'])
def get_species():
    """지원 종 목록"""
    try:
        entries = asyncio.run(_loader().load_species_index())
    except RegistryError as e:
        logger.warning("Species index unavailable: %s", e)
        return jsonify({'success': False, 'error': str(e)}), 503

    return jsonify({
        'species': [
            {'id': e['id'], 'names': e.get('names', [])}
            for e in entries
        ]
    })


@app.route('/registry', methods=['GET'])
def get_registry():
    """종 이름으로 레지스트리 조회 (찾지 못하면 기본 레지스트리 + 경고)"""
    species = request.args.get('species', '').strip()
    if not species:
        return jsonify({'success': False, 'error': "'species' query parameter is required"}), 400

    resolution = asyncio.run(_loader().resolve(species))
    return jsonify({'success': True, **resolution.to_dict()})


@app.route('/validate', methods=['POST'])
def validate_pairing():
    """
    부모 검증

    Request Body:
    {
        "parent_a": {"id": "1", "name": "Apollo", "species": "Ball Python",
                     "morph": "Mojave", "genetics": {"mojave": "het"}},
        "parent_b": {...}
    }
    """
    data = request.get_json(silent=True)
    try:
        parent_a, parent_b = _parse_parents(data)
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    # 종 불일치는 레지스트리 해석 전에 보고
    try:
        check_same_species(parent_a, parent_b)
    except SpeciesMismatchError as e:
        return _mismatch_response(e)

    resolution = asyncio.run(_loader().resolve(parent_a.species))
    report = ExclusivityValidator(resolution.registry).validate(parent_a, parent_b)

    return jsonify({
        'success': report.is_valid,
        'warnings': resolution.warnings,
        'validation': report.to_dict()
    })


@app.route('/predict', methods=['POST'])
def predict():
    """
    자손 모프 예측

    Request Body:
    {
        "parent_a": {...},
        "parent_b": {...},
        "hide_common": true,     // 공통 형질 분리 표시
        "chart": false           // 차트 이미지 포함
    }
    """
    data = request.get_json(silent=True)
    try:
        parent_a, parent_b = _parse_parents(data)
        hide_common = _flag(data, 'hide_common', True)
        with_chart = _flag(data, 'chart', False)
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    calculator = BreedingCalculator(_loader())
    try:
        outcome = asyncio.run(calculator.calculate(parent_a, parent_b))
    except SpeciesMismatchError as e:
        return _mismatch_response(e)
    except AllelicExclusivityError as e:
        return jsonify({
            'success': False,
            'error': 'Allelic exclusivity violation',
            'violations': [v.to_dict() for v in e.violations]
        }), 422

    table = table_generator.generate_table(
        outcome.predictions,
        hide_common=hide_common
    )

    response = {'success': True, **outcome.to_dict(), 'table': table.to_dict()}
    if with_chart:
        img = visualizer.get_base64_image(
            outcome.predictions,
            title=f"{parent_a.display_name} x {parent_b.display_name}"
        )
        response['chart'] = f"data:image/png;base64,{img}"

    return jsonify(response)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    print("=" * 50)
    print("Morph Engine API Server")
    print("=" * 50)
    print("Server starting at http://localhost:5000")
    print()
    app.run(debug=True, host='0.0.0.0', port=5000)
