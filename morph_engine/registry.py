"""
registry.py - 종별 유전 레지스트리 로더
종 이름 -> 레지스트리 문서 해석, 실패 시 내장 기본 레지스트리 사용
"""

import asyncio
import json
import logging
import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from .models import Registry, RegistryError

logger = logging.getLogger(__name__)

BUNDLED_DATA_DIR = Path(__file__).parent / "data"


# 원격 해석 실패 시 사용하는 최소 레지스트리 (Ball Python)
FALLBACK_REGISTRY_DOCUMENT: Dict[str, Any] = {
    "version": 1,
    "species": {
        "id": "python-regius",
        "label": "Ball Python",
        "aliases": ["python regius", "ball python"],
    },
    "groups": [
        {"id": "BEL", "label": "Blue-Eyed Leucistic complex",
         "exclusive": True, "allowInterallelicNames": True},
        {"id": "YB", "label": "Yellow Belly complex",
         "exclusive": True, "allowInterallelicNames": True},
    ],
    "loci": [
        {"name": "pastel", "label": "Pastel", "type": "incomplete"},
        {"name": "banana", "label": "Banana", "type": "incomplete"},
        {"name": "yellowbelly", "label": "Yellow Belly", "type": "incomplete",
         "group": "YB", "aliases": ["yb"]},
        {"name": "gravel", "label": "Gravel", "type": "incomplete", "group": "YB"},
        {"name": "asphalt", "label": "Asphalt", "type": "incomplete", "group": "YB"},
        {"name": "mojave", "label": "Mojave", "type": "incomplete", "group": "BEL"},
        {"name": "lesser", "label": "Lesser", "type": "incomplete", "group": "BEL"},
        {"name": "phantom", "label": "Phantom", "type": "incomplete", "group": "BEL"},
        {"name": "clown", "label": "Clown", "type": "recessive"},
    ],
    "interallelicPhenotypes": {
        "BEL": {
            "lesser+mojave": "BEL (Lesser Mojave)",
            "lesser+phantom": "BEL (Lesser Phantom)",
        },
        "YB": {
            "yellowbelly+gravel": "Highway",
            "yellowbelly+asphalt": "Freeway",
        },
    },
    "superNames": {
        "pastel": "Super Pastel",
        "banana": "Super Banana",
    },
    "namedCombos": {},
}


def fallback_registry() -> Registry:
    """내장 기본 레지스트리 (호출마다 새 객체)"""
    return Registry.from_dict(FALLBACK_REGISTRY_DOCUMENT)


def normalize_species_name(name: Optional[str]) -> str:
    """발음 구별 기호 제거, 소문자화, 공백 정리"""
    decomposed = unicodedata.normalize("NFD", (name or "").strip().lower())
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"\s+", " ", stripped)


# 종 인덱스 없이도 찾을 수 있는 대표 종
_GUESSES = (
    ("python-regius", ("ball python", "python regius", "royal python", "python royal")),
    ("pantherophis-guttatus", ("corn snake", "pantherophis guttatus", "elaphe guttata")),
)


def guess_registry_id(name: str) -> Optional[str]:
    """종 이름 휴리스틱 -> 레지스트리 id"""
    n = normalize_species_name(name)
    if not n:
        return None
    for species_id, needles in _GUESSES:
        if any(needle in n for needle in needles):
            return species_id
    return None


@dataclass
class LoaderConfig:
    """레지스트리 로더 설정"""
    base_url: Optional[str] = None                       # 원격 베이스 (예: https://host/genetics/)
    data_dir: Optional[Path] = BUNDLED_DATA_DIR           # 로컬 디렉토리 (None이면 사용 안 함)
    index_file: str = "species.json"
    timeout: float = 5.0                                   # 원격 요청 제한 시간 (초)


@dataclass
class RegistryResolution:
    """레지스트리 해석 결과"""
    registry: Registry
    warnings: List[str] = field(default_factory=list)
    is_fallback: bool = False
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'registry': self.registry.to_dict(),
            'warnings': list(self.warnings),
            'is_fallback': self.is_fallback,
            'source': self.source
        }


Location = Union[str, Path]


class RegistryLoader:
    """
    종 이름으로 레지스트리 문서를 찾는 로더

    해석 순서:
    1. 종 인덱스의 이름 목록 (정확히 일치 -> 부분 일치)
    2. 대표 종 이름 휴리스틱
    3. 내장 기본 레지스트리 (경고 포함)

    모든 네트워크/파싱 오류는 "찾지 못함"으로 처리하며 호출 측으로 전파하지 않음
    """

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config or LoaderConfig()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout),
            transport=self._transport,
            follow_redirects=True
        )

    def _candidates(self, relative: str) -> List[Location]:
        """상대 경로 -> 시도할 위치 목록 (원격 우선)"""
        if relative.startswith(("http://", "https://")):
            return [relative]

        candidates: List[Location] = []
        if self.config.base_url:
            base = self.config.base_url.rstrip("/") + "/"
            candidates.append(base + relative.lstrip("/"))
        if self.config.data_dir is not None:
            candidates.append(Path(self.config.data_dir) / Path(relative).name)
        return candidates

    @staticmethod
    def _read_file(path: Path) -> Any:
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    async def _read(self, client: httpx.AsyncClient, location: Location) -> Any:
        if isinstance(location, Path):
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self._read_file, location)

        response = await client.get(location)
        response.raise_for_status()
        return response.json()

    async def _fetch_json(self, client: httpx.AsyncClient, candidates: List[Location]) -> Tuple[Any, str]:
        """후보 위치를 차례로 시도, 모두 실패하면 마지막 오류를 다시 발생"""
        last_error: Optional[Exception] = None
        for location in candidates:
            try:
                data = await self._read(client, location)
                return data, str(location)
            except (httpx.HTTPError, OSError, ValueError) as e:
                logger.debug("Registry fetch failed for %s: %s", location, e)
                last_error = e

        raise last_error or RegistryError("no candidate location configured")

    async def load_species_index(self, client: Optional[httpx.AsyncClient] = None) -> List[Dict[str, Any]]:
        """
        종 인덱스 로드

        Returns:
            [{'id', 'names', 'registry_file'}, ...]

        Raises:
            RegistryError: 인덱스를 읽을 수 없거나 형식이 잘못됨
        """
        if client is None:
            async with self._client() as own_client:
                return await self.load_species_index(own_client)

        try:
            data, _ = await self._fetch_json(client, self._candidates(self.config.index_file))
        except (httpx.HTTPError, OSError, ValueError) as e:
            raise RegistryError(f"species index unavailable: {e}") from e

        entries = data.get('species') if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise RegistryError("species index has no 'species' list")

        return [e for e in entries if self._valid_index_entry(e)]

    @staticmethod
    def _valid_index_entry(entry: Any) -> bool:
        """형식이 잘못된 인덱스 항목은 건너뜀"""
        if not isinstance(entry, dict):
            return False
        names = entry.get('names')
        if names is not None and not (
            isinstance(names, list) and all(isinstance(n, str) for n in names)
        ):
            logger.warning("Skipping species index entry %r: bad 'names'", entry.get('id'))
            return False
        if not isinstance(entry.get('registry_file'), str) or not entry['registry_file']:
            logger.warning("Skipping species index entry %r: bad 'registry_file'", entry.get('id'))
            return False
        return bool(entry.get('id'))

    async def _load_registry(self, client: httpx.AsyncClient, relative: str) -> Tuple[Optional[Registry], Optional[str]]:
        try:
            data, source = await self._fetch_json(client, self._candidates(relative))
            return Registry.from_dict(data), source
        except (httpx.HTTPError, OSError, ValueError, RegistryError) as e:
            logger.warning("Registry document %s could not be loaded: %s", relative, e)
            return None, None

    @staticmethod
    def match_species(entries: List[Dict[str, Any]], normalized: str) -> Optional[Dict[str, Any]]:
        """정확히 일치하는 이름 우선, 없으면 인덱스 이름이 포함된 항목"""
        if not normalized:
            return None
        for entry in entries:
            if normalized in [normalize_species_name(n) for n in entry.get('names') or []]:
                return entry
        for entry in entries:
            names = [normalize_species_name(n) for n in entry.get('names') or []]
            if any(n and n in normalized for n in names):
                return entry
        return None

    async def resolve(self, species_name: str) -> RegistryResolution:
        """
        종 이름 -> 레지스트리 해석 (예외를 발생시키지 않음)

        Args:
            species_name: 자유 입력 종 이름 (예: "Ball Python")

        Returns:
            RegistryResolution
        """
        normalized = normalize_species_name(species_name)
        registry: Optional[Registry] = None
        source: Optional[str] = None

        async with self._client() as client:
            try:
                entries = await self.load_species_index(client)
                hit = self.match_species(entries, normalized)
                if hit:
                    logger.debug("Species %r matched index entry %s", species_name, hit['id'])
                    registry, source = await self._load_registry(client, hit['registry_file'])
            except RegistryError as e:
                logger.warning("Species index lookup failed: %s", e)

            if registry is None:
                guessed = guess_registry_id(species_name)
                if guessed:
                    logger.debug("Species %r guessed as %s", species_name, guessed)
                    registry, source = await self._load_registry(client, f"{guessed}.json")

        if registry is None:
            fallback = fallback_registry()
            logger.warning(
                "No genetic registry for species %r, using built-in %s registry",
                species_name, fallback.species.label
            )
            return RegistryResolution(
                registry=fallback,
                warnings=[
                    f"No genetic registry found for species '{species_name}'; "
                    f"using the built-in {fallback.species.label} registry."
                ],
                is_fallback=True,
                source="fallback"
            )

        logger.info("Resolved registry %s for species %r from %s",
                    registry.species.id, species_name, source)
        return RegistryResolution(registry=registry, source=source)


async def resolve_registry(species_name: str, config: Optional[LoaderConfig] = None) -> RegistryResolution:
    """
    편의 함수: 종 이름으로 레지스트리 해석

    Args:
        species_name: 종 이름
        config: 로더 설정 (None이면 내장 데이터 사용)

    Returns:
        RegistryResolution
    """
    loader = RegistryLoader(config)
    return await loader.resolve(species_name)
