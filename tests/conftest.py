"""Pytest configuration and fixtures for morph engine tests."""

import pytest

from morph_engine import Individual, Registry, fallback_registry
from morph_engine.registry import BUNDLED_DATA_DIR, LoaderConfig, RegistryLoader


def make_parent(pid="1", species="Ball Python", morph=None, name=None, **genetics):
    """Build an Individual from keyword zygosities (pastel='het', ...)."""
    return Individual.from_dict({
        'id': pid,
        'name': name,
        'species': species,
        'morph': morph,
        'genetics': genetics,
    })


@pytest.fixture
def ball_registry():
    """The built-in Ball Python registry."""
    return fallback_registry()


@pytest.fixture
def clown_registry():
    """Single recessive locus."""
    return Registry.from_dict({
        'species': {'id': 'test', 'label': 'Test Snake', 'aliases': []},
        'groups': [],
        'loci': [{'name': 'clown', 'label': 'Clown', 'type': 'recessive'}],
        'interallelicPhenotypes': {},
    })


@pytest.fixture
def pastel_registry():
    """Single incomplete-dominant locus with a super name."""
    return Registry.from_dict({
        'species': {'id': 'test', 'label': 'Test Snake', 'aliases': []},
        'groups': [],
        'loci': [{'name': 'pastel', 'label': 'Pastel', 'type': 'incomplete'}],
        'interallelicPhenotypes': {},
        'superNames': {'pastel': 'Super Pastel'},
    })


@pytest.fixture
def bundled_loader():
    """Loader reading the registries shipped with the package."""
    return RegistryLoader(LoaderConfig(data_dir=BUNDLED_DATA_DIR))
