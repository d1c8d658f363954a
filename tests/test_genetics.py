"""Tests for genotype extraction and per-locus Punnett distributions."""

import pytest

from morph_engine import ChildZygosity, GeneticsEngine, GenotypeToken, Locus, LocusType, Zygosity

from conftest import make_parent


CLOWN = Locus(name='clown', label='Clown', type=LocusType.RECESSIVE)
PASTEL = Locus(name='pastel', label='Pastel', type=LocusType.INCOMPLETE)
YB = Locus(name='yellowbelly', label='Yellow Belly', type=LocusType.INCOMPLETE,
           aliases=['yb'], group='YB')


@pytest.mark.parametrize("locus_type,zygosity,expected", [
    (LocusType.RECESSIVE, Zygosity.NORMAL, GenotypeToken.RR),
    (LocusType.RECESSIVE, Zygosity.HET, GenotypeToken.Rr),
    (LocusType.RECESSIVE, Zygosity.VISUAL, GenotypeToken.rr),
    (LocusType.RECESSIVE, Zygosity.SUPER, GenotypeToken.rr),
    (LocusType.INCOMPLETE, Zygosity.NORMAL, GenotypeToken.dd),
    (LocusType.INCOMPLETE, Zygosity.HET, GenotypeToken.Dd),
    (LocusType.INCOMPLETE, Zygosity.VISUAL, GenotypeToken.Dd),
    (LocusType.INCOMPLETE, Zygosity.SUPER, GenotypeToken.DD),
    (LocusType.DOMINANT, Zygosity.SUPER, GenotypeToken.DD),
    (LocusType.RECESSIVE, Zygosity.UNKNOWN, GenotypeToken.UNKNOWN),
    (LocusType.INCOMPLETE, Zygosity.UNKNOWN, GenotypeToken.UNKNOWN),
])
def test_zygosity_to_token(locus_type, zygosity, expected):
    assert GeneticsEngine.zygosity_to_token(locus_type, zygosity) == expected


def test_explicit_zygosity_wins_over_morph():
    parent = make_parent(morph="Clown", clown='het')
    assert GeneticsEngine.extract_genotype(parent, CLOWN) == GenotypeToken.Rr


def test_morph_heuristic_matches_label_name_and_alias():
    assert GeneticsEngine.extract_genotype(make_parent(morph="Pastel Clown"), CLOWN) == GenotypeToken.rr
    assert GeneticsEngine.extract_genotype(make_parent(morph="pastel"), PASTEL) == GenotypeToken.Dd
    assert GeneticsEngine.extract_genotype(make_parent(morph="Super YB"), YB) == GenotypeToken.Dd


def test_missing_information_defaults_to_wild_type():
    parent = make_parent(morph="Normal")
    assert GeneticsEngine.extract_genotype(parent, CLOWN) == GenotypeToken.RR
    assert GeneticsEngine.extract_genotype(parent, PASTEL) == GenotypeToken.dd
    assert GeneticsEngine.extract_genotype(make_parent(), PASTEL) == GenotypeToken.dd


def test_recessive_het_by_het():
    dist = GeneticsEngine.punnett_locus(LocusType.RECESSIVE, GenotypeToken.Rr, GenotypeToken.Rr)
    assert dist[ChildZygosity.NORMAL] == pytest.approx(0.25)
    assert dist[ChildZygosity.HET] == pytest.approx(0.5)
    assert dist[ChildZygosity.VISUAL] == pytest.approx(0.25)
    assert dist[ChildZygosity.SUPER] == 0


def test_recessive_visual_by_normal_gives_all_het():
    dist = GeneticsEngine.punnett_locus(LocusType.RECESSIVE, GenotypeToken.rr, GenotypeToken.RR)
    assert dist[ChildZygosity.HET] == pytest.approx(1.0)
    assert sum(dist.values()) == pytest.approx(1.0)


def test_incomplete_het_by_het():
    dist = GeneticsEngine.punnett_locus(LocusType.INCOMPLETE, GenotypeToken.Dd, GenotypeToken.Dd)
    assert dist[ChildZygosity.SUPER] == pytest.approx(0.25)
    assert dist[ChildZygosity.HET] == pytest.approx(0.5)
    assert dist[ChildZygosity.NORMAL] == pytest.approx(0.25)
    assert dist[ChildZygosity.VISUAL] == 0


def test_unknown_parent_uses_fixed_distribution():
    recessive = GeneticsEngine.punnett_locus(LocusType.RECESSIVE, GenotypeToken.UNKNOWN, GenotypeToken.RR)
    assert recessive == {
        ChildZygosity.NORMAL: 0.0,
        ChildZygosity.HET: 0.5,
        ChildZygosity.SUPER: 0.0,
        ChildZygosity.VISUAL: 0.5,
    }

    incomplete = GeneticsEngine.punnett_locus(LocusType.INCOMPLETE, GenotypeToken.DD, GenotypeToken.UNKNOWN)
    assert incomplete[ChildZygosity.NORMAL] == 0.5
    assert incomplete[ChildZygosity.HET] == 0.5
    assert incomplete[ChildZygosity.SUPER] == 0.0


def test_punnett_square_grid():
    grid = GeneticsEngine.punnett_square(LocusType.RECESSIVE, GenotypeToken.Rr, GenotypeToken.Rr)
    assert [[cell[0] for cell in row] for row in grid] == [["RR", "Rr"], ["Rr", "rr"]]
    assert grid[1][1][1] == ChildZygosity.VISUAL
    assert GeneticsEngine.punnett_square(LocusType.RECESSIVE, GenotypeToken.UNKNOWN, GenotypeToken.Rr) == []


def test_recessive_het_by_normal_gives_half_het():
    dist = GeneticsEngine.punnett_locus(LocusType.RECESSIVE, GenotypeToken.Rr, GenotypeToken.RR)
    assert dist[ChildZygosity.HET] == pytest.approx(0.5)
    assert dist[ChildZygosity.NORMAL] == pytest.approx(0.5)
    assert dist[ChildZygosity.VISUAL] == 0
