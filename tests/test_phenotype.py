"""Tests for phenotype naming rules."""

from morph_engine import ChildZygosity, PhenotypeNamer, Registry

N = ChildZygosity.NORMAL
HET = ChildZygosity.HET
SUPER = ChildZygosity.SUPER
VISUAL = ChildZygosity.VISUAL


def test_recessive_tags(ball_registry):
    namer = PhenotypeNamer(ball_registry)
    assert namer.name({'clown': VISUAL}) == ("Clown", ["Clown"], True)
    assert namer.name({'clown': HET}) == ("het Clown", ["het Clown"], False)
    assert namer.name({'clown': N}) == ("Normal", [], False)


def test_incomplete_tags_use_super_names(ball_registry):
    namer = PhenotypeNamer(ball_registry)
    assert namer.name({'pastel': SUPER})[0] == "Super Pastel"
    assert namer.name({'pastel': HET}) == ("Pastel", ["Pastel"], True)
    # no superNames entry for mojave
    assert namer.name({'mojave': SUPER})[0] == "Super Mojave"


def test_super_name_key_variants():
    registry = Registry.from_dict({
        'species': {'id': 't', 'label': 'T'},
        'loci': [{'name': 'enchi', 'label': 'Enchi', 'type': 'incomplete'}],
        'superNames': {'enchi:DD': 'Double Enchi'},
    })
    assert PhenotypeNamer(registry).name({'enchi': SUPER})[0] == "Double Enchi"


def test_tags_follow_registry_order(ball_registry):
    label, tags, visual = PhenotypeNamer(ball_registry).name(
        {'clown': HET, 'pastel': HET, 'banana': SUPER}
    )
    assert label == "Pastel Super Banana het Clown"
    assert visual


def test_interallelic_name_replaces_both_tags(ball_registry):
    namer = PhenotypeNamer(ball_registry)
    label, tags, visual = namer.name({'pastel': HET, 'mojave': HET, 'lesser': HET})
    assert label == "Pastel BEL (Lesser Mojave)"
    assert "Mojave" not in tags and "Lesser" not in tags

    assert namer.name({'yellowbelly': HET, 'gravel': HET})[0] == "Highway"


def test_interallelic_names_follow_locus_order(ball_registry):
    # groups list BEL before YB, but yellowbelly precedes mojave in the locus list
    label, _, _ = PhenotypeNamer(ball_registry).name(
        {'yellowbelly': HET, 'gravel': HET, 'lesser': HET, 'mojave': HET}
    )
    assert label == "Highway BEL (Lesser Mojave)"


def test_interallelic_requires_exactly_two(ball_registry):
    label, _, _ = PhenotypeNamer(ball_registry).name(
        {'mojave': HET, 'lesser': HET, 'phantom': HET}
    )
    assert label == "Mojave Lesser Phantom"


def test_interallelic_disabled_or_non_exclusive_group():
    base = {
        'species': {'id': 't', 'label': 'T'},
        'loci': [
            {'name': 'a', 'label': 'A', 'type': 'incomplete', 'group': 'G'},
            {'name': 'b', 'label': 'B', 'type': 'incomplete', 'group': 'G'},
        ],
        'interallelicPhenotypes': {'G': {'a+b': 'AB Combo'}},
    }
    disabled = Registry.from_dict({
        **base, 'groups': [{'id': 'G', 'label': 'G', 'exclusive': True, 'allowInterallelicNames': False}]
    })
    assert PhenotypeNamer(disabled).name({'a': HET, 'b': HET})[0] == "A B"

    open_group = Registry.from_dict({
        **base, 'groups': [{'id': 'G', 'label': 'G', 'exclusive': False}]
    })
    assert PhenotypeNamer(open_group).name({'a': HET, 'b': HET})[0] == "A B"

    enabled = Registry.from_dict({
        **base, 'groups': [{'id': 'G', 'label': 'G', 'exclusive': True}]
    })
    assert PhenotypeNamer(enabled).name({'a': HET, 'b': HET})[0] == "AB Combo"


def _combo_registry():
    return Registry.from_dict({
        'species': {'id': 't', 'label': 'T'},
        'loci': [
            {'name': 'amel', 'label': 'Amel', 'type': 'recessive'},
            {'name': 'anery', 'label': 'Anery', 'type': 'recessive'},
            {'name': 'pastel', 'label': 'Pastel', 'type': 'incomplete'},
            {'name': 'spider', 'label': 'Spider', 'type': 'dominant'},
        ],
        'namedCombos': {'amel+anery': 'Snow', 'pastel+spider': 'Bumblebee'},
    })


def test_named_combo_replaces_expressed_loci():
    namer = PhenotypeNamer(_combo_registry())
    assert namer.name({'amel': VISUAL, 'anery': VISUAL}) == ("Snow", ["Snow"], True)
    assert namer.name({'pastel': HET, 'spider': HET})[0] == "Bumblebee"
    assert namer.name({'pastel': SUPER, 'spider': HET})[0] == "Bumblebee"


def test_named_combo_ignores_recessive_hets():
    namer = PhenotypeNamer(_combo_registry())
    assert namer.name({'amel': VISUAL, 'anery': HET})[0] == "Amel het Anery"
    assert namer.expressed_loci({'amel': VISUAL, 'anery': HET}) == ['amel']
