import sys
import os
import pytest

sys.path.append(os.path.dirname(os.path.realpath(__file__)) + "/../lib")
from modification_catalog import ModificationCatalog, ModificationDefinition
from modification_catalog import STATIC_MOD, DYNAMIC_MOD, DYN_NTERM_PEPTIDE, DYN_CTERM_PEPTIDE
from mod_text_resolver import MSGFPlusModTextResolver, TopPICModTextResolver


def build_catalog(definitions):
    catalog = ModificationCatalog(definitions)
    catalog.assign_symbols()
    return catalog


@pytest.fixture
def catalog():
    return build_catalog([
        ModificationDefinition(name='Carbamidomethyl', mass=57.021464, residues='C', mod_type=STATIC_MOD),
        ModificationDefinition(name='Oxidation', mass=15.994915, residues='M', mod_type=DYNAMIC_MOD),
        ModificationDefinition(name='Methyl', mass=14.01565, residues='K', mod_type=DYNAMIC_MOD),
        ModificationDefinition(name='Acetyl', mass=42.010565, residues='<', mod_type=DYN_NTERM_PEPTIDE),
    ])


def test_resolve_dynamic_mod_1(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('K.LQVPAGK+14.016ANPSPPIGPALGQR.G')
    assert resolved.peptide == 'K.LQVPAGK#ANPSPPIGPALGQR.G'
    assert resolved.total_mod_mass == pytest.approx(14.016)
    assert resolved.success


def test_resolve_is_idempotent(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    first = resolver.resolve('R.PEPM+15.995TIDEK.A')
    second = resolver.resolve(first.peptide)
    assert first.peptide == 'R.PEPM*TIDEK.A'
    assert second.peptide == first.peptide
    assert second.total_mod_mass == 0.0


def test_resolve_static_mod_is_dropped(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('R.C+57.021PEPM+15.995K.A')
    assert resolved.peptide == 'R.CPEPM*K.A'
    assert resolved.total_mod_mass == pytest.approx(57.021 + 15.995)


def test_resolve_nterminal_mod(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('-.+42.011PEPTIDEK.A')
    assert resolved.peptide == '-.P@EPTIDEK.A'
    assert resolved.total_mod_mass == pytest.approx(42.011)


def test_resolve_concatenated_mods(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('K.M+15.995+14.016PEPTIDEK.A')
    assert resolved.peptide == 'K.M*#PEPTIDEK.A'
    assert resolved.total_mod_mass == pytest.approx(15.995 + 14.016)


def test_resolve_unknown_mass(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('K.PEPT+79.966IDEK.A')
    assert resolved.peptide == 'K.PEPT+79.966IDEK.A'
    assert not resolved.success
    assert resolved.total_mod_mass == pytest.approx(79.966)
    assert resolver.find_unresolved_mass(resolved.peptide) == '+79.966'
    assert resolver.find_unresolved_mass('-.PEPTIDEK.-') is None


def test_resolve_lists_modifications(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('-.+42.011PEPC+57.021M+15.995K.A')
    assert resolved.peptide == '-.P@EPCM*K.A'
    assert [ (modification['name'], modification['residue'], modification['position']) for modification in resolved.modifications ] == [
        ('Acetyl', 'P', 1), ('Carbamidomethyl', 'C', 4), ('Oxidation', 'M', 5) ]
    assert resolved.modifications[2]['symbol'] == '*'
    assert resolved.modifications[1]['definition'].is_static()


def test_resolve_mass_conservation(catalog):
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('K.C+57.021M+15.995PEPT+79.966K+14.016.A')
    assert resolved.total_mod_mass == pytest.approx(57.021 + 15.995 + 79.966 + 14.016)
    assert not resolved.success
    assert resolved.peptide == 'K.CM*PEPT+79.966K#.A'


def test_resolve_prefers_dynamic_mod_on_residue():
    catalog = build_catalog([
        ModificationDefinition(name='Carbamidomethyl', mass=57.021464, residues='C', mod_type=STATIC_MOD),
        ModificationDefinition(name='Carbamidomethyl_K', mass=57.021464, residues='K', mod_type=DYNAMIC_MOD),
    ])
    resolver = MSGFPlusModTextResolver(catalog)
    assert resolver.resolve('R.PEPK+57.021IDE.G').peptide == 'R.PEPK*IDE.G'
    assert resolver.resolve('R.PEPC+57.021IDE.G').peptide == 'R.PEPCIDE.G'


def test_resolve_cterminal_mod():
    catalog = build_catalog([
        ModificationDefinition(name='Amidated', mass=-0.984016, residues='>', mod_type=DYN_CTERM_PEPTIDE),
    ])
    resolver = MSGFPlusModTextResolver(catalog)
    resolved = resolver.resolve('K.PEPTIDEK-0.984.A')
    assert resolved.peptide == 'K.PEPTIDEK*.A'
    assert resolved.total_mod_mass == pytest.approx(-0.984)


def test_resolve_msgfdb_unprinted_static_mass(catalog):
    resolver = MSGFPlusModTextResolver(catalog, is_msgf_plus=False)
    resolved = resolver.resolve('R.CPEPCK.A')
    assert resolved.peptide == 'R.CPEPCK.A'
    assert resolved.total_mod_mass == pytest.approx(2 * 57.021464)


def test_toppic_resolve_1():
    resolver = TopPICModTextResolver()
    resolved = resolver.resolve('M.(AS)[Acetyl]LK[15.995]Q.V')
    assert resolved.peptide == 'M.(AS)[Acetyl]LK[15.995]Q.V'
    assert resolved.success
    assert resolved.total_mod_mass == pytest.approx(42.010565 + 15.995)
    assert len(resolved.modifications) == 2

    acetyl, oxidation = resolved.modifications
    assert acetyl['residue'] == 'A'
    assert acetyl['position'] == 1
    assert acetyl['ambiguous']
    assert oxidation['residue'] == 'K'
    assert oxidation['position'] == 4
    assert not oxidation['ambiguous']
    assert resolver.get_clean_sequence('M.(AS)[Acetyl]LK[15.995]Q.V') == 'ASLKQ'


def test_toppic_resolve_scientific_notation():
    resolver = TopPICModTextResolver()
    resolved = resolver.resolve('K.PEP[4.52e-003]TIDE.-')
    assert resolved.total_mod_mass == pytest.approx(0.00452)


def test_toppic_leading_mod_goes_on_first_residue():
    resolver = TopPICModTextResolver()
    resolved = resolver.resolve('-.[Acetyl]ASDFK.-')
    assert resolved.modifications[0]['position'] == 1
    assert resolved.modifications[0]['residue'] == 'A'


def test_toppic_unknown_named_mod_collected_once():
    resolver = TopPICModTextResolver()
    first = resolver.resolve('K.PEP[Mystery]TIDE.A')
    second = resolver.resolve('K.PEPT[Mystery]IDE.A')
    assert not first.success
    assert not second.success
    assert first.total_mod_mass == 0.0
    assert not first.modifications[0]['known']
    assert first.modifications[0]['definition'] is None
    assert resolver.unknown_named_mods == { 'Mystery' }


def test_toppic_named_mod_from_catalog():
    catalog = build_catalog([ ModificationDefinition(name='Custom_Label', mass=123.456, residues='K', mod_type=DYNAMIC_MOD) ])
    resolver = TopPICModTextResolver(catalog)
    resolved = resolver.resolve('R.PEPK[custom_label]R.-')
    assert resolved.success
    assert resolved.total_mod_mass == pytest.approx(123.456)
    assert resolved.modifications[0]['definition'].name == 'Custom_Label'


def test_resolve_msgfdb_protein_nterminal_static():
    catalog = build_catalog([ ModificationDefinition(name='Acetyl', mass=42.010565, residues='[', mod_type=STATIC_MOD) ])
    resolver = MSGFPlusModTextResolver(catalog, is_msgf_plus=False)
    assert resolver.resolve('K.ACDEFR.G').total_mod_mass == 0.0
    resolved = resolver.resolve('-.ACDEFR.G')
    assert resolved.peptide == '-.ACDEFR.G'
    assert resolved.total_mod_mass == pytest.approx(42.010565)
    assert [ (modification['name'], modification['position']) for modification in resolved.modifications ] == [ ('Acetyl', 1) ]
