import sys
import os
import pytest

sys.path.append(os.path.dirname(os.path.realpath(__file__)) + "/../lib")
from modification_catalog import ModificationCatalog, ModificationDefinition, ParamFileModExtractor
from modification_catalog import STATIC_MOD, DYNAMIC_MOD, DYN_NTERM_PROTEIN, DYN_CTERM_PEPTIDE, CUSTOM_AA
from search_engine_params import SearchEngineParams


MSGFPLUS_PARAMS = """#Parent mass tolerance
PrecursorMassTolerance=20ppm
ChargeCarrierMass=1.00727649
NumMods=3
StaticMod=C2H3N1O1,  C,   fix, any,         Carbamidomethyl     # Fixed Carbamidomethyl C
StaticMod=229.162932,*,  fix, N-term,      TMT6plex
DynamicMod=O1,       M,   opt, any,         Oxidation
DynamicMod=HO3P,     STY, opt, any,         Phospho
DynamicMod=C2H2O,    *,   opt, Prot-N-term, Acetyl
DynamicMod=-0.984016,*,   opt, C-term,      Amidated
DynamicMod=None
CustomAA=C5H7N1O2S0,J,custom,P,Hydroxylation_P
"""

TOPPIC_PARAMS = """StaticMod=Carbamidomethylation,57.021464,C,any,4
DynamicMod=Phospho,79.966331,STY,any,21
DynamicMod=Acetyl,42.010565,*,N-term,1
"""


def write_file(directory, name, contents):
    filepath = os.path.join(directory, name)
    with open(filepath, 'w') as outfile:
        outfile.write(contents)
    return filepath


def test_extract_msgfplus_mods(tmp_path):
    param_file = write_file(tmp_path, 'MSGFPlus_Params.txt', MSGFPLUS_PARAMS)
    extractor = ParamFileModExtractor()
    success, definitions = extractor.extract_mod_info_from_param_file(param_file, 'msgfplus')
    assert success
    assert len(definitions) == 7

    by_name = { definition.name: definition for definition in definitions }
    assert by_name['Carbamidomethyl'].mod_type == STATIC_MOD
    assert by_name['Carbamidomethyl'].residues == 'C'
    assert by_name['Carbamidomethyl'].mass == pytest.approx(57.021464, abs=1e-5)
    assert by_name['TMT6plex'].mod_type == STATIC_MOD
    assert by_name['TMT6plex'].residues == '<'
    assert by_name['TMT6plex'].is_terminal_static()
    assert by_name['Oxidation'].mass == pytest.approx(15.994915, abs=1e-5)
    assert by_name['Phospho'].residues == 'STY'
    assert by_name['Acetyl'].mod_type == DYN_NTERM_PROTEIN
    assert by_name['Acetyl'].residues == '['
    assert by_name['Amidated'].mod_type == DYN_CTERM_PEPTIDE
    assert by_name['Amidated'].residues == '>'
    assert by_name['Hydroxylation_P'].mod_type == CUSTOM_AA
    assert by_name['Hydroxylation_P'].residues == 'J'


def test_extract_mods_txt_lines(tmp_path):
    param_file = write_file(tmp_path, 'Mods.txt', "NumMods=2\n57.021464,C,fix,any,Carbamidomethyl\n15.994915,M,opt,any,\n")
    extractor = ParamFileModExtractor()
    success, definitions = extractor.extract_mod_info_from_param_file(param_file, 'msgfplus')
    assert success
    assert [ definition.mod_type for definition in definitions ] == [ STATIC_MOD, DYNAMIC_MOD ]
    assert definitions[1].name == 'UnnamedMod1'


def test_extract_mods_equals_sign_error(tmp_path):
    param_file = write_file(tmp_path, 'Bad_Params.txt', "DynamicMod=mass=15.99,M,opt,any,Oxidation\n")
    extractor = ParamFileModExtractor()
    success, definitions = extractor.extract_mod_info_from_param_file(param_file, 'msgfplus')
    assert not success
    assert 'unknown keyword' in extractor.error_message


def test_extract_mods_missing_file(tmp_path):
    extractor = ParamFileModExtractor()
    success, definitions = extractor.extract_mod_info_from_param_file(os.path.join(tmp_path, 'nothere.txt'), 'msgfplus')
    assert not success
    assert definitions == []
    success, definitions = extractor.extract_mod_info_from_param_file(os.path.join(tmp_path, 'nothere.txt'), 'sequest')
    assert not success


def test_extract_unrecognized_position(tmp_path):
    param_file = write_file(tmp_path, 'Params.txt', "DynamicMod=O1,M,opt,middle,Oxidation\n")
    extractor = ParamFileModExtractor()
    success, definitions = extractor.extract_mod_info_from_param_file(param_file, 'msgfplus')
    assert success
    assert definitions[0].residues == 'M'
    assert len(extractor.warnings) == 1


def test_extract_toppic_mods(tmp_path):
    param_file = write_file(tmp_path, 'TopPIC_Params.txt', TOPPIC_PARAMS)
    extractor = ParamFileModExtractor(tool_name='TopPIC')
    success, definitions = extractor.extract_mod_info_from_param_file(param_file, 'toppic')
    assert success
    assert [ definition.name for definition in definitions ] == [ 'Carbamidomethylation', 'Phospho', 'Acetyl' ]
    assert definitions[0].mod_type == STATIC_MOD
    assert definitions[1].unimod_id == 21
    assert definitions[1].mass == pytest.approx(79.966331)
    assert definitions[2].residues == '<'


def test_assign_symbols_1():
    catalog = ModificationCatalog([
        ModificationDefinition(name='Carbamidomethyl', mass=57.021464, residues='C', mod_type=STATIC_MOD),
        ModificationDefinition(name='Oxidation', mass=15.994915, residues='M', mod_type=DYNAMIC_MOD),
        ModificationDefinition(name='Methyl', mass=14.01565, residues='K', mod_type=DYNAMIC_MOD),
        ModificationDefinition(name='Oxidation_W', mass=15.9949, residues='W', mod_type=DYNAMIC_MOD),
    ])
    catalog.assign_symbols()
    assert [ definition.symbol for definition in catalog.definitions ] == [ '-', '*', '#', '*' ]
    assert catalog.modification_count == 4
    assert catalog.get_modification_type_by_index(0) == STATIC_MOD


def test_lookup_by_name():
    catalog = ModificationCatalog([ ModificationDefinition(name='MyMod', mass=12.5, residues='K') ])
    assert catalog.lookup_modification_mass_by_name('mymod') == (True, 12.5)
    found, mod_mass = catalog.lookup_modification_mass_by_name('Acetyl')
    assert found
    assert mod_mass == pytest.approx(42.010565)
    assert catalog.lookup_modification_mass_by_name('NoSuchMod') == (False, 0.0)


def test_static_masses():
    catalog = ModificationCatalog([
        ModificationDefinition(name='Carbamidomethyl', mass=57.021464, residues='C', mod_type=STATIC_MOD),
        ModificationDefinition(name='TMT6plex', mass=229.162932, residues='<', mod_type=STATIC_MOD),
    ])
    assert catalog.get_static_residue_mass('C') == pytest.approx(57.021464)
    assert catalog.get_static_residue_mass('K') == 0.0
    assert catalog.get_static_terminal_mass('<') == pytest.approx(229.162932)


def test_search_engine_params(tmp_path):
    param_file = write_file(tmp_path, 'MSGFPlus_Params.txt', MSGFPLUS_PARAMS)
    search_engine_params = SearchEngineParams(param_file)
    assert search_engine_params.read() == 'OK'
    tolerance = search_engine_params.get_precursor_mass_tolerance()
    assert tolerance == { 'left': 20.0, 'right': 20.0, 'is_ppm': True }
    assert search_engine_params.get_charge_carrier_mass() == pytest.approx(1.00727649)
    assert search_engine_params.get('NumMods') == '3'
    assert len(search_engine_params.parameters['dynamicmod']) == 5


def test_search_engine_params_tolerance_pair(tmp_path):
    param_file = write_file(tmp_path, 'Params.txt', "PMTolerance=0.5Da,2.5Da\n")
    search_engine_params = SearchEngineParams(param_file)
    assert search_engine_params.read() == 'OK'
    assert search_engine_params.get_precursor_mass_tolerance() == { 'left': 0.5, 'right': 2.5, 'is_ppm': False }
    assert search_engine_params.get_charge_carrier_mass() is None


def test_search_engine_params_missing_and_empty(tmp_path):
    assert SearchEngineParams(os.path.join(tmp_path, 'nothere.txt')).read() == 'MISSING'
    empty_file = write_file(tmp_path, 'Empty.txt', '')
    assert SearchEngineParams(empty_file).read() == 'EMPTY'


def test_type_symbols_and_definition_lookup():
    catalog = ModificationCatalog([
        ModificationDefinition(name='Carbamidomethyl', mass=57.021464, residues='C', mod_type=STATIC_MOD),
        ModificationDefinition(name='TMT6plex', mass=229.162932, residues='<', mod_type=STATIC_MOD),
        ModificationDefinition(name='ProtNTermAcetyl', mass=42.010565, residues='[', mod_type=STATIC_MOD),
        ModificationDefinition(name='Oxidation', mass=15.994915, residues='M', mod_type=DYNAMIC_MOD),
        ModificationDefinition(name='Acetyl', mass=42.010565, residues='[', mod_type=DYN_NTERM_PROTEIN),
    ])
    assert [ definition.get_type_symbol() for definition in catalog.definitions ] == [ 'S', 'T', 'P', 'D', 'D' ]
    assert catalog.find_definition_by_name('oxidation') is catalog.definitions[3]
    assert catalog.find_definition_by_name('Phospho') is None
    assert [ definition.name for definition in catalog.get_static_terminal_definitions('[') ] == [ 'ProtNTermAcetyl' ]
    assert [ definition.name for definition in catalog.get_static_residue_definitions('C') ] == [ 'Carbamidomethyl' ]
