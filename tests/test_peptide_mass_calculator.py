import sys
import os
import pytest

sys.path.append(os.path.dirname(os.path.realpath(__file__)) + "/../lib")
from peptide_mass_calculator import PeptideMassCalculator
from cleavage_state_calculator import CleavageStateCalculator


def test_sequence_mass_1():
    calculator = PeptideMassCalculator()
    assert calculator.compute_sequence_mass('G') == pytest.approx(75.032028435, abs=1e-6)
    assert calculator.compute_sequence_mass('') == 0.0


def test_sequence_mass_unknown_residue():
    calculator = PeptideMassCalculator()
    assert calculator.compute_sequence_mass('PEP1TIDE') == -1


def test_custom_amino_acid_mass():
    calculator = PeptideMassCalculator()
    calculator.set_amino_acid_mass('j', 100.0)
    assert calculator.compute_sequence_mass('J') == pytest.approx(100.0 + calculator.water_mass)
    calculator.reset_amino_acid_masses()
    assert calculator.aa_masses['J'] == 0.0
    assert calculator.set_amino_acid_mass('JJ', 100.0) is False


def test_convolute_mass_1():
    calculator = PeptideMassCalculator()
    proton = calculator.charge_carrier_mass
    assert calculator.convolute_mass(1000.0, 0) == pytest.approx(1000.0 + proton)
    assert calculator.convolute_mass(1000.0, 0, 2) == pytest.approx((1000.0 + 2 * proton) / 2)
    assert calculator.convolute_mass(501.0, 2, 0) == pytest.approx(1002.0 - 2 * proton)
    assert calculator.convolute_mass(500.0, 3, 3) == 500.0


def test_convolute_mass_custom_charge_carrier():
    calculator = PeptideMassCalculator(charge_carrier_mass=22.989218)
    assert calculator.convolute_mass(1000.0, 0) == pytest.approx(1022.989218)


def test_ppm_conversions():
    calculator = PeptideMassCalculator()
    assert calculator.mass_to_ppm(0.001, 1000.0) == pytest.approx(1.0)
    assert calculator.ppm_to_mass(5.0, 2000.0) == pytest.approx(0.01)


def test_delm_corrected_ppm_1():
    calculator = PeptideMassCalculator()

    #### One C13 offset is removed before computing the ppm error
    ppm = calculator.compute_delm_corrected_ppm(1.0034, 1001.0034, 1000.0)
    assert ppm == pytest.approx((1001.0034 - calculator.mass_c13 - 1000.0) * 1e6 / 1000.0, abs=1e-6)

    ppm = calculator.compute_delm_corrected_ppm(0.002, 1000.002, 1000.0)
    assert ppm == pytest.approx(2.0)


def test_formula_mass():
    calculator = PeptideMassCalculator()
    assert calculator.compute_formula_mass('C2H3N1O1') == pytest.approx(57.021464, abs=1e-5)
    assert calculator.compute_formula_mass('HexNAc') == pytest.approx(203.079376)


def test_cleavage_state_1():
    calculator = CleavageStateCalculator()
    assert calculator.compute_cleavage_state('K.ACDEFR.G') == 2
    assert calculator.compute_cleavage_state('A.ACDEFR.G') == 1
    assert calculator.compute_cleavage_state('A.ACDEFG.G') == 0
    assert calculator.compute_cleavage_state('K.PEPTIDER.G') == 1


def test_cleavage_state_termini():
    calculator = CleavageStateCalculator()
    assert calculator.compute_cleavage_state('-.MACDEFK.A') == 2
    assert calculator.compute_cleavage_state('-.MACDEFG.A') == 0
    assert calculator.compute_cleavage_state('K.ACDEFG.-') == 2
    assert calculator.compute_cleavage_state('K.AC*DEF#R.G') == 2


def test_prefix_and_suffix():
    assert CleavageStateCalculator.split_prefix_and_suffix('K.ACDEF.G') == ('ACDEF', 'K', 'G')
    assert CleavageStateCalculator.split_prefix_and_suffix('ACDEF') == ('ACDEF', '', '')
    assert CleavageStateCalculator.get_clean_sequence('K.M*PEP#TIDE.G') == 'MPEPTIDE'
