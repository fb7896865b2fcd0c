#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import argparse
import copy

#### Import technical modules
from pyteomics import mass


####################################################################################################
#### PeptideMassCalculator class
class PeptideMassCalculator:

    ####################################################################################################
    #### Constructor
    def __init__(self, charge_carrier_mass=None, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.atomic_masses = None
        self.default_aa_masses = None
        self.aa_masses = None
        self.mass_c13 = 1.00335483

        self.prepare_mass_tables()

        self.charge_carrier_mass = self.atomic_masses['proton']
        if charge_carrier_mass is not None and charge_carrier_mass > 0:
            self.charge_carrier_mass = charge_carrier_mass


    ####################################################################################################
    def prepare_mass_tables(self):

        # Define a subset of useful atomic masses and the proton
        self.atomic_masses = {
            'proton': 1.00727646688,
            'hydrogen': 1.007825035,
            'carbon': 12.0000000,
            'nitrogen': 14.0030740,
            'oxygen': 15.99491463,
        }
        self.water_mass = 2 * self.atomic_masses['hydrogen'] + self.atomic_masses['oxygen']

        # Monoisotopic residue masses
        # From https://proteomicsresource.washington.edu/protocols06/masses.php
        self.default_aa_masses = {
            'G': 57.021463735,
            'A': 71.037113805,
            'S': 87.032028435,
            'P': 97.052763875,
            'V': 99.068413945,
            'T': 101.047678505,
            'C': 103.009184505,
            'L': 113.084064015,
            'I': 113.084064015,
            'N': 114.042927470,
            'D': 115.026943065,
            'Q': 128.058577540,
            'K': 128.094963050,
            'E': 129.042593135,
            'M': 131.040484645,
            'H': 137.058911875,
            'F': 147.068413945,
            'U': 150.953633405,  # selenocysteine
            'R': 156.101111050,
            'Y': 163.063328575,
            'W': 186.079312980,
            'O': 114.079306,     # pyrrolysine, as reported by the search engines
            'J': 0.0,
        }

        # Ambiguous residues take the mass of one of their members
        self.default_aa_masses['B'] = self.default_aa_masses['N']
        self.default_aa_masses['X'] = self.default_aa_masses['L']
        self.default_aa_masses['Z'] = self.default_aa_masses['Q']

        self.aa_masses = copy.copy(self.default_aa_masses)


    ####################################################################################################
    #### Override the mass of a residue (custom amino acids)
    def set_amino_acid_mass(self, residue, residue_mass):
        residue = residue.upper()
        if len(residue) != 1 or not residue.isalpha():
            eprint(f"ERROR: Cannot set the mass of residue '{residue}'; must be a single letter")
            return False
        self.aa_masses[residue] = residue_mass
        return True


    ####################################################################################################
    def reset_amino_acid_masses(self):
        self.aa_masses = copy.copy(self.default_aa_masses)


    ####################################################################################################
    #### Compute the monoisotopic mass of a sequence of residue letters, including water
    def compute_sequence_mass(self, sequence):

        total_mass = 0.0
        n_valid_residues = 0
        for residue in sequence:
            residue = residue.upper()
            if residue not in self.aa_masses:
                eprint(f"ERROR: Unknown residue '{residue}' in sequence {sequence}")
                return -1
            total_mass += self.aa_masses[residue]
            n_valid_residues += 1

        if n_valid_residues > 0:
            total_mass += self.water_mass

        return total_mass


    ####################################################################################################
    #### Convert from one charge state to another. Charge 0 means neutral mass, charge 1 is M+H
    def convolute_mass(self, mass_mz, current_charge, desired_charge=1, charge_carrier=0):

        if abs(charge_carrier) < 1e-10:
            charge_carrier = self.charge_carrier_mass

        if current_charge == desired_charge:
            return mass_mz

        #### First convert to M+H
        if current_charge == 1:
            mh_mass = mass_mz
        elif current_charge > 1:
            mh_mass = mass_mz * current_charge - charge_carrier * (current_charge - 1)
        elif current_charge == 0:
            mh_mass = mass_mz + charge_carrier
        else:
            return 0.0

        #### Then convert to the requested charge
        if desired_charge > 1:
            return (mh_mass + charge_carrier * (desired_charge - 1)) / desired_charge
        elif desired_charge == 1:
            return mh_mass
        elif desired_charge == 0:
            return mh_mass - charge_carrier
        return 0.0


    ####################################################################################################
    def mass_to_ppm(self, mass_to_convert, current_mz):
        return mass_to_convert * 1e6 / current_mz


    def ppm_to_mass(self, ppm_to_convert, current_mz):
        return ppm_to_convert / 1e6 * current_mz


    ####################################################################################################
    #### Compute a mass error in ppm, first removing whole C13 isotope offsets from the mass difference
    def compute_delm_corrected_ppm(self, delta_mass, precursor_mono_mass, peptide_mono_mass, adjust_precursor_mass_for_c13=True):

        n_c13_offsets = 0
        if delta_mass >= -0.5:
            while delta_mass > 0.5:
                delta_mass -= self.mass_c13
                n_c13_offsets += 1
        else:
            while delta_mass < -0.5:
                delta_mass += self.mass_c13
                n_c13_offsets -= 1

        if n_c13_offsets != 0:
            if adjust_precursor_mass_for_c13:
                precursor_mono_mass -= n_c13_offsets * self.mass_c13
            delta_mass = precursor_mono_mass - peptide_mono_mass

        return self.mass_to_ppm(delta_mass, peptide_mono_mass)


    ####################################################################################################
    #### Convert an empirical formula such as C2H3N1O1 or H-1N-1O1 to its monoisotopic mass
    def compute_formula_mass(self, formula):

        formula = formula.strip().replace('+', '')
        if formula.lower() == 'hexnac':
            return 203.079376
        try:
            return mass.calculate_mass(formula=formula)
        except Exception as error:
            eprint(f"ERROR: Unable to compute the mass of formula '{formula}': {error}")
            return 0.0


####################################################################################################
#### For command-line usage
def main():

    argparser = argparse.ArgumentParser(description='Computes the monoisotopic mass of a peptide sequence')
    argparser.add_argument('--charge', action='store', type=int, default=0, help='Report the m/z at this charge (default is neutral mass)')
    argparser.add_argument('--verbose', action='count', help='If set, print more information about ongoing processing' )
    argparser.add_argument('--version', action='version', version='%(prog)s 0.5')
    argparser.add_argument('sequences', type=str, nargs='+', help='One or more clean peptide sequences')
    params = argparser.parse_args()

    calculator = PeptideMassCalculator(verbose=params.verbose)
    for sequence in params.sequences:
        neutral_mass = calculator.compute_sequence_mass(sequence)
        print(f"{sequence}\t{calculator.convolute_mass(neutral_mass, 0, params.charge):.6f}")


#### For command line usage
if __name__ == "__main__": main()
