#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os
import argparse
import re

from peptide_mass_calculator import PeptideMassCalculator

#### Modification types as reported in the parameter files
STATIC_MOD = 'StaticMod'
DYNAMIC_MOD = 'DynamicMod'
DYN_NTERM_PEPTIDE = 'DynNTermPeptide'
DYN_CTERM_PEPTIDE = 'DynCTermPeptide'
DYN_NTERM_PROTEIN = 'DynNTermProtein'
DYN_CTERM_PROTEIN = 'DynCTermProtein'
CUSTOM_AA = 'CustomAA'

DYNAMIC_MOD_TYPES = [ DYNAMIC_MOD, DYN_NTERM_PEPTIDE, DYN_CTERM_PEPTIDE, DYN_NTERM_PROTEIN, DYN_CTERM_PROTEIN ]
NTERM_MOD_TYPES = [ DYN_NTERM_PEPTIDE, DYN_NTERM_PROTEIN ]
CTERM_MOD_TYPES = [ DYN_CTERM_PEPTIDE, DYN_CTERM_PROTEIN ]

#### Target symbols for terminal modifications
NTERM_PEPTIDE_SYMBOL = '<'
CTERM_PEPTIDE_SYMBOL = '>'
NTERM_PROTEIN_SYMBOL = '['
CTERM_PROTEIN_SYMBOL = ']'
ANY_RESIDUE_SYMBOL = '*'
TERMINUS_TARGET_SYMBOLS = NTERM_PEPTIDE_SYMBOL + CTERM_PEPTIDE_SYMBOL + NTERM_PROTEIN_SYMBOL + CTERM_PROTEIN_SYMBOL

#### Symbols handed out to dynamic modifications, in order
DEFAULT_MODIFICATION_SYMBOLS = '*#@$&!%~^`+='
NO_SYMBOL_MODIFICATION_SYMBOL = '-'
LAST_RESORT_MODIFICATION_SYMBOL = '_'
UNKNOWN_MODIFICATION_SYMBOL = '?'

#### Mass correction tags that may be referenced by name in search results
COMMON_MODIFICATION_MASSES = {
    'Acetyl': 42.010565,
    'Acetylation': 42.010565,
    'Amidated': -0.984016,
    'Ammonia-loss': -17.026549,
    'Biotin': 226.077598,
    'Carbamidomethyl': 57.021464,
    'Carbamidomethylation': 57.021464,
    'Carbamyl': 43.005814,
    'Deamidated': 0.984016,
    'Deamidation': 0.984016,
    'Dehydrated': -18.010565,
    'Dimethyl': 28.031300,
    'Dimethylation': 28.031300,
    'Dioxidation': 31.989829,
    'Formyl': 27.994915,
    'Gln->pyro-Glu': -17.026549,
    'Glu->pyro-Glu': -18.010565,
    'GlyGly': 114.042927,
    'Hex': 162.052824,
    'HexNAc': 203.079373,
    'iTRAQ4plex': 144.102063,
    'iTRAQ8plex': 304.205360,
    'Methyl': 14.015650,
    'Methylation': 14.015650,
    'Nitro': 44.985078,
    'Oxidation': 15.994915,
    'Phospho': 79.966331,
    'Phosphorylation': 79.966331,
    'Sulfo': 79.956815,
    'TMT': 224.152478,
    'TMT6plex': 229.162932,
    'TMTpro': 304.207146,
    'Trimethyl': 42.046950,
    'Trimethylation': 42.046950,
    'Trioxidation': 47.984744,
}


####################################################################################################
#### ModificationDefinition class
class ModificationDefinition:

    ####################################################################################################
    #### Constructor
    def __init__(self, name='', mass_text='', mass=0.0, residues='', mod_type=DYNAMIC_MOD, symbol=UNKNOWN_MODIFICATION_SYMBOL, unimod_id=None):
        self.name = name
        self.mass_text = mass_text
        self.mass = mass
        self.residues = residues
        self.mod_type = mod_type
        self.symbol = symbol
        self.unimod_id = unimod_id


    def is_static(self):
        return self.mod_type == STATIC_MOD


    def is_dynamic(self):
        return self.mod_type in DYNAMIC_MOD_TYPES


    def targets_residue(self, residue):
        return residue is not None and residue != '' and residue in self.residues


    ####################################################################################################
    #### Static mods on a terminus rather than on residues
    def is_terminal_static(self):
        if not self.is_static():
            return False
        for residue in self.residues:
            if residue in TERMINUS_TARGET_SYMBOLS:
                return True
        return False


    ####################################################################################################
    #### One-letter type code used in the modification summary file
    def get_type_symbol(self):
        if self.is_dynamic():
            return 'D'
        if not self.is_static():
            return '?'
        if NTERM_PROTEIN_SYMBOL in self.residues or CTERM_PROTEIN_SYMBOL in self.residues:
            return 'P'
        if self.is_terminal_static():
            return 'T'
        return 'S'


    def __repr__(self):
        return f"ModificationDefinition(name='{self.name}', mass={self.mass}, residues='{self.residues}', mod_type='{self.mod_type}', symbol='{self.symbol}')"


####################################################################################################
#### ModificationCatalog class
class ModificationCatalog:

    ####################################################################################################
    #### Constructor
    def __init__(self, definitions=None, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.definitions = []
        if definitions is not None:
            for definition in definitions:
                self.add_definition(definition)


    ####################################################################################################
    def add_definition(self, definition):
        self.definitions.append(definition)


    @property
    def modification_count(self):
        return len(self.definitions)


    def get_modification_by_index(self, index):
        return self.definitions[index]


    def get_modification_type_by_index(self, index):
        return self.definitions[index].mod_type


    ####################################################################################################
    #### Assign a symbol to every definition. Static mods get the no-symbol marker, dynamic mods of
    #### the same mass (to 3 decimal places) share one symbol
    def assign_symbols(self):

        symbols_by_mass = {}
        available_symbols = list(DEFAULT_MODIFICATION_SYMBOLS)

        for definition in self.definitions:
            if definition.is_static() or definition.mod_type == CUSTOM_AA:
                definition.symbol = NO_SYMBOL_MODIFICATION_SYMBOL
                continue

            mass_key = f"{definition.mass:.3f}"
            if mass_key in symbols_by_mass:
                definition.symbol = symbols_by_mass[mass_key]
                continue

            if len(available_symbols) > 0:
                definition.symbol = available_symbols.pop(0)
            else:
                eprint(f"WARNING: Ran out of modification symbols; using '{LAST_RESORT_MODIFICATION_SYMBOL}' for {definition.name}")
                definition.symbol = LAST_RESORT_MODIFICATION_SYMBOL
            symbols_by_mass[mass_key] = definition.symbol

        if self.verbose >= 1:
            for definition in self.definitions:
                eprint(f"INFO: Modification {definition.name} {definition.mass:.4f} on '{definition.residues}' ({definition.mod_type}) uses symbol '{definition.symbol}'")


    ####################################################################################################
    #### Look up a modification mass by name, first in the catalog and then in the common names
    def lookup_modification_mass_by_name(self, name):

        definition = self.find_definition_by_name(name)
        if definition is not None:
            return True, definition.mass

        lower_name = name.strip().lower()
        for common_name, common_mass in COMMON_MODIFICATION_MASSES.items():
            if common_name.lower() == lower_name:
                return True, common_mass

        return False, 0.0


    def find_definition_by_name(self, name):
        lower_name = name.strip().lower()
        for definition in self.definitions:
            if definition.name.lower() == lower_name:
                return definition
        return None


    ####################################################################################################
    #### Static residue mods on a residue (used when the search engine does not print them)
    def get_static_residue_definitions(self, residue):
        return [ definition for definition in self.definitions
            if definition.is_static() and not definition.is_terminal_static() and definition.targets_residue(residue) ]


    def get_static_residue_mass(self, residue):
        return sum([ definition.mass for definition in self.get_static_residue_definitions(residue) ], 0.0)


    def get_static_terminal_definitions(self, target_symbol):
        return [ definition for definition in self.definitions
            if definition.is_terminal_static() and definition.targets_residue(target_symbol) ]


    def get_static_terminal_mass(self, target_symbol):
        return sum([ definition.mass for definition in self.get_static_terminal_definitions(target_symbol) ], 0.0)


####################################################################################################
#### ParamFileModExtractor class
class ParamFileModExtractor:
    """
    Extract modification definitions from a search engine parameter file.

    Supports the MS-GF+ format (mass or formula, residues, fix|opt|custom, position, name), used in
    MS-GF+ parameter files and Mods.txt files, and the TopPIC format (name, mass, residues,
    position, UniMod ID), with the modification type taken from the StaticMod= or DynamicMod= tag.
    """

    PARAM_TAG_MOD_STATIC = 'StaticMod'
    PARAM_TAG_MOD_DYNAMIC = 'DynamicMod'
    PARAM_TAG_CUSTOM_AA = 'CustomAA'

    ####################################################################################################
    #### Constructor
    def __init__(self, tool_name='MS-GF+', mass_calculator=None, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.tool_name = tool_name
        self.mass_calculator = mass_calculator
        if self.mass_calculator is None:
            self.mass_calculator = PeptideMassCalculator()
        self.error_message = ''
        self.warnings = []
        self.unnamed_mod_id = 0


    ####################################################################################################
    #### Read the parameter file and return (success, list of ModificationDefinition)
    def extract_mod_info_from_param_file(self, param_file, mod_spec_format='msgfplus'):

        definitions = []
        self.error_message = ''
        self.unnamed_mod_id = 0

        if mod_spec_format not in [ 'msgfplus', 'toppic' ]:
            self.report_error(f"Mod spec format {mod_spec_format} not recognized; unable to extract mods from {param_file}")
            return False, definitions

        if param_file is None or param_file == '':
            self.report_error(f"{self.tool_name} parameter file name not defined; unable to extract mod info")
            return False, definitions

        if not os.path.isfile(param_file):
            self.report_error(f"{self.tool_name} param file not found: {param_file}")
            return False, definitions

        with open(param_file) as infile:
            for line in infile:
                trimmed_line = line.strip()
                if trimmed_line == '' or trimmed_line.startswith('#'):
                    continue

                mod_type, mod_spec = self.get_tagged_mod_spec(trimmed_line)

                #### Lines without a tag may come from a Mods.txt file, which specify mods with ,opt, or ,fix,
                if mod_spec is None:
                    line_no_spaces = self.trim_comment(trimmed_line).replace(' ', '')
                    if ',opt,' in line_no_spaces:
                        mod_type, mod_spec = DYNAMIC_MOD, line_no_spaces
                    elif ',fix,' in line_no_spaces:
                        mod_type, mod_spec = STATIC_MOD, line_no_spaces
                    elif ',custom,' in line_no_spaces:
                        mod_type, mod_spec = CUSTOM_AA, line_no_spaces

                if mod_spec is None or mod_spec == '':
                    continue

                if '=' in mod_spec:
                    self.report_error(f"Mod spec '{mod_spec}' contains an unknown keyword before the equals sign; see parameter file {os.path.basename(param_file)}")
                    return False, definitions

                split_line = mod_spec.split(',')
                if len(split_line) < 5:
                    continue

                if mod_spec_format == 'msgfplus':
                    definition = self.parse_mod_spec_msgfplus(split_line)
                else:
                    definition = self.parse_mod_spec_toppic(split_line, mod_type)
                if definition is not None:
                    definitions.append(definition)

        if self.verbose >= 1:
            eprint(f"INFO: Extracted {len(definitions)} modification definitions from {param_file}")
        return True, definitions


    ####################################################################################################
    #### Return (mod_type, spec) when the line starts with one of the known tags, else (None, None)
    def get_tagged_mod_spec(self, line):

        for tag_name, mod_type in [ (self.PARAM_TAG_MOD_STATIC, STATIC_MOD), (self.PARAM_TAG_MOD_DYNAMIC, DYNAMIC_MOD), (self.PARAM_TAG_CUSTOM_AA, CUSTOM_AA) ]:
            match = re.match(rf'^{tag_name}\s*=(.*)$', line, re.IGNORECASE)
            if not match:
                continue
            mod_spec = self.trim_comment(match.group(1)).strip()
            if mod_spec == '' or mod_spec.lower() == 'none':
                return mod_type, ''
            return mod_type, mod_spec

        return None, None


    @staticmethod
    def trim_comment(text):
        if '#' in text:
            return text[:text.index('#')].strip()
        return text.strip()


    ####################################################################################################
    #### Parse mass,residues,fix|opt|custom,position,name
    def parse_mod_spec_msgfplus(self, split_line):

        mass_text = split_line[0].strip()
        try:
            mod_mass = float(mass_text)
        except ValueError:
            mod_mass = self.mass_calculator.compute_formula_mass(mass_text)

        residues = split_line[1].strip()
        type_text = split_line[2].strip().lower()
        if type_text == 'opt':
            mod_type = DYNAMIC_MOD
        elif type_text == 'fix':
            mod_type = STATIC_MOD
        elif type_text == 'custom':
            mod_type = CUSTOM_AA
        else:
            self.report_warning(f"Unrecognized Mod Type {split_line[2]} in the {self.tool_name} parameter file; should be 'opt', 'fix', or 'custom'; will assume 'opt'")
            mod_type = DYNAMIC_MOD

        if mod_type != CUSTOM_AA:
            residues, mod_type = self.apply_mod_position(split_line[3], residues, mod_type, allow_protein_terminus=True)

        name = self.get_mod_name(split_line[4])
        return ModificationDefinition(name=name, mass_text=mass_text, mass=mod_mass, residues=residues, mod_type=mod_type)


    ####################################################################################################
    #### Parse name,mass,residues,position,unimod
    def parse_mod_spec_toppic(self, split_line, mod_type):

        mass_text = split_line[1].strip()
        try:
            mod_mass = float(mass_text)
        except ValueError:
            self.report_warning(f"Non-numeric mod mass in the {self.tool_name} parameter file: {','.join(split_line)}")
            return None

        residues = split_line[2].strip()
        residues, mod_type = self.apply_mod_position(split_line[3], residues, mod_type, allow_protein_terminus=False)
        name = self.get_mod_name(split_line[0])

        unimod_id = None
        try:
            unimod_id = int(split_line[4].strip())
        except ValueError:
            pass

        return ModificationDefinition(name=name, mass_text=mass_text, mass=mod_mass, residues=residues, mod_type=mod_type, unimod_id=unimod_id)


    ####################################################################################################
    #### Translate the position keyword into terminus target symbols and terminal mod types
    def apply_mod_position(self, position_text, residues, mod_type, allow_protein_terminus):

        position = position_text.strip().lower().replace('-', '')
        terminal_positions = {
            'nterm': (NTERM_PEPTIDE_SYMBOL, DYN_NTERM_PEPTIDE),
            'cterm': (CTERM_PEPTIDE_SYMBOL, DYN_CTERM_PEPTIDE),
        }
        if allow_protein_terminus:
            terminal_positions['protnterm'] = (NTERM_PROTEIN_SYMBOL, DYN_NTERM_PROTEIN)
            terminal_positions['protcterm'] = (CTERM_PROTEIN_SYMBOL, DYN_CTERM_PROTEIN)

        if position == 'any':
            return residues, mod_type

        if position not in terminal_positions:
            if allow_protein_terminus:
                expected = "'any', 'N-term', 'C-term', 'Prot-N-term', or 'Prot-C-term'"
            else:
                expected = "'any', 'N-term', or 'C-term'"
            self.report_warning(f"Unrecognized Mod Position {position_text} in the {self.tool_name} parameter file; should be {expected}")
            return residues, mod_type

        target_symbol, terminal_mod_type = terminal_positions[position]

        #### A static mod on specific residues at a terminus can only be searched as a dynamic mod
        if mod_type == STATIC_MOD and residues != ANY_RESIDUE_SYMBOL:
            mod_type = DYNAMIC_MOD
        if mod_type == DYNAMIC_MOD:
            mod_type = terminal_mod_type

        return target_symbol, mod_type


    def get_mod_name(self, name):
        if name is None or name.strip() == '':
            self.unnamed_mod_id += 1
            return f"UnnamedMod{self.unnamed_mod_id}"
        return name.strip()


    ####################################################################################################
    def report_error(self, message):
        self.error_message = message
        eprint(f"ERROR: {message}")


    def report_warning(self, message):
        self.warnings.append(message)
        eprint(f"WARNING: {message}")


####################################################################################################
#### For command-line usage
def main():

    argparser = argparse.ArgumentParser(description='Lists the modifications defined in a search engine parameter file')
    argparser.add_argument('--format', action='store', default='msgfplus', help='Mod spec format: msgfplus or toppic (default msgfplus)')
    argparser.add_argument('--verbose', action='count', help='If set, print more information about ongoing processing' )
    argparser.add_argument('--version', action='version', version='%(prog)s 0.5')
    argparser.add_argument('param_file', type=str, help='Parameter file to read')
    params = argparser.parse_args()

    extractor = ParamFileModExtractor(verbose=params.verbose)
    success, definitions = extractor.extract_mod_info_from_param_file(params.param_file, params.format)
    if not success:
        return

    catalog = ModificationCatalog(definitions)
    catalog.assign_symbols()
    for definition in catalog.definitions:
        print(f"{definition.symbol}\t{definition.mass:.6f}\t{definition.residues}\t{definition.mod_type}\t{definition.name}")


#### For command line usage
if __name__ == "__main__": main()
