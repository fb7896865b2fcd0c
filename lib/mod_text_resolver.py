#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import re
from collections import namedtuple

from modification_catalog import ModificationCatalog, NTERM_MOD_TYPES, CTERM_MOD_TYPES, CUSTOM_AA, NO_SYMBOL_MODIFICATION_SYMBOL, NTERM_PEPTIDE_SYMBOL, NTERM_PROTEIN_SYMBOL
from cleavage_state_calculator import CleavageStateCalculator

#### Smallest positive single-precision value, used for mass-difference ties
FLOAT_EPSILON = 1.401298464324817e-45

#### Largest mass difference for an observed delta to match a modification definition
MOD_MASS_MATCH_TOLERANCE = 0.25

ResolvedPeptide = namedtuple('ResolvedPeptide', [ 'peptide', 'total_mod_mass', 'success', 'modifications' ])


####################################################################################################
#### MSGFPlusModTextResolver class
class MSGFPlusModTextResolver:
    """
    Replace the numeric mass deltas of an MS-GF+ or MSGFDB peptide (e.g. K.LQVPAGK+14.016ANPSR.G)
    with modification symbols (K.LQVPAGK#ANPSR.G) and accumulate the total modification mass.

    Static mods are counted but never given a symbol. A delta with no definition within 0.25 Da
    stays in the peptide as numeric text and the result is flagged as unsuccessful; the caller
    decides how to report it (see find_unresolved_mass).
    """

    NTERM_MOD_MASS_REGEX = re.compile(r'^([0-9\.\+\-]+)')
    MOD_MASS_REGEX = re.compile(r'([+-][0-9\.]+)')

    ####################################################################################################
    #### Constructor
    def __init__(self, catalog=None, is_msgf_plus=True, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.catalog = catalog
        if self.catalog is None:
            self.catalog = ModificationCatalog()
        self.is_msgf_plus = is_msgf_plus


    ####################################################################################################
    #### Resolve one peptide, including its prefix and suffix residues when present. MSGFDB protein
    #### N-terminal statics depend on the prefix, so resolve once per protein context
    def resolve(self, peptide):

        total_mod_mass = 0.0
        modifications = []

        #### Remove the prefix and suffix residues, if present
        prefix = ''
        suffix = ''
        if len(peptide) >= 4 and peptide[1] == '.' and peptide[-2] == '.':
            prefix = peptide[:2]
            suffix = peptide[-2:]
            peptide = peptide[2:-2]

        index_last_residue = self.find_last_residue_index(peptide)

        #### Leading deltas are N-terminal mods
        index = 0
        nterm_definitions = []
        match = self.NTERM_MOD_MASS_REGEX.match(peptide)
        if match:
            found, symbols, mod_mass, nterm_definitions = self.convert_mod_masses_to_symbols('-', match.group(1), n_terminal=True, possible_c_terminal=False)
            total_mod_mass += mod_mass
            if found:
                peptide = symbols + peptide[match.end(1):]
                index = len(symbols)
            else:
                index = match.end(1)
            index_last_residue = self.find_last_residue_index(peptide)

        #### Walk the residues, replacing the deltas that follow each one
        current_residue = '-'
        n_residues_seen = 0
        possible_c_terminal = False
        while index < len(peptide):
            character = peptide[index]

            if character.isalpha():
                current_residue = character
                n_residues_seen += 1
                if n_residues_seen == 1:
                    for definition in nterm_definitions:
                        modifications.append(self.build_modification(definition, character, 1))
                if not self.is_msgf_plus:
                    for definition in self.get_unprinted_static_definitions(character, n_residues_seen == 1, prefix):
                        total_mod_mass += definition.mass
                        modifications.append(self.build_modification(definition, character, n_residues_seen))
                index += 1
                if index == index_last_residue:
                    possible_c_terminal = True
                continue

            match = self.MOD_MASS_REGEX.match(peptide, index)
            if match is None:
                index += 1
                continue

            found, symbols, mod_mass, definitions = self.convert_mod_masses_to_symbols(current_residue, match.group(1), n_terminal=False, possible_c_terminal=possible_c_terminal)
            total_mod_mass += mod_mass
            for definition in definitions:
                modifications.append(self.build_modification(definition, current_residue, max(n_residues_seen, 1)))
            if not found:
                index += max(len(match.group(1)), 1)
                continue

            peptide = peptide[:match.start(1)] + symbols + peptide[match.end(1):]
            index += len(symbols)
            index_last_residue = self.find_last_residue_index(peptide)

        #### Move any leading mod symbols to follow the first residue
        peptide = self.relocate_nterminal_symbols(peptide)

        success = self.find_unresolved_mass(peptide) is None
        return ResolvedPeptide(prefix + peptide + suffix, total_mod_mass, success, modifications)


    ####################################################################################################
    #### First numeric mass left in a peptide after resolution, or None. Context residues are ignored
    def find_unresolved_mass(self, peptide):
        if len(peptide) >= 4 and peptide[1] == '.' and peptide[-2] == '.':
            peptide = peptide[2:-2]
        match = self.MOD_MASS_REGEX.search(peptide)
        if match:
            return match.group(1)
        return None


    @staticmethod
    def build_modification(definition, residue, position):
        return { 'residue': residue, 'position': position, 'name': definition.name, 'mass': definition.mass,
            'symbol': definition.symbol, 'definition': definition }


    ####################################################################################################
    #### Index just past the last residue letter, so that a delta found there may be a C-terminal mod
    @staticmethod
    def find_last_residue_index(peptide):
        for index in range(len(peptide) - 1, -1, -1):
            if peptide[index].isalpha():
                return index + 1
        return -1


    ####################################################################################################
    #### MSGFDB does not list static mods in its peptides, so their masses are added per residue
    def get_unprinted_static_definitions(self, residue, is_first_residue, prefix):
        definitions = self.catalog.get_static_residue_definitions(residue)
        if is_first_residue:
            definitions = self.catalog.get_static_terminal_definitions(NTERM_PEPTIDE_SYMBOL) + definitions
            if prefix.startswith('-'):
                definitions = self.catalog.get_static_terminal_definitions(NTERM_PROTEIN_SYMBOL) + definitions
        return definitions


    ####################################################################################################
    #### Convert one run of concatenated deltas, e.g. +15.995+57.021, into symbols.
    #### Returns (found_any_symbol, replacement_text, total_mass_of_the_run, matched_definitions)
    def convert_mod_masses_to_symbols(self, current_residue, mod_digits, n_terminal, possible_c_terminal):

        mod_symbols = ''
        dynamic_mod_symbols = ''
        contains_static_mod = False
        found_symbol = False
        total_mass = 0.0
        matched_definitions = []

        for match in self.MOD_MASS_REGEX.finditer(mod_digits):
            mass_text = match.group(1)
            try:
                mod_mass = float(mass_text)
            except ValueError:
                mod_symbols += mass_text
                dynamic_mod_symbols += mass_text
                continue
            total_mass += mod_mass

            while True:
                best_match = self.find_best_definition(current_residue, mod_mass, n_terminal, possible_c_terminal)
                if best_match is None and n_terminal:
                    n_terminal = False
                elif best_match is None and not possible_c_terminal:
                    possible_c_terminal = True
                else:
                    break

            if best_match is None:
                mod_symbols += mass_text
                dynamic_mod_symbols += mass_text
                continue

            found_symbol = True
            matched_definitions.append(best_match)
            mod_symbols += best_match.symbol
            if best_match.is_static():
                contains_static_mod = True
            else:
                dynamic_mod_symbols += best_match.symbol

        if self.is_msgf_plus and contains_static_mod:
            return found_symbol, dynamic_mod_symbols, total_mass, matched_definitions
        return found_symbol, mod_symbols, total_mass, matched_definitions


    ####################################################################################################
    #### Closest eligible definition within the match tolerance, or None
    def find_best_definition(self, current_residue, mod_mass, n_terminal, possible_c_terminal):

        best_match = None
        best_difference = 0.0
        for definition in self.catalog.definitions:
            if definition.mod_type == CUSTOM_AA:
                continue
            if n_terminal:
                if definition.mod_type not in NTERM_MOD_TYPES:
                    continue
            elif not possible_c_terminal and definition.mod_type in CTERM_MOD_TYPES:
                continue

            difference = abs(definition.mass - mod_mass)
            if difference >= MOD_MASS_MATCH_TOLERANCE:
                continue

            if best_match is None or difference < best_difference:
                best_match = definition
                best_difference = difference
            elif abs(difference - best_difference) < FLOAT_EPSILON and best_match.symbol == NO_SYMBOL_MODIFICATION_SYMBOL and definition.symbol != NO_SYMBOL_MODIFICATION_SYMBOL:
                #### Prefer a dynamic mod on this residue over a static mod that is not on it
                if not best_match.targets_residue(current_residue) and definition.targets_residue(current_residue):
                    best_match = definition

        return best_match


    ####################################################################################################
    #### Mod symbols in front of the first residue belong after it
    @staticmethod
    def relocate_nterminal_symbols(peptide):
        for index, character in enumerate(peptide):
            if character.isalpha():
                if index == 0:
                    return peptide
                return peptide[index] + peptide[:index] + peptide[index + 1:]
        return peptide


####################################################################################################
#### TopPICModTextResolver class
class TopPICModTextResolver:
    """
    Interpret the bracketed mods of a TopPIC proteoform such as M.(AS)[Acetyl]LK[15.995]Q.V

    The proteoform text is kept as is. Each bracket contributes its numeric mass, or the mass of
    the named modification; unknown names are collected in unknown_named_mods and contribute 0.
    A mod that follows a parenthesized group is placed on the first residue of the group.
    """

    BRACKET_MOD_REGEX = re.compile(r'\[(?P<ModMass>[+-]*[0-9\.e-]+)\]|\[(?P<NamedMod>[^\]]+)\]', re.IGNORECASE)

    IN_RESIDUE = 'IN_RESIDUE'
    IN_AMBIGUITY_GROUP = 'IN_AMBIGUITY_GROUP'
    IN_MOD_BRACKET = 'IN_MOD_BRACKET'

    ####################################################################################################
    #### Constructor
    def __init__(self, catalog=None, unknown_named_mods=None, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.catalog = catalog
        if self.catalog is None:
            self.catalog = ModificationCatalog()

        #### Names already reported as unknown
        self.unknown_named_mods = unknown_named_mods
        if self.unknown_named_mods is None:
            self.unknown_named_mods = set()


    ####################################################################################################
    def resolve(self, proteoform):

        primary_sequence, prefix, suffix = CleavageStateCalculator.split_prefix_and_suffix(proteoform)
        modifications = self.locate_modifications(primary_sequence)

        total_mod_mass = 0.0
        success = True
        for modification in modifications:
            total_mod_mass += modification['mass']
            if not modification['known']:
                success = False

        return ResolvedPeptide(proteoform, total_mod_mass, success, modifications)


    ####################################################################################################
    #### Residue letters only, without the context residues or any bracketed mods
    def get_clean_sequence(self, proteoform):
        primary_sequence, prefix, suffix = CleavageStateCalculator.split_prefix_and_suffix(proteoform)
        primary_sequence = self.BRACKET_MOD_REGEX.sub('', primary_sequence)
        return re.sub(r'[^A-Za-z]', '', primary_sequence)


    ####################################################################################################
    #### Walk the sequence with a small state machine, returning one dict per bracketed mod
    def locate_modifications(self, sequence):

        modifications = []
        state = self.IN_RESIDUE
        return_state = self.IN_RESIDUE
        residue_position = 0
        last_residue = ''
        ambiguous_residue = ''
        ambiguous_position = 0
        group_closed = False
        mod_text = ''

        for character in sequence:

            if state == self.IN_MOD_BRACKET:
                if character == ']':
                    if ambiguous_residue != '':
                        target_residue, target_position, is_ambiguous = ambiguous_residue, ambiguous_position, True
                    else:
                        target_residue, target_position, is_ambiguous = last_residue, residue_position, False
                    modifications.append(self.build_modification(mod_text, target_residue, target_position, is_ambiguous))
                    state = return_state
                else:
                    mod_text += character
                continue

            if character == '[':
                return_state = state
                state = self.IN_MOD_BRACKET
                mod_text = ''
                continue

            if character.isalpha():
                residue_position += 1
                last_residue = character
                if state == self.IN_AMBIGUITY_GROUP and ambiguous_residue == '':
                    ambiguous_residue = character
                    ambiguous_position = residue_position
                elif group_closed:
                    ambiguous_residue = ''
                    group_closed = False
                continue

            if character == '(':
                state = self.IN_AMBIGUITY_GROUP
                ambiguous_residue = ''
                group_closed = False
            elif character == ')' and state == self.IN_AMBIGUITY_GROUP:
                state = self.IN_RESIDUE
                group_closed = True

        #### A mod before the first residue belongs to the first residue
        clean_sequence = re.sub(r'[^A-Za-z]', '', self.BRACKET_MOD_REGEX.sub('', sequence))
        for modification in modifications:
            if modification['position'] == 0:
                modification['position'] = 1
                if clean_sequence != '':
                    modification['residue'] = clean_sequence[0]

        return modifications


    ####################################################################################################
    def build_modification(self, mod_text, residue, position, is_ambiguous):

        modification = { 'residue': residue, 'position': position, 'name': mod_text, 'mass': 0.0, 'known': True,
            'ambiguous': is_ambiguous, 'definition': None }

        match = self.BRACKET_MOD_REGEX.fullmatch(f"[{mod_text}]")
        if match and match.group('ModMass') is not None:
            try:
                modification['mass'] = float(match.group('ModMass'))
                return modification
            except ValueError:
                pass

        modification['definition'] = self.catalog.find_definition_by_name(mod_text)
        found, mod_mass = self.catalog.lookup_modification_mass_by_name(mod_text)
        if found:
            modification['mass'] = mod_mass
            return modification

        #### Unknown names contribute no mass; the caller reports each name once
        modification['known'] = False
        if mod_text not in self.unknown_named_mods:
            self.unknown_named_mods.add(mod_text)
            if self.verbose >= 1:
                eprint(f"INFO: Unrecognized named mod: {mod_text}")
        return modification
