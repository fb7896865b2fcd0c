#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import re


####################################################################################################
#### CleavageStateCalculator class
class CleavageStateCalculator:
    """
    Sequence context helpers for peptides written as prefix.PEPTIDE.suffix
    and the trypsin cleavage state (number of tryptic termini) of such peptides.
    """

    CLEAVAGE_FULL = 2
    CLEAVAGE_PARTIAL = 1
    CLEAVAGE_NONSPECIFIC = 0

    TERMINUS_SYMBOLS = '-[]'

    ####################################################################################################
    #### Constructor
    def __init__(self, cleavage_residues='KR', exception_residues='P', verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.cleavage_residues = cleavage_residues
        self.exception_residues = exception_residues


    ####################################################################################################
    #### Split X.PEPTIDE.Y into ('PEPTIDE', 'X', 'Y')
    @staticmethod
    def split_prefix_and_suffix(sequence):

        sequence = sequence.strip()
        if sequence.startswith('..'):
            sequence = sequence[1:]
        if sequence.endswith('..'):
            sequence = sequence[:-1]

        first_period = sequence.find('.')
        last_period = sequence.rfind('.')

        if first_period >= 0 and last_period > first_period + 1:
            return sequence[first_period + 1:last_period], sequence[:first_period], sequence[last_period + 1:]

        return sequence, '', ''


    ####################################################################################################
    #### Return only the residue letters of a peptide, dropping context residues and mod symbols
    @staticmethod
    def get_clean_sequence(sequence):
        primary_sequence, prefix, suffix = CleavageStateCalculator.split_prefix_and_suffix(sequence)
        return re.sub(r'[^A-Za-z]', '', primary_sequence)


    ####################################################################################################
    def is_cleavage_site(self, left_residue, right_residue):
        return left_residue in self.cleavage_residues and right_residue not in self.exception_residues


    ####################################################################################################
    #### Count the tryptic termini of a peptide given with its context residues
    def compute_cleavage_state(self, sequence):

        primary_sequence, prefix, suffix = self.split_prefix_and_suffix(sequence)
        clean_sequence = re.sub(r'[^A-Za-z]', '', primary_sequence).upper()
        if clean_sequence == '':
            return self.CLEAVAGE_NONSPECIFIC

        prefix_residue = self.nearest_context_residue(prefix, from_end=True)
        suffix_residue = self.nearest_context_residue(suffix, from_end=False)

        first_residue = clean_sequence[0]
        last_residue = clean_sequence[-1]
        prefix_is_terminus = prefix_residue in self.TERMINUS_SYMBOLS
        suffix_is_terminus = suffix_residue in self.TERMINUS_SYMBOLS

        if prefix_is_terminus and suffix_is_terminus:
            return self.CLEAVAGE_FULL

        if prefix_is_terminus:
            if self.is_cleavage_site(last_residue, suffix_residue):
                return self.CLEAVAGE_FULL
            return self.CLEAVAGE_NONSPECIFIC

        if suffix_is_terminus:
            if self.is_cleavage_site(prefix_residue, first_residue):
                return self.CLEAVAGE_FULL
            return self.CLEAVAGE_NONSPECIFIC

        n_termini = 0
        if self.is_cleavage_site(prefix_residue, first_residue):
            n_termini += 1
        if self.is_cleavage_site(last_residue, suffix_residue):
            n_termini += 1
        return n_termini


    ####################################################################################################
    #### Find the letter or terminus symbol adjacent to the peptide in a context string
    def nearest_context_residue(self, context, from_end):

        characters = reversed(context) if from_end else iter(context)
        for character in characters:
            if character.isalpha():
                return character.upper()
            if character in self.TERMINUS_SYMBOLS:
                return character
        return '-'
